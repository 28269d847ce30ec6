# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception hierarchy for SignalGuard.

Every failure the agent can report derives from SignalGuardError so that
integrators can catch the whole family with a single handler:

- ConfigurationError: initialization input missing or invalid
- SessionStateError: retrieval attempted on a client that is not ready
- CollectionError: a signal source failed or was denied a capability
- CryptoUnavailableError: the runtime lacks a required crypto primitive
- EncodingError: a payload could not be serialized to bytes
- ForwardingError: the optional forwarder could not deliver a request
"""

from __future__ import annotations

from typing import Optional


class SignalGuardError(Exception):
    """Base class for all SignalGuard errors."""


class ConfigurationError(SignalGuardError):
    """Raised when a required configuration field is missing or invalid.

    Attributes:
        field: Public (camelCase) name of the first offending field
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class SessionStateError(SignalGuardError):
    """Raised when an operation is not allowed in the session's current state."""


class CollectionError(SignalGuardError):
    """Raised when a collection cycle fails. Safe to retry."""


class CryptoUnavailableError(SignalGuardError):
    """Raised when key derivation or encryption primitives are unavailable."""


class EncodingError(SignalGuardError):
    """Raised when a signal payload cannot be serialized."""


class ForwardingError(SignalGuardError):
    """Raised when forwarding a request to the intelligence backend fails.

    Attributes:
        status: HTTP status code, or None for transport-level failures
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status
