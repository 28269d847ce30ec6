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
SignalGuard - fraud-signal collection agent.

Collects device and browser signals for a user session, seals them into an
encrypted envelope and describes the request an integrating backend uses
to forward that envelope to the risk-intelligence service.
"""

__version__ = "1.3.0"
__author__ = "Firefly Software Solutions Inc"
__license__ = "Apache-2.0"

from signalguard.config import (
    AgentConfig,
    AgentSettings,
    Environment,
    get_settings,
    validate_config,
)
from signalguard.exceptions import (
    CollectionError,
    ConfigurationError,
    CryptoUnavailableError,
    EncodingError,
    ForwardingError,
    SessionStateError,
    SignalGuardError,
)
from signalguard.request import (
    RequestDescriptor,
    build_request_descriptor,
    prepare_request,
    validate_request_descriptor,
)
from signalguard.security.crypto import (
    EncryptionEnvelope,
    SymmetricKey,
    derive_key,
    derive_session_key,
    encrypt,
    seal_payload,
)
from signalguard.session import SessionClient, SessionState, init
from signalguard.signals import (
    HostSignalSource,
    PageSignalSource,
    SignalSource,
    StaticSignalSource,
)

__all__ = [
    # Configuration
    "AgentConfig",
    "AgentSettings",
    "Environment",
    "get_settings",
    "validate_config",
    # Session
    "SessionClient",
    "SessionState",
    "init",
    # Signal sources
    "HostSignalSource",
    "PageSignalSource",
    "SignalSource",
    "StaticSignalSource",
    # Encryption
    "EncryptionEnvelope",
    "SymmetricKey",
    "derive_key",
    "derive_session_key",
    "encrypt",
    "seal_payload",
    # Wire contract
    "RequestDescriptor",
    "build_request_descriptor",
    "prepare_request",
    "validate_request_descriptor",
    # Errors
    "CollectionError",
    "ConfigurationError",
    "CryptoUnavailableError",
    "EncodingError",
    "ForwardingError",
    "SessionStateError",
    "SignalGuardError",
]
