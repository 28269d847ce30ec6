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
Signal sources for SignalGuard.

Example:
    >>> from signalguard.signals import HostSignalSource
    >>> client = await signalguard.init(config, source=HostSignalSource())
"""

from signalguard.signals.base import (
    CollectionContext,
    SignalPayload,
    SignalSource,
    StaticSignalSource,
    build_payload,
    fingerprint_hash,
)
from signalguard.signals.host import HostSignalSource
from signalguard.signals.page import PROBE_SCRIPT, PageSignalSource

__all__ = [
    "CollectionContext",
    "SignalPayload",
    "SignalSource",
    "StaticSignalSource",
    "build_payload",
    "fingerprint_hash",
    "HostSignalSource",
    "PageSignalSource",
    "PROBE_SCRIPT",
]
