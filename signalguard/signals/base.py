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
Signal source interface and payload assembly.

A signal source produces one raw payload per collection cycle. The payload
is a short-keyed mapping whose schema belongs to the intelligence backend:

    f                 fingerprint hash over the stable components
    c                 stable device/browser components
    a                 per-call attributes (session id, request id, timestamp)
    ze                timezone name and UTC offset
    v                 agent version
    p                 probe platform ("host", "web", ...)
    additionalParams  integrator-supplied extras

Sources are read-only: collecting never mutates shared state, so any
number of collections may run concurrently.
"""

from __future__ import annotations

import copy
import hashlib
import json
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from signalguard.config import Environment, get_settings

SignalPayload = Dict[str, Any]


@dataclass(frozen=True)
class CollectionContext:
    """Per-call inputs handed to a signal source."""

    session_identifier: str
    environment: Environment
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    additional_params: Dict[str, Any] = field(default_factory=dict)


class SignalSource(ABC):
    """Produces one raw signal payload per collection cycle."""

    #: Short platform tag written to the payload's "p" key
    platform: str = "unknown"

    @abstractmethod
    async def collect(self, context: CollectionContext) -> SignalPayload:
        """Run one collection cycle and return the payload."""


def fingerprint_hash(components: Mapping[str, Any]) -> str:
    """Get a stable hash of fingerprint components (32 hex characters)."""
    data = json.dumps(components, sort_keys=True, default=str)
    return hashlib.sha256(data.encode()).hexdigest()[:32]


def build_payload(
    context: CollectionContext,
    components: Mapping[str, Any],
    timezone: Mapping[str, Any],
    platform: str,
    version: Optional[str] = None,
) -> SignalPayload:
    """Assemble the short-keyed payload from probe results."""
    return {
        "f": fingerprint_hash(components),
        "c": dict(components),
        "a": {
            "sessionId": context.session_identifier,
            "requestId": context.request_id,
            "environment": context.environment.value,
            "collectedAt": int(time.time() * 1000),
        },
        "ze": dict(timezone),
        "v": version or get_settings().sdk_version_name,
        "p": platform,
        "additionalParams": dict(context.additional_params),
    }


class StaticSignalSource(SignalSource):
    """
    Serves a payload collected elsewhere, e.g. by the browser agent.

    Each call returns an independent deep copy, with the per-call
    additional parameters merged into "additionalParams".
    """

    platform = "static"

    def __init__(self, payload: Mapping[str, Any]) -> None:
        self._payload = copy.deepcopy(dict(payload))

    async def collect(self, context: CollectionContext) -> SignalPayload:
        payload = copy.deepcopy(self._payload)
        if context.additional_params:
            extras = dict(payload.get("additionalParams") or {})
            extras.update(context.additional_params)
            payload["additionalParams"] = extras
        return payload
