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
Session lifecycle and signal retrieval.

A SessionClient moves through a small state machine:

    UNINITIALIZED -> INITIALIZING -> READY
                                  -> FAILED

Initialization validates the configuration exactly once. A READY client
exposes get(); a FAILED client exposes nothing and re-raises the original
ConfigurationError on every further initialize() call. Every outcome,
success or failure, is delivered through the awaited coroutine.

Example:
    >>> import signalguard
    >>> client = await signalguard.init({
    ...     "environment": "PROD",
    ...     "sessionIdentifier": "s1",
    ...     "apiKey": "k1",
    ...     "apiSecret": "sec1",
    ... })
    >>> payload = await client.get()
    >>> payload["f"]
    '3b1f...'
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Mapping, Optional, Union

from signalguard.config import AgentConfig, validate_config
from signalguard.exceptions import CollectionError, ConfigurationError, SessionStateError
from signalguard.signals.base import CollectionContext, SignalPayload, SignalSource
from signalguard.signals.host import HostSignalSource
from signalguard.utils.logger import logger, register_secret

ConfigInput = Union[AgentConfig, Mapping[str, Any]]


class SessionState(str, Enum):
    """Lifecycle states of a SessionClient."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class SessionClient:
    """
    Handle for one user session's signal collection.

    Each get() call runs exactly one collection cycle against the signal
    source. Nothing is cached between calls and concurrent calls are
    independent of each other.

    Args:
        config: Candidate configuration (mapping or AgentConfig)
        source: Signal source; defaults to HostSignalSource
    """

    def __init__(self, config: ConfigInput, source: Optional[SignalSource] = None) -> None:
        self._candidate = config
        self._source = source or HostSignalSource()
        self._config: Optional[AgentConfig] = None
        self._state = SessionState.UNINITIALIZED
        self._error: Optional[ConfigurationError] = None
        self._init_lock = asyncio.Lock()
        self._collections = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> AgentConfig:
        """The validated configuration. Only available once READY."""
        self._ensure_ready()
        return self._config

    @property
    def source(self) -> SignalSource:
        return self._source

    @property
    def collection_count(self) -> int:
        """Number of collection cycles started on this client."""
        return self._collections

    def _ensure_ready(self) -> None:
        if self._state != SessionState.READY:
            raise SessionStateError(
                f"Session is {self._state.value}; initialize() must succeed before use"
            )

    async def initialize(self) -> "SessionClient":
        """
        Validate the configuration and move to READY.

        Safe to call more than once: a READY client returns itself and a
        FAILED client raises the same ConfigurationError again.

        Returns:
            This client, in state READY

        Raises:
            ConfigurationError: If the configuration is missing or invalid
        """
        async with self._init_lock:
            if self._state == SessionState.READY:
                return self
            if self._state == SessionState.FAILED:
                raise self._error

            self._state = SessionState.INITIALIZING
            # Completion is always asynchronous, even though validation is not
            await asyncio.sleep(0)

            try:
                self._config = validate_config(self._candidate)
            except ConfigurationError as e:
                self._state = SessionState.FAILED
                self._error = e
                logger.warning(f"Session initialization failed: {e}")
                raise

            register_secret(self._config.api_key)
            register_secret(self._config.api_secret)
            self._candidate = None
            self._state = SessionState.READY
            logger.info(
                "Session ready",
                extra={
                    "session_id": self._config.session_identifier,
                    "environment": self._config.environment.value,
                    "platform": self._source.platform,
                },
            )
            return self

    async def get(self, additional_params: Optional[Mapping[str, Any]] = None) -> SignalPayload:
        """
        Run one collection cycle and return the raw signal payload.

        Args:
            additional_params: Extra key/values copied into the payload's
                "additionalParams" entry

        Returns:
            Signal payload mapping

        Raises:
            SessionStateError: If the client is not READY
            CollectionError: If the signal source failed
        """
        self._ensure_ready()

        context = CollectionContext(
            session_identifier=self._config.session_identifier,
            environment=self._config.environment,
            additional_params=dict(additional_params or {}),
        )
        self._collections += 1
        logger.debug(
            "Collecting signals",
            extra={"session_id": context.session_identifier, "request_id": context.request_id},
        )

        try:
            payload = await self._source.collect(context)
        except CollectionError as e:
            logger.warning(f"Signal collection failed: {e}")
            raise
        except Exception as e:
            logger.warning(f"Signal collection failed: {e}")
            raise CollectionError(f"Signal collection failed: {e}") from e

        if not isinstance(payload, Mapping):
            raise CollectionError(
                f"Signal source returned {type(payload).__name__}, expected a mapping"
            )
        return dict(payload)


async def init(config: ConfigInput, source: Optional[SignalSource] = None) -> SessionClient:
    """
    Create and initialize a SessionClient.

    Args:
        config: Session configuration (environment, sessionIdentifier,
            apiKey, apiSecret)
        source: Signal source; defaults to HostSignalSource

    Returns:
        A READY SessionClient

    Raises:
        ConfigurationError: If the configuration is missing or invalid
    """
    client = SessionClient(config, source=source)
    return await client.initialize()
