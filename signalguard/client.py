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
Forwarding client for integrating backends.

The agent itself never transmits signals. This client is for the
integrating backend, which receives the envelope from its front end and
forwards it to the intelligence service. Each request is sent exactly
once: retry policy belongs to the integrator.

Example:
    >>> from signalguard.client import InsightsClient
    >>> from signalguard.request import build_request_descriptor
    >>>
    >>> descriptor = build_request_descriptor(config, envelope, client_ip="203.0.113.7")
    >>> async with InsightsClient() as client:
    ...     insights = await client.send(descriptor)
    ...     print(insights.risk_score)
"""

from __future__ import annotations

from typing import Any, Optional

import aiohttp
from pydantic import ValidationError

from signalguard.config import get_settings
from signalguard.exceptions import ForwardingError
from signalguard.models import UserInsights
from signalguard.request import RequestDescriptor
from signalguard.security.masking import mask_headers
from signalguard.utils.logger import logger


class InsightsClient:
    """HTTP client that forwards request descriptors to the backend.

    Args:
        timeout: Request timeout in seconds; defaults to the request_timeout setting
        session: Existing aiohttp session to use instead of creating one
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else get_settings().request_timeout
        self._session = session
        self._owns_session = session is None

    # ==================== Lifecycle ====================

    async def start(self) -> None:
        """Open the HTTP session if one was not supplied."""
        if self._session is not None:
            return
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        self._owns_session = True

    async def stop(self) -> None:
        """Close the HTTP session if this client opened it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "InsightsClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()

    # ==================== Forwarding ====================

    async def send(self, descriptor: RequestDescriptor) -> UserInsights:
        """
        Forward one request and parse the user-insights response.

        Raises:
            RuntimeError: If the client is not started
            ForwardingError: On transport errors, non-2xx responses or
                malformed response bodies
        """
        if self._session is None:
            raise RuntimeError("Client not started")

        logger.debug(
            f"Forwarding {descriptor.method} {descriptor.url} "
            f"headers={mask_headers(descriptor.headers)}"
        )

        try:
            async with self._session.request(
                descriptor.method,
                descriptor.url,
                data=descriptor.body.encode("ascii"),
                headers=descriptor.headers,
            ) as response:
                if response.status >= 300:
                    text = await response.text()
                    logger.error(f"Intelligence backend returned {response.status}: {text[:200]}")
                    raise ForwardingError(
                        f"Intelligence backend returned {response.status}",
                        status=response.status,
                    )
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Forwarding failed: {e}")
            raise ForwardingError(f"Forwarding failed: {e}") from e

        try:
            return UserInsights.model_validate(data)
        except ValidationError as e:
            raise ForwardingError(f"Malformed user-insights response: {e}") from e
