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
Wire contract for forwarding envelopes to the intelligence backend.

The agent never sends anything itself. The integrating backend forwards
each envelope as:

    POST https://<intelligence-host>/v1/userInsights/web?cstate=true
    authorization:        Basic base64(apiKey:apiSecret)
    client-ip-forwarded:  end-user IP (omitted when unknown)
    client-ts-millis:     request timestamp, epoch milliseconds
    tenant-id:            the envelope IV, 32 lowercase hex characters
    sdk-version-code:     fixed version code
    sdk-version-name:     fixed version name
    content-type:         text/plain

    <envelope encodedData, raw>

The backend takes the decryption IV from the tenant-id header, so the
header must always carry the IV of the envelope in the body.
"""

from __future__ import annotations

import base64
import ipaddress
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from signalguard.config import AgentConfig, AgentSettings, get_settings
from signalguard.security.crypto import BLOCK_SIZE, EncryptionEnvelope, Plaintext, seal_payload
from signalguard.security.masking import mask_headers

USER_INSIGHTS_PATH = "/v1/userInsights/web"
USER_INSIGHTS_QUERY = "cstate=true"
CONTENT_TYPE = "text/plain"

HEADER_AUTHORIZATION = "authorization"
HEADER_CLIENT_IP = "client-ip-forwarded"
HEADER_TIMESTAMP = "client-ts-millis"
HEADER_TENANT_ID = "tenant-id"
HEADER_VERSION_CODE = "sdk-version-code"
HEADER_VERSION_NAME = "sdk-version-name"
HEADER_CONTENT_TYPE = "content-type"

REQUIRED_HEADERS = (
    HEADER_AUTHORIZATION,
    HEADER_TIMESTAMP,
    HEADER_TENANT_ID,
    HEADER_VERSION_CODE,
    HEADER_VERSION_NAME,
    HEADER_CONTENT_TYPE,
)

_TENANT_ID_RE = re.compile(r"[0-9a-f]{32}")


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to forward one envelope over HTTP."""

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    method: str = "POST"

    def __repr__(self) -> str:
        return (
            f"RequestDescriptor(method={self.method!r}, url={self.url!r}, "
            f"headers={mask_headers(self.headers)!r}, body=<{len(self.body)} chars>)"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "headers": dict(self.headers),
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RequestDescriptor":
        """Build a descriptor from its dict form.

        Raises:
            ValueError: If "headers" is present but not a mapping
        """
        headers = data.get("headers") or {}
        if not isinstance(headers, Mapping):
            raise ValueError(f"headers must be an object, got {type(headers).__name__}")
        return cls(
            url=str(data.get("url", "")),
            headers={str(k): str(v) for k, v in headers.items()},
            body=str(data.get("body", "")),
            method=str(data.get("method", "POST")),
        )


def user_insights_url(host: str) -> str:
    """Build the user-insights endpoint URL for a host."""
    return f"https://{host}{USER_INSIGHTS_PATH}?{USER_INSIGHTS_QUERY}"


def basic_authorization(api_key: str, api_secret: str) -> str:
    """Build the Basic authorization header value."""
    token = base64.b64encode(f"{api_key}:{api_secret}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def build_request_descriptor(
    config: AgentConfig,
    envelope: EncryptionEnvelope,
    client_ip: Optional[str] = None,
    timestamp_ms: Optional[int] = None,
    settings: Optional[AgentSettings] = None,
) -> RequestDescriptor:
    """
    Build the request that forwards `envelope` to the backend.

    Args:
        config: Session configuration the envelope was sealed with
        envelope: Envelope from encrypt()
        client_ip: End-user IP as seen by the integrating backend; without
            it the backend returns no IP intelligence
        timestamp_ms: Request timestamp; defaults to now
        settings: Settings providing hosts and version identifiers

    Returns:
        RequestDescriptor ready to be sent
    """
    settings = settings or get_settings()
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    headers = {
        HEADER_AUTHORIZATION: basic_authorization(config.api_key, config.api_secret),
        HEADER_TIMESTAMP: str(timestamp_ms),
        HEADER_TENANT_ID: envelope.iv,
        HEADER_VERSION_CODE: settings.sdk_version_code,
        HEADER_VERSION_NAME: settings.sdk_version_name,
        HEADER_CONTENT_TYPE: CONTENT_TYPE,
    }
    if client_ip:
        headers[HEADER_CLIENT_IP] = client_ip

    return RequestDescriptor(
        url=user_insights_url(settings.host_for(config.environment)),
        headers=headers,
        body=envelope.encoded_data,
    )


def prepare_request(
    config: AgentConfig,
    payload: Plaintext,
    client_ip: Optional[str] = None,
    settings: Optional[AgentSettings] = None,
) -> RequestDescriptor:
    """Seal a signal payload and build its request in one step."""
    envelope = seal_payload(config, payload)
    return build_request_descriptor(config, envelope, client_ip=client_ip, settings=settings)


def _check_url(url: str, issues: List[str]) -> None:
    parts = urlsplit(url)
    if parts.scheme != "https":
        issues.append(f"URL scheme must be https, got {parts.scheme!r}")
    if not parts.netloc:
        issues.append("URL has no host")
    if parts.path != USER_INSIGHTS_PATH:
        issues.append(f"URL path must be {USER_INSIGHTS_PATH}, got {parts.path!r}")
    if parse_qs(parts.query).get("cstate") != ["true"]:
        issues.append("URL query must contain cstate=true")


def _check_authorization(value: str, issues: List[str]) -> None:
    scheme, _, token = value.partition(" ")
    if scheme != "Basic" or not token:
        issues.append("authorization must use the Basic scheme")
        return
    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except ValueError:
        issues.append("authorization token is not valid base64")
        return
    key, sep, secret = decoded.partition(":")
    if not sep or not key or not secret:
        issues.append("authorization token must encode apiKey:apiSecret")


def _check_body(body: str, issues: List[str]) -> None:
    try:
        raw = base64.b64decode(body, validate=True)
    except ValueError:
        issues.append("body is not valid base64")
        return
    if not raw or len(raw) % BLOCK_SIZE:
        issues.append(f"body must decode to a positive multiple of {BLOCK_SIZE} bytes, got {len(raw)}")


def validate_request_descriptor(descriptor: RequestDescriptor) -> Tuple[bool, List[str]]:
    """
    Check a request against the backend wire contract.

    Header names are compared case-insensitively.

    Returns:
        Tuple of (is_valid, list_of_issues)
    """
    issues: List[str] = []
    headers = {k.lower(): v for k, v in descriptor.headers.items()}

    if descriptor.method.upper() != "POST":
        issues.append(f"method must be POST, got {descriptor.method!r}")
    _check_url(descriptor.url, issues)

    for name in REQUIRED_HEADERS:
        if not headers.get(name):
            issues.append(f"missing header: {name}")

    if headers.get(HEADER_AUTHORIZATION):
        _check_authorization(headers[HEADER_AUTHORIZATION], issues)

    tenant_id = headers.get(HEADER_TENANT_ID)
    if tenant_id and not _TENANT_ID_RE.fullmatch(tenant_id):
        issues.append("tenant-id must be the 32-character lowercase hex IV")

    timestamp = headers.get(HEADER_TIMESTAMP)
    if timestamp and not (timestamp.isascii() and timestamp.isdigit()):
        issues.append("client-ts-millis must be epoch milliseconds")

    content_type = headers.get(HEADER_CONTENT_TYPE)
    if content_type and content_type != CONTENT_TYPE:
        issues.append(f"content-type must be {CONTENT_TYPE}, got {content_type!r}")

    client_ip = headers.get(HEADER_CLIENT_IP)
    if client_ip is not None:
        try:
            ipaddress.ip_address(client_ip)
        except ValueError:
            issues.append(f"client-ip-forwarded is not an IP address: {client_ip!r}")

    _check_body(descriptor.body, issues)

    return len(issues) == 0, issues
