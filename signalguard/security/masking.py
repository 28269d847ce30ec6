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
Credential masking for logs and reprs.

API keys and secrets travel with every session configuration. They must
never reach a log line or an exception message in clear text.

Example:
    >>> mask_secret("sk_live_1234567890")
    'sk********'
    >>> mask_headers({"authorization": "Basic abc123=="})
    {'authorization': 'Basic ********'}
"""

from __future__ import annotations

from typing import Dict, Mapping

MASK_CHARACTER = "*"
MASK_LENGTH = 8

# Header names whose values carry credentials
SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "x-api-key"})


def mask_secret(value: str, visible: int = 2) -> str:
    """
    Mask a credential, keeping at most `visible` leading characters.

    Short values are masked entirely so that nothing meaningful leaks.
    The mask has a fixed length so the real length is not revealed either.
    """
    if not value:
        return ""
    if len(value) <= visible * 4:
        return MASK_CHARACTER * MASK_LENGTH
    return value[:visible] + MASK_CHARACTER * MASK_LENGTH


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Return a copy of `headers` with credential-bearing values masked."""
    masked: Dict[str, str] = {}
    for name, value in headers.items():
        if name.lower() in SENSITIVE_HEADERS:
            scheme, _, _ = value.partition(" ")
            masked[name] = f"{scheme} {MASK_CHARACTER * MASK_LENGTH}" if scheme != value else mask_secret(value)
        else:
            masked[name] = value
    return masked
