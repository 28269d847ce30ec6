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
Pydantic models for the intelligence backend's user-insights response.

Field names on the wire are camelCase; the models expose snake_case
attributes and accept either form on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RiskScore(str, Enum):
    """Backend risk assessment."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class IpIntelligence(BaseModel):
    """Network intelligence for the forwarded client IP."""

    model_config = ConfigDict(populate_by_name=True)

    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_vpn: bool = Field(default=False, alias="isVPN")
    is_tor: bool = Field(default=False, alias="isTor")
    is_proxy: bool = Field(default=False, alias="isProxy")
    ip: Optional[str] = None


class BrowserDetections(BaseModel):
    """Browser-level detections computed from the signals."""

    model_config = ConfigDict(populate_by_name=True)

    is_incognito: bool = Field(default=False, alias="isIncognito")
    is_privacy_focused: bool = Field(default=False, alias="isPrivacyFocused")
    is_bot_detected: bool = Field(default=False, alias="isBotDetected")
    is_ad_blocker_enabled: bool = Field(default=False, alias="isAdBlockerEnabled")
    is_user_agent_spoofed: bool = Field(default=False, alias="isUserAgentSpoofed")


class UserInsights(BaseModel):
    """Response to a forwarded envelope."""

    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(alias="requestId")
    new_device: bool = Field(default=False, alias="newDevice")
    fingerprint: str
    session_id: str = Field(alias="sessionId")
    created_at: int = Field(alias="createdAt", description="Epoch seconds")
    risk_score: RiskScore = Field(alias="riskScore")
    first_seen_days: int = Field(default=0, alias="firstSeenDays")
    # Absent when no client-ip-forwarded header was sent
    ip_intelligence: Optional[IpIntelligence] = Field(default=None, alias="ipIntelligence")
    browser_detections: BrowserDetections = Field(
        default_factory=BrowserDetections, alias="browserDetections"
    )
