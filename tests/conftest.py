# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""
Shared test fixtures for the SignalGuard test suite.

This module provides common fixtures used across all test categories:
- Sample session configurations
- Mock Playwright page objects
- Counting and failing signal sources
- An envelope decryption helper playing the backend's role
"""

from __future__ import annotations

import base64
import os
from typing import Any, Callable, Dict, List, Optional

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

import signalguard.config as config_module
from signalguard.config import AgentConfig, validate_config
from signalguard.security.crypto import EncryptionEnvelope, SymmetricKey
from signalguard.signals.base import CollectionContext, SignalPayload, SignalSource
from signalguard.utils.logger import logger


# ==================== Environment Setup ====================

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    os.environ.setdefault("SIGNALGUARD_LOG_LEVEL", "warning")
    yield


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop cached global settings between tests."""
    config_module._settings = None
    yield
    config_module._settings = None


@pytest.fixture(autouse=True)
def restore_logger():
    """Put the package logger back after tests that reconfigure it."""
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


# ==================== Configurations ====================

@pytest.fixture
def config_dict() -> Dict[str, str]:
    """A complete, valid session configuration mapping."""
    return {
        "environment": "PROD",
        "sessionIdentifier": "s1",
        "apiKey": "k1",
        "apiSecret": "sec1",
    }


@pytest.fixture
def agent_config(config_dict) -> AgentConfig:
    """The validated form of config_dict."""
    return validate_config(config_dict)


# ==================== Signal Sources ====================

class CountingSignalSource(SignalSource):
    """Signal source that records every collection cycle."""

    platform = "test"

    def __init__(self, fingerprint: str = "abc"):
        self.fingerprint = fingerprint
        self.contexts: List[CollectionContext] = []

    @property
    def calls(self) -> int:
        return len(self.contexts)

    async def collect(self, context: CollectionContext) -> SignalPayload:
        self.contexts.append(context)
        return {
            "f": self.fingerprint,
            "a": {"sessionId": context.session_identifier, "requestId": context.request_id},
            "additionalParams": dict(context.additional_params),
        }


class FailingSignalSource(SignalSource):
    """Signal source that always raises."""

    platform = "test"

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error or PermissionError("storage access denied")
        self.calls = 0

    async def collect(self, context: CollectionContext) -> SignalPayload:
        self.calls += 1
        raise self.error


@pytest.fixture
def counting_source() -> CountingSignalSource:
    return CountingSignalSource()


@pytest.fixture
def failing_source() -> FailingSignalSource:
    return FailingSignalSource()


# ==================== Mock Browser/Page ====================

PROBE_RESULT: Dict[str, Any] = {
    "navigator": {
        "userAgent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) Chrome/131.0.0.0",
        "platform": "MacIntel",
        "language": "en-US",
        "languages": ["en-US", "en"],
        "hardwareConcurrency": 8,
        "deviceMemory": 8,
        "maxTouchPoints": 0,
        "cookieEnabled": True,
        "doNotTrack": None,
        "webdriver": False,
        "pluginCount": 5,
    },
    "screen": {
        "width": 1920,
        "height": 1080,
        "availWidth": 1920,
        "availHeight": 1055,
        "colorDepth": 24,
        "pixelRatio": 2,
    },
    "timezone": {"name": "America/Los_Angeles", "offset": 480},
}


class MockPage:
    """Mock Playwright page for testing."""

    def __init__(self, result: Any = None):
        self.result = PROBE_RESULT if result is None else result
        self.expressions: List[str] = []

    async def evaluate(self, expression: str) -> Any:
        """Evaluate JavaScript."""
        self.expressions.append(expression)
        return self.result


@pytest.fixture
def mock_page() -> MockPage:
    """Create a mock page."""
    return MockPage()


# ==================== Backend Decryption ====================

def _decrypt(key: SymmetricKey, envelope: EncryptionEnvelope) -> bytes:
    iv = bytes.fromhex(envelope.iv)
    ciphertext = base64.b64decode(envelope.encoded_data)
    decryptor = Cipher(algorithms.AES(key.material), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


@pytest.fixture
def decrypt() -> Callable[[SymmetricKey, EncryptionEnvelope], bytes]:
    """Decrypt an envelope the way the intelligence backend does."""
    return _decrypt
