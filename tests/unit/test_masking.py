# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for credential masking."""

import pytest

from signalguard.security.masking import MASK_LENGTH, mask_headers, mask_secret


class TestMaskSecret:
    """Tests for mask_secret()."""

    def test_long_value_keeps_prefix(self):
        assert mask_secret("sk_live_1234567890") == "sk" + "*" * MASK_LENGTH

    @pytest.mark.parametrize("value", ["k1", "sec1", "12345678"])
    def test_short_value_fully_masked(self, value):
        assert mask_secret(value) == "*" * MASK_LENGTH

    def test_empty_value(self):
        assert mask_secret("") == ""

    def test_length_not_revealed(self):
        assert len(mask_secret("a" * 20)) == len(mask_secret("a" * 200))


class TestMaskHeaders:
    """Tests for mask_headers()."""

    def test_authorization_scheme_kept(self):
        masked = mask_headers({"authorization": "Basic azE6c2VjMQ==", "tenant-id": "00" * 16})

        assert masked["authorization"] == "Basic ********"
        assert masked["tenant-id"] == "00" * 16

    def test_header_name_case_insensitive(self):
        masked = mask_headers({"Authorization": "Basic azE6c2VjMQ=="})
        assert masked["Authorization"] == "Basic ********"

    def test_schemeless_value(self):
        masked = mask_headers({"x-api-key": "key_live_0123456789"})
        assert masked["x-api-key"] == "ke********"

    def test_input_not_modified(self):
        headers = {"authorization": "Basic abc"}
        mask_headers(headers)
        assert headers == {"authorization": "Basic abc"}
