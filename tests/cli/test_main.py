# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the signalguard command line."""

import argparse
import json
from typing import Any, Dict
from unittest.mock import MagicMock, patch

import pytest

from signalguard.cli.main import (
    _parse_params,
    cmd_check_request,
    cmd_collect,
    cmd_version,
    create_parser,
    main,
)
from signalguard.request import RequestDescriptor, prepare_request, validate_request_descriptor
from signalguard.security.crypto import EncryptionEnvelope, derive_key


def _collect_args(**overrides: Any) -> argparse.Namespace:
    values: Dict[str, Any] = {
        "environment": "PROD",
        "session_id": "s1",
        "api_key": "k1",
        "api_secret": "sec1",
        "client_ip": None,
        "param": None,
        "payload_only": False,
        "masked": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestParseParams:
    """Tests for KEY=VALUE option parsing."""

    def test_pairs(self):
        assert _parse_params(["orderId=o-1", "note=a=b"]) == {"orderId": "o-1", "note": "a=b"}

    def test_none(self):
        assert _parse_params(None) == {}

    @pytest.mark.parametrize("pair", ["orderId", "=value"])
    def test_malformed(self, pair):
        with pytest.raises(ValueError, match="KEY=VALUE"):
            _parse_params([pair])


class TestCollectCommand:
    """Tests for the collect command."""

    def test_prints_valid_request(self, capsys, decrypt):
        result = cmd_collect(_collect_args(client_ip="203.0.113.7"))

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert output["method"] == "POST"
        assert output["headers"]["client-ip-forwarded"] == "203.0.113.7"

        descriptor = RequestDescriptor.from_dict(output)
        assert validate_request_descriptor(descriptor)[0]

        envelope = EncryptionEnvelope(encoded_data=descriptor.body, iv=descriptor.headers["tenant-id"])
        payload = json.loads(decrypt(derive_key("k1", "sec1"), envelope))
        assert payload["a"]["sessionId"] == "s1"

    def test_payload_only(self, capsys):
        result = cmd_collect(_collect_args(payload_only=True, param=["orderId=o-1"]))

        assert result == 0
        payload = json.loads(capsys.readouterr().out)
        assert "f" in payload
        assert payload["additionalParams"] == {"orderId": "o-1"}

    def test_masked_headers(self, capsys):
        result = cmd_collect(_collect_args(masked=True))

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert output["headers"]["authorization"] == "Basic ********"

    def test_missing_credential(self, capsys):
        result = cmd_collect(_collect_args(api_secret=None))

        assert result == 1
        assert "apiSecret" in capsys.readouterr().err

    def test_bad_param(self, capsys):
        result = cmd_collect(_collect_args(param=["broken"]))

        assert result == 1
        assert "KEY=VALUE" in capsys.readouterr().err


class TestCheckRequestCommand:
    """Tests for the check-request command."""

    def test_valid_file(self, tmp_path, capsys, agent_config):
        descriptor = prepare_request(agent_config, {"f": "abc"}, client_ip="203.0.113.7")
        path = tmp_path / "request.json"
        path.write_text(json.dumps(descriptor.to_dict()))

        result = cmd_check_request(argparse.Namespace(file=str(path)))

        assert result == 0
        assert "valid" in capsys.readouterr().out

    def test_invalid_file_lists_issues(self, tmp_path, capsys, agent_config):
        data = prepare_request(agent_config, {"f": "abc"}).to_dict()
        data["headers"]["content-type"] = "application/json"
        path = tmp_path / "request.json"
        path.write_text(json.dumps(data))

        result = cmd_check_request(argparse.Namespace(file=str(path)))

        assert result == 1
        out = capsys.readouterr().out
        assert "invalid" in out
        assert "  - content-type" in out

    def test_unreadable_file(self, tmp_path, capsys):
        result = cmd_check_request(argparse.Namespace(file=str(tmp_path / "missing.json")))

        assert result == 1
        assert "cannot read" in capsys.readouterr().err

    def test_non_object(self, tmp_path, capsys):
        path = tmp_path / "request.json"
        path.write_text("[1, 2]")

        assert cmd_check_request(argparse.Namespace(file=str(path))) == 1

    def test_headers_not_an_object(self, tmp_path, capsys, agent_config):
        data = prepare_request(agent_config, {"f": "abc"}).to_dict()
        data["headers"] = ["x"]
        path = tmp_path / "request.json"
        path.write_text(json.dumps(data))

        result = cmd_check_request(argparse.Namespace(file=str(path)))

        assert result == 1
        assert "headers must be an object" in capsys.readouterr().err

    def test_non_ascii_body_reported_as_issue(self, tmp_path, capsys, agent_config):
        data = prepare_request(agent_config, {"f": "abc"}).to_dict()
        data["body"] = "\u00e9" * 24
        path = tmp_path / "request.json"
        path.write_text(json.dumps(data))

        result = cmd_check_request(argparse.Namespace(file=str(path)))

        assert result == 1
        assert "body is not valid base64" in capsys.readouterr().out


class TestVersionCommand:
    """Tests for the version command."""

    def test_plain(self, capsys):
        assert cmd_version(argparse.Namespace(json=False)) == 0
        assert "SignalGuard 1.3.0" in capsys.readouterr().out

    def test_json(self, capsys):
        assert cmd_version(argparse.Namespace(json=True)) == 0
        info = json.loads(capsys.readouterr().out)
        assert info["signalguard"] == "1.3.0"
        assert "python" in info


class TestParser:
    """Tests for argument parsing and main()."""

    def test_collect_arguments(self, monkeypatch):
        monkeypatch.setenv("SIGNALGUARD_API_KEY", "env-key")
        parser = create_parser()

        args = parser.parse_args(
            ["collect", "--session-id", "s9", "--api-secret", "x", "-p", "a=1", "-p", "b=2"]
        )

        assert args.func is cmd_collect
        assert args.api_key == "env-key"
        assert args.session_id == "s9"
        assert args.param == ["a=1", "b=2"]
        assert args.environment == "PROD"

    def test_check_request_arguments(self):
        args = create_parser().parse_args(["check-request", "req.json"])
        assert args.func is cmd_check_request
        assert args.file == "req.json"

    def test_main_without_command_prints_help(self, capsys):
        with patch("sys.argv", ["signalguard"]), patch("signalguard.cli.main.configure_logging"):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 0
        assert "collect" in capsys.readouterr().out

    def test_main_dispatches(self):
        handler = MagicMock(return_value=3)

        with patch("sys.argv", ["signalguard", "version"]), \
                patch("signalguard.cli.main.cmd_version", handler), \
                patch("signalguard.cli.main.configure_logging"):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 3
        handler.assert_called_once()

    def test_main_config_file_sets_log_level(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SIGNALGUARD_LOG_LEVEL", raising=False)
        path = tmp_path / "settings.yaml"
        path.write_text("log_level: DEBUG\nprod_host: cli.example\n")
        configure = MagicMock()

        with patch("sys.argv", ["signalguard", "--config", str(path), "version"]), \
                patch("signalguard.cli.main.configure_logging", configure), \
                patch("signalguard.cli.main.cmd_version", MagicMock(return_value=0)):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 0
        assert configure.call_args.kwargs["level"] == "DEBUG"

    def test_main_explicit_log_level_wins(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("log_level: DEBUG\n")
        configure = MagicMock()

        argv = ["signalguard", "--config", str(path), "--log-level", "error", "version"]
        with patch("sys.argv", argv), \
                patch("signalguard.cli.main.configure_logging", configure), \
                patch("signalguard.cli.main.cmd_version", MagicMock(return_value=0)):
            with pytest.raises(SystemExit):
                main()

        assert configure.call_args.kwargs["level"] == "ERROR"

    def test_main_missing_config_file(self, tmp_path, capsys):
        argv = ["signalguard", "--config", str(tmp_path / "missing.yaml"), "version"]

        with patch("sys.argv", argv), patch("signalguard.cli.main.configure_logging"):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "cannot load settings" in capsys.readouterr().err
