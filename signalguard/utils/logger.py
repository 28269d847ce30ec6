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
Logging for SignalGuard.

All records pass through a RedactingFilter before they are formatted, so
Basic authorization tokens and any API credential registered with
register_secret() never reach an output stream in clear text.

Session-scoped fields are attached with ``extra=``:

    logger.info("Session ready", extra={"session_id": "s1", "environment": "PROD"})

The JSON formatter lifts the known fields (session_id, request_id,
environment, platform) to the top level and nests anything else under
"context".
"""

import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Set

__all__ = [
    "logger",
    "setup_logger",
    "configure_logging",
    "get_log_level",
    "register_secret",
    "LogFormat",
    "RedactingFilter",
]

LOGGER_NAME = "signalguard"

# Fields promoted to the top level of JSON records
SESSION_FIELDS = ("session_id", "request_id", "environment", "platform")

_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

_BASIC_TOKEN_RE = re.compile(r"(Basic\s+)[A-Za-z0-9+/=]+")
_REDACTED = "********"

_secrets: Set[str] = set()


class LogFormat(str, Enum):
    """Supported log output formats."""

    JSON = "json"
    HUMAN = "human"
    TEXT = "text"


def register_secret(value: Optional[str]) -> None:
    """Redact `value` from every subsequent log record."""
    if value and len(value) >= 4:
        _secrets.add(value)


def redact(text: str) -> str:
    """Mask Basic tokens and registered secrets in `text`."""
    text = _BASIC_TOKEN_RE.sub(rf"\g<1>{_REDACTED}", text)
    # Longest first so a secret containing another is masked whole
    for secret in sorted(_secrets, key=len, reverse=True):
        text = text.replace(secret, _REDACTED)
    return text


class RedactingFilter(logging.Filter):
    """Rewrites each record's message with credentials masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def _record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }

        extras = _record_extras(record)
        for name in SESSION_FIELDS:
            if name in extras:
                entry[name] = extras.pop(name)
        if extras:
            entry["context"] = extras

        if record.exc_info:
            entry["exception"] = redact(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Console formatter; colors only when stdout is a TTY."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"[{record.levelname:>8}]"
        if self.use_colors:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        line = f"{datetime.fromtimestamp(record.created):%H:%M:%S} {level} {record.getMessage()}"

        session_id = getattr(record, "session_id", None)
        if session_id:
            line += f" (session={session_id})"

        if record.exc_info:
            line += "\n" + redact(self.formatException(record.exc_info))
        return line


class TextFormatter(logging.Formatter):
    """Plain text formatter."""

    def __init__(self):
        super().__init__(fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def get_log_level(level_str: str) -> int:
    """Map a level name to its logging constant; unknown names give INFO."""
    level = logging.getLevelName(level_str.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def get_formatter(log_format: LogFormat, use_colors: bool = True) -> logging.Formatter:
    """Get the formatter for the specified format."""
    if log_format == LogFormat.HUMAN:
        return HumanFormatter(use_colors=use_colors)
    if log_format == LogFormat.TEXT:
        return TextFormatter()
    return JsonFormatter()


def _install_handler(log: logging.Logger, level: int, formatter: logging.Formatter) -> None:
    log.setLevel(level)
    log.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(RedactingFilter())
    log.addHandler(handler)


def configure_logging(
    level: Optional[str] = None,
    log_format: Optional[LogFormat] = None,
    human_readable: bool = False,
) -> None:
    """
    Reconfigure the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            defaults to the log_level setting
        log_format: Output format; defaults to the log_format setting
        human_readable: Force the human format regardless of log_format
    """
    if level is None or log_format is None:
        from signalguard.config import get_settings

        settings = get_settings()
        level = level or settings.log_level
        log_format = log_format or settings.log_format
    if human_readable:
        log_format = LogFormat.HUMAN
    _install_handler(logger, get_log_level(level), get_formatter(LogFormat(log_format)))


def setup_logger(
    name: str = LOGGER_NAME,
    level: int = logging.INFO,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Create a logger honoring SIGNALGUARD_LOG_LEVEL and SIGNALGUARD_LOG_FORMAT.

    Args:
        name: Logger name
        level: Level used when SIGNALGUARD_LOG_LEVEL is unset
        format_string: Custom format string; overrides SIGNALGUARD_LOG_FORMAT

    Returns:
        Configured logger instance
    """
    env_level = os.environ.get("SIGNALGUARD_LOG_LEVEL")
    if env_level:
        level = get_log_level(env_level)

    if format_string is not None:
        formatter: logging.Formatter = logging.Formatter(format_string)
    else:
        env_format = os.environ.get("SIGNALGUARD_LOG_FORMAT", LogFormat.JSON.value).lower()
        try:
            formatter = get_formatter(LogFormat(env_format))
        except ValueError:
            formatter = JsonFormatter()

    log = logging.getLogger(name)
    _install_handler(log, level, formatter)
    return log


# Default logger instance
logger = setup_logger()
