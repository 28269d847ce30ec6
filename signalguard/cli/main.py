#!/usr/bin/env python3
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
SignalGuard CLI.

Usage:
    signalguard collect [OPTIONS]        # Collect host signals and seal them
    signalguard check-request FILE       # Validate a request descriptor JSON
    signalguard version                  # Show version information

Examples:
    # Print the request an integrating backend would forward
    signalguard collect --session-id s1 --api-key k1 --api-secret sec1

    # Print only the raw signal payload
    signalguard collect --session-id s1 --api-key k1 --api-secret sec1 --payload-only

    # Credentials can come from the environment
    SIGNALGUARD_API_KEY=k1 SIGNALGUARD_API_SECRET=sec1 signalguard collect --session-id s1
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Any, Dict, List, Optional

from signalguard.config import load_settings_from_file
from signalguard.exceptions import SignalGuardError
from signalguard.request import (
    RequestDescriptor,
    build_request_descriptor,
    validate_request_descriptor,
)
from signalguard.security.crypto import seal_payload
from signalguard.security.masking import mask_headers
from signalguard.session import init
from signalguard.utils.logger import configure_logging, logger


def get_version() -> str:
    """Get the SignalGuard version."""
    import signalguard
    return getattr(signalguard, "__version__", "unknown")


def _run_async(coro: Any) -> Any:
    """Run an async coroutine from sync context."""
    return asyncio.run(coro)


def _parse_params(pairs: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options."""
    params: Dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        params[key] = value
    return params


async def _collect(config: Dict[str, Any], params: Dict[str, str]):
    client = await init(config)
    payload = await client.get(additional_params=params)
    return client.config, payload


def cmd_collect(args: argparse.Namespace) -> int:
    """Collect host signals and print the sealed request."""
    config = {
        "environment": args.environment,
        "sessionIdentifier": args.session_id,
        "apiKey": args.api_key,
        "apiSecret": args.api_secret,
    }

    try:
        params = _parse_params(args.param)
        agent_config, payload = _run_async(_collect(config, params))

        if args.payload_only:
            print(json.dumps(payload, indent=2))
            return 0

        envelope = seal_payload(agent_config, payload)
        descriptor = build_request_descriptor(agent_config, envelope, client_ip=args.client_ip)
    except (SignalGuardError, ValueError) as e:
        logger.error(f"Collection failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = descriptor.to_dict()
    if args.masked:
        output["headers"] = mask_headers(descriptor.headers)
    print(json.dumps(output, indent=2))
    return 0


def cmd_check_request(args: argparse.Namespace) -> int:
    """Validate a request descriptor stored as JSON."""
    try:
        with open(args.file, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    if not isinstance(data, dict):
        print("Error: request descriptor must be a JSON object", file=sys.stderr)
        return 1

    try:
        descriptor = RequestDescriptor.from_dict(data)
    except ValueError as e:
        print(f"Error: malformed request descriptor: {e}", file=sys.stderr)
        return 1

    is_valid, issues = validate_request_descriptor(descriptor)
    if is_valid:
        print("Request descriptor is valid")
        return 0

    print("Request descriptor is invalid:")
    for issue in issues:
        print(f"  - {issue}")
    return 1


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    version = get_version()

    if args.json:
        import platform
        info = {
            "signalguard": version,
            "python": platform.python_version(),
            "platform": platform.system(),
            "architecture": platform.machine(),
        }
        print(json.dumps(info, indent=2))
    else:
        print(f"SignalGuard {version}")

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="signalguard",
        description="SignalGuard - fraud-signal collection agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  collect        Collect host signals and print the sealed request
  check-request  Validate a request descriptor JSON file
  version        Show version information
""",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Load settings from a YAML or JSON file",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=os.environ.get("SIGNALGUARD_LOG_LEVEL"),
        help="Set logging level (default: the settings file level, else WARNING)",
    )
    parser.add_argument(
        "--human-readable", "--human",
        action="store_true",
        default=os.environ.get("SIGNALGUARD_LOG_FORMAT", "json").lower() == "human",
        help="Use human-readable log format instead of JSON",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # collect command
    collect_parser = subparsers.add_parser(
        "collect",
        help="Collect host signals and print the sealed request",
    )
    collect_parser.add_argument(
        "--environment",
        default=os.environ.get("SIGNALGUARD_ENVIRONMENT", "PROD"),
        help="Backend environment: PROD or STAGE (default: PROD)",
    )
    collect_parser.add_argument("--session-id", help="Session identifier")
    collect_parser.add_argument(
        "--api-key",
        default=os.environ.get("SIGNALGUARD_API_KEY"),
        help="API key (default: $SIGNALGUARD_API_KEY)",
    )
    collect_parser.add_argument(
        "--api-secret",
        default=os.environ.get("SIGNALGUARD_API_SECRET"),
        help="API secret (default: $SIGNALGUARD_API_SECRET)",
    )
    collect_parser.add_argument("--client-ip", help="End-user IP for the client-ip-forwarded header")
    collect_parser.add_argument(
        "--param", "-p",
        action="append",
        metavar="KEY=VALUE",
        help="Additional parameter to include in the payload (repeatable)",
    )
    collect_parser.add_argument(
        "--payload-only",
        action="store_true",
        help="Print the raw signal payload instead of the sealed request",
    )
    collect_parser.add_argument(
        "--masked",
        action="store_true",
        help="Mask credentials in the printed headers",
    )
    collect_parser.set_defaults(func=cmd_collect)

    # check-request command
    check_parser = subparsers.add_parser(
        "check-request",
        help="Validate a request descriptor JSON file",
    )
    check_parser.add_argument("file", help="Path to the descriptor JSON")
    check_parser.set_defaults(func=cmd_check_request)

    # version command
    version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
    )
    version_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    version_parser.set_defaults(func=cmd_version)

    return parser


def main() -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    level = args.log_level
    if args.config:
        try:
            settings = load_settings_from_file(args.config)
        except (OSError, ValueError) as e:
            print(f"Error: cannot load settings from {args.config}: {e}", file=sys.stderr)
            sys.exit(1)
        level = level or settings.log_level

    configure_logging(
        level=(level or "WARNING").upper(),
        human_readable=args.human_readable,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
