"""Log in to the telematics API and print the access token.

Usage:
    python -m integrations.telematics.cli
    python -m integrations.telematics.cli --json --reveal -v
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from common.logging import configure_logging

from . import TIMEOUT_SECONDS
from .config import load_credentials
from .errors import ConfigError, TelematicsAuthError
from .handshake import authenticate
from .http import TelematicsHTTP
from .schemas import LoginResult

_LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_AUTH_FAILED = 1
EXIT_CONFIG = 2


def redact(value: Optional[str]) -> Optional[str]:
    if value and len(value) > 12:
        return value[:4] + "…" + value[-4:]
    return "****" if value else value


def _render(result: LoginResult, *, as_json: bool, reveal: bool) -> str:
    if not as_json:
        return result.access_token if reveal else redact(result.access_token)

    data = result.model_dump(mode="json")
    if not reveal:
        data["access_token"] = redact(data["access_token"])
        data["refresh_token"] = redact(data["refresh_token"])
    return json.dumps(data, indent=2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Telematics API login handshake")
    parser.add_argument("--env-file", help="dotenv file with EMAIL/PASSWORD (default: .env.local or .env)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=TIMEOUT_SECONDS,
        help=f"HTTP timeout in seconds (default: {TIMEOUT_SECONDS})",
    )
    parser.add_argument("--json", action="store_true", help="Print the whole login result as JSON")
    parser.add_argument("--reveal", action="store_true", help="Print tokens unredacted")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    return parser


async def run(args: argparse.Namespace) -> int:
    try:
        creds = load_credentials(args.env_file)
    except ConfigError as e:
        _LOG.error(str(e))
        return EXIT_CONFIG

    async with TelematicsHTTP(timeout=args.timeout) as http:
        try:
            result = await authenticate(creds.account_identifier, creds.secret, http=http)
        except TelematicsAuthError as e:
            _LOG.error("login failed (%s): %s", e.stage, e)
            return EXIT_AUTH_FAILED

    print(_render(result, as_json=args.json, reveal=args.reveal))
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(service_name="telematics-auth", level="DEBUG" if args.verbose else None)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
