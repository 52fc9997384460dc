"""
CLI entry point for the NaMi API client.
Handles argument parsing, configuration from the environment, and output formatting.
"""

import os
import sys
import json
import logging
import argparse

import requests
from dotenv import load_dotenv
from keyring.errors import KeyringError

from nami_api.client import NamiClient
from nami_api.config import resolve
from nami_api.credentials import KeyringStorage, get_storage_backend
from nami_api.errors import ConfigValidationError, NamiError

logger = logging.getLogger(__name__)


# ─── Argument Parsing ────────────────────────────────────────────────────────


def query_pair(value: str) -> tuple[str, str]:
    """Parse a KEY=VALUE query argument."""
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, val


def parse_args(argv=None):
    """Parse command-line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:]). Testable.
    """
    parser = argparse.ArgumentParser(
        description="NaMi CLI: call services of the NaMi REST API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  NAMI_USER_ID, NAMI_PASSWORD, NAMI_PRODUCTION, NAMI_VERSION, NAMI_TIMEOUT
  (also read from a .env file in the current directory)

Examples:
  %(prog)s --auth-only
  %(prog)s /nami/gruppierungen/filtered-for-navigation/gruppierung/node/root
  %(prog)s /nami/search-multi/result-list --query limit=10 start=0
  %(prog)s /nami/mitglied/filtered-for-navigation/gruppierung/gruppierung/1234 --output json
  %(prog)s --production --auth-only --save-password
        """,
    )

    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Service path, e.g. /nami/gruppierungen/filtered-for-navigation/gruppierung/node/root",
    )
    parser.add_argument(
        "--method",
        type=str.upper,
        choices=["GET", "POST", "PUT", "DELETE"],
        default="GET",
        help="HTTP method (default: GET)",
    )
    parser.add_argument(
        "--query",
        nargs="+",
        type=query_pair,
        default=[],
        metavar="KEY=VALUE",
        help="Query parameters to attach to the request",
    )
    parser.add_argument(
        "--production",
        action="store_true",
        help="Use nami.dpsg.de instead of namitest.dpsg.de",
    )
    parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text). Use json for programmatic parsing.",
    )
    parser.add_argument(
        "--auth-only",
        action="store_true",
        help="Only start a session, do not call a service.",
    )
    parser.add_argument(
        "--password-storage",
        choices=["auto", "env", "keyring"],
        default="auto",
        help="Where to read the password from (default: auto-detect).",
    )
    parser.add_argument(
        "--save-password",
        action="store_true",
        help="Store the password in the OS keychain for later runs.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)


# ─── Logging Setup ───────────────────────────────────────────────────────────


def setup_logging(json_mode: bool, verbose: bool = False):
    """Configure logging based on output mode.

    In JSON mode, suppress info logs so only JSON goes to stdout.
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING if json_mode else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


# ─── Configuration ───────────────────────────────────────────────────────────


def build_config(args, storage) -> dict:
    """Build the raw client configuration from environment and CLI args.

    Only values that are set are included, so resolve() fills in defaults
    for the rest.
    """
    config = {}

    user_id = os.environ.get("NAMI_USER_ID")
    if user_id:
        config["userId"] = user_id
        password = storage.load(user_id)
        if password:
            config["password"] = password

    if args.production:
        config["production"] = True
    elif os.environ.get("NAMI_PRODUCTION"):
        config["production"] = os.environ["NAMI_PRODUCTION"]

    if os.environ.get("NAMI_VERSION"):
        config["version"] = os.environ["NAMI_VERSION"]
    if os.environ.get("NAMI_TIMEOUT"):
        config["timeout"] = os.environ["NAMI_TIMEOUT"]

    return config


# ─── Output ──────────────────────────────────────────────────────────────────


def print_result(result, json_mode: bool):
    """Print the service payload."""
    if json_mode:
        print(json.dumps({"success": True, "result": result}, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))


def fail(message: str, json_mode: bool):
    """Report an error and exit with status 1."""
    if json_mode:
        print(json.dumps({"success": False, "error": message}, ensure_ascii=False))
    else:
        print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


# ─── Main ────────────────────────────────────────────────────────────────────


def main(argv=None):
    """Main entry point."""
    load_dotenv(os.path.join(os.getcwd(), ".env"))

    args = parse_args(argv)
    json_mode = args.output == "json"
    setup_logging(json_mode, args.verbose)

    force_storage = None if args.password_storage == "auto" else args.password_storage
    storage = get_storage_backend(force=force_storage)
    logger.debug(f"Password storage: {storage}")

    try:
        config = resolve(build_config(args, storage))
    except ConfigValidationError as e:
        fail(str(e), json_mode)

    if args.save_password:
        try:
            KeyringStorage().save(config.user_id, config.password.get_secret_value())
        except (KeyringError, RuntimeError) as e:
            fail(f"Could not save password to OS keychain: {e}", json_mode)
        logger.info("Password saved to OS keychain.")

    if not args.auth_only and not args.path:
        fail("No service path provided.", json_mode)

    with NamiClient(config) as client:
        try:
            if args.auth_only:
                logger.info("Starting NaMi session...")
                client.authenticate()
                logger.info("Authentication successful!")
                if json_mode:
                    print(json.dumps({"success": True, "message": "Authenticated successfully."}))
                return

            result = client.call_service(args.method, args.path, {"query": dict(args.query)})
        except (NamiError, requests.RequestException, ValueError) as e:
            fail(str(e), json_mode)

    print_result(result, json_mode)
