"""Command-line client that sends signed HTTP requests, cURL style."""

import argparse
import logging
import os
import sys
from typing import List, Optional

import structlog

from . import __version__
from .client import HTTPSignClient
from .constants import DEFAULT_CONFIG, ENV_ACCESS_KEY_PAIR
from .exceptions import ConfigurationError, HTTPSignError, HTTPStatusError, MissingCredential
from .keypair import parse_key_pair

logger = structlog.get_logger("httpsign.cli")

JSON_METHODS = ("POST", "PUT", "DELETE")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="httpsign",
        description="HTTP Signatures cli client. This command accepts similar flags as cURL.",
    )
    parser.add_argument("url", nargs="?", default="", help="URL to request")
    parser.add_argument(
        "-u", "--user",
        default=None,
        help="key pair (access:secret) to use for server authentication "
             f"(default: ${ENV_ACCESS_KEY_PAIR})",
    )
    parser.add_argument(
        "-X", "--request",
        default="GET",
        help="HTTP request method to use (default: GET)",
    )
    parser.add_argument(
        "-d", "--data",
        default="",
        help="data to send to HTTP server with application/json content type",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_CONFIG['timeout'],
        help="request timeout in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level for diagnostics on stderr (default: WARNING)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def configure_logging(level: str = "WARNING") -> None:
    """Send structlog output to stderr so stdout carries only the response body."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.WARNING)
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def resolve_key_pair(user: Optional[str], environ=None) -> str:
    """
    Pick the key pair from the flag or the environment.

    Raises:
        MissingCredential: If neither is set or the value is malformed
    """
    environ = os.environ if environ is None else environ
    key_pair = user if user else environ.get(ENV_ACCESS_KEY_PAIR, "")
    try:
        parse_key_pair(key_pair)
    except ConfigurationError as e:
        raise MissingCredential(f"invalid credential: {e}") from e
    return key_pair


def execute(args: argparse.Namespace, stdout=None, environ=None) -> None:
    """
    Send the request described by ``args`` and write the body to stdout.

    Raises:
        HTTPSignError: On a bad command line, transport failure or an
            HTTP status of 400 or above
    """
    stdout = stdout if stdout is not None else sys.stdout.buffer
    if not args.url:
        raise ConfigurationError("missing URL")

    key_pair = resolve_key_pair(args.user, environ)
    method = args.request.upper()

    headers = {}
    if method in JSON_METHODS:
        headers["Content-Type"] = "application/json"
    elif method != "GET":
        raise ConfigurationError(f"invalid method {method}")

    with HTTPSignClient.from_key_pair("", key_pair, timeout=args.timeout) as client:
        response = client.request(method, args.url, data=args.data or None, headers=headers)
        try:
            if response.status_code >= 400:
                raise HTTPStatusError(
                    f"unexpected status: {response.status_code} {response.reason}"
                )
            stdout.write(response.content)
            stdout.flush()
        finally:
            response.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the httpsign CLI.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Process exit code.
    """
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        execute(args)
    except HTTPSignError as e:
        logger.error("request_failed", error=str(e))
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
