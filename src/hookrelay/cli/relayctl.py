#!/usr/bin/env python3
"""
relayctl - hookrelay operational CLI

A lightweight CLI for day-2 operations:
- Health checks (relayctl doctor)
- Test notification to the operator webhook (relayctl send-test)
- Run the server (relayctl serve)
- Version info (relayctl version)
"""

import argparse
import asyncio
import os
import sys
from datetime import datetime
from typing import Optional

import httpx

from hookrelay import __version__
from hookrelay.core.config import get_config
from hookrelay.relay.client import WebhookClient, WebhookDeliveryError
from hookrelay.relay.models import Notification, NotificationKind, is_webhook_url


class Colors:
    """ANSI color codes for terminal output."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


def colorize(text: str, color: str) -> str:
    """Colorize text if stdout is a TTY."""
    if sys.stdout.isatty():
        return f"{color}{text}{Colors.RESET}"
    return text


async def check_server(
    server_url: str,
    timeout: float = 5.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[str, str]:
    """
    Check if the relay server is reachable and healthy.

    Args:
        server_url: Server base URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests serve the app in-process)

    Returns:
        (status, message) where status is "OK", "WARN", or "ERROR"
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(f"{server_url}/health")
            if response.status_code != 200:
                return "WARN", f"Server returned status {response.status_code}"
            data = response.json()
            directories = data.get("directories", 0)
            if not data.get("operator_configured"):
                return "WARN", f"Up, but no operator webhook ({directories} page(s))"
            return "OK", f"Server is healthy ({directories} page(s) registered)"
    except httpx.ConnectError:
        return "ERROR", "Cannot connect to server (connection refused)"
    except httpx.TimeoutException:
        return "ERROR", "Server connection timeout"
    except Exception as e:
        return "ERROR", f"Unexpected error: {e}"


def check_operator_webhook(url: Optional[str]) -> tuple[str, str]:
    """Check the locally configured operator webhook URL."""
    if not url:
        return "ERROR", "RELAY_OPERATOR_WEBHOOK_URL is not set"
    if not is_webhook_url(url):
        return "ERROR", "RELAY_OPERATOR_WEBHOOK_URL is not a Discord webhook URL"
    return "OK", "Operator webhook configured"


def format_check_result(name: str, status: str, message: str, width: int = 40) -> str:
    """Format a check result line."""
    padding = " " * max(1, width - len(name))

    if status == "OK":
        status_str = colorize("[OK]", Colors.GREEN)
    elif status == "WARN":
        status_str = colorize("[WARN]", Colors.YELLOW)
    else:
        status_str = colorize("[ERROR]", Colors.RED)

    return f"{name}:{padding}{status_str} {message}"


def default_server_url() -> str:
    config = get_config()
    port = config.server.port
    return os.getenv("RELAY_SERVER_URL", f"http://localhost:{port}")


async def cmd_doctor(args, transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    """
    Run health checks and print a summary.

    Returns:
        Exit code (0 on success, non-zero on critical failure)
    """
    print(colorize("\nhookrelay Doctor", Colors.BOLD))
    print(colorize("=" * 60, Colors.BOLD))
    print()

    server_url = args.url or default_server_url()
    all_ok = True

    status, message = check_operator_webhook(get_config().relay.operator_webhook_url)
    print(format_check_result("Operator webhook", status, message))
    if status == "ERROR":
        all_ok = False

    status, message = await check_server(
        server_url, timeout=args.timeout, transport=transport
    )
    print(format_check_result(f"Server ({server_url})", status, message))
    if status == "ERROR":
        all_ok = False

    print()

    if all_ok:
        print(colorize("✓ All critical checks passed", Colors.GREEN))
        return 0
    else:
        print(colorize("✗ One or more critical checks failed", Colors.RED))
        return 1


async def cmd_send_test(
    args, transport: Optional[httpx.AsyncBaseTransport] = None
) -> int:
    """
    Send a test notification to the operator webhook.

    Returns:
        Exit code (0 on success, non-zero on failure)
    """
    config = get_config()
    status, message = check_operator_webhook(config.relay.operator_webhook_url)
    if status != "OK":
        print(colorize(f"✗ {message}", Colors.RED), file=sys.stderr)
        return 1

    notification = Notification(
        endpoint=config.relay.operator_webhook_url,
        content=f"hookrelay test notification from relayctl ({datetime.now():%Y-%m-%d %H:%M:%S})",
        kind=NotificationKind.DIRECT,
    )

    try:
        async with WebhookClient(
            timeout=config.relay.timeout,
            user_agent=config.relay.user_agent,
            transport=transport,
        ) as client:
            await client.send(notification)
    except WebhookDeliveryError as e:
        print(colorize(f"✗ Failed to send test notification: {e}", Colors.RED), file=sys.stderr)
        return 1

    print(colorize("✓ Test notification sent", Colors.GREEN))
    return 0


def cmd_serve(args) -> int:
    """Run the relay server in the foreground."""
    from hookrelay.ui.http_server import main as serve

    serve()
    return 0


def cmd_version(args) -> int:
    """
    Print version information.

    Returns:
        Exit code (always 0)
    """
    print(f"relayctl version {__version__}")
    print("hookrelay - form submissions relayed to Discord webhooks")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for relayctl."""
    parser = argparse.ArgumentParser(
        description="hookrelay operational CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  relayctl doctor                    # Run health checks
  relayctl send-test                 # Send a test message to the operator webhook
  relayctl serve                     # Run the server
  relayctl version                   # Show version information

Environment variables:
  RELAY_OPERATOR_WEBHOOK_URL         # Operator webhook
  RELAY_SERVER_URL                   # Server URL for doctor (default: http://localhost:<API_PORT>)
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    doctor_parser = subparsers.add_parser(
        "doctor",
        help="Run health checks and diagnostics"
    )
    doctor_parser.add_argument(
        "--url",
        default=None,
        help="Server base URL (default: RELAY_SERVER_URL or localhost)"
    )
    doctor_parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Timeout for HTTP requests in seconds (default: 5.0)"
    )

    subparsers.add_parser("send-test", help="Send a test notification to the operator webhook")
    subparsers.add_parser("serve", help="Run the relay server")
    subparsers.add_parser("version", help="Show version information")

    return parser


def main(argv=None):
    """Main entry point for relayctl CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "doctor":
        return asyncio.run(cmd_doctor(args))
    elif args.command == "send-test":
        return asyncio.run(cmd_send_test(args))
    elif args.command == "serve":
        return cmd_serve(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
