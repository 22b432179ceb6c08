"""Command-line interface for the schedule assistant API."""

import argparse
import asyncio
import logging
import sys

from schedule_assistant.auth.flow import AuthFlowService
from schedule_assistant.auth.google import create_oauth_client
from schedule_assistant.auth.token_store import create_token_store
from schedule_assistant.config import Settings, get_settings
from schedule_assistant.errors import ServiceError


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _serve(settings: Settings, args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "schedule_assistant.api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


async def _session(settings: Settings) -> int:
    store = create_token_store(settings)
    await store.init()
    try:
        state = await AuthFlowService(settings, store).state()
    finally:
        await store.close()
    print(state.value)
    return 0


async def _logout(settings: Settings) -> int:
    store = create_token_store(settings)
    await store.init()
    try:
        await AuthFlowService(settings, store).logout()
    finally:
        await store.close()
    print("Logged out")
    return 0


def _auth_url(settings: Settings) -> int:
    print(create_oauth_client(settings).generate_auth_url())
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Schedule Assistant API - calendar and weather proxy"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind address (default: HOST setting)")
    serve_parser.add_argument("--port", type=int, help="Listen port (default: PORT setting)")
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)",
    )

    subparsers.add_parser("session", help="Show whether valid tokens are stored")
    subparsers.add_parser("logout", help="Clear stored tokens")
    subparsers.add_parser("auth-url", help="Print the Google consent URL")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        if args.command == "serve":
            return _serve(settings, args)
        if args.command == "session":
            return asyncio.run(_session(settings))
        if args.command == "logout":
            return asyncio.run(_logout(settings))
        if args.command == "auth-url":
            return _auth_url(settings)
    except ServiceError as e:
        print(f"{e.error_code}: {e.message}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
