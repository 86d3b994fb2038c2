#!/usr/bin/env python3
"""Report the document store connection status, optionally after a reset.

Reads FIREBASE_API_KEY, FIREBASE_PROJECT_ID and SYNC_REDIS_URL from the
environment (or .env). A session persisted by a previous sign-in is reused.

Usage:
    python -m scripts.check_connection [--reset] [--json] [--email EMAIL]
"""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Any, Dict

import orjson
from redis.exceptions import RedisError

from workshop_sync.exceptions import ApplicationError, ConfigurationError
from workshop_sync.logging_config import setup_logging
from workshop_sync.sync_runtime import SyncRuntime

logger = logging.getLogger(__name__)


def _print_report(report: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        sys.stdout.write(orjson.dumps(report, option=orjson.OPT_INDENT_2).decode() + "\n")
        return

    print(f"Network online:     {report['online']}")
    print(f"Signed-in user:     {report['uid'] or '-'}")
    print(f"Connection state:   {report['state']}")
    print(f"Reset in progress:  {report['reset_in_progress']}")
    health = report["last_health"]
    if health is not None:
        verdict = "healthy" if health["healthy"] else f"unhealthy ({health['reason']}): {health['error']}"
        print(f"Last health check:  {verdict}")
    if report["recent_transitions"]:
        print("Recent transitions:")
        for transition in report["recent_transitions"]:
            suffix = f" ({transition['reason']})" if transition["reason"] else ""
            print(f"  {transition['previous']} -> {transition['current']}{suffix}")


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Check the document store connection")
    parser.add_argument("--reset", action="store_true", help="Run a full connection reset before reporting")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--email", help="Sign in with this email first (password is prompted)")
    args = parser.parse_args()

    setup_logging(user_friendly=True)

    try:
        runtime = SyncRuntime.from_config()
    except (ApplicationError, ConfigurationError) as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    try:
        await runtime.start()
        if args.email:
            identity = runtime.identity_provider
            await identity.sign_in_with_email(args.email, getpass.getpass("Password: "))
            await runtime.check_health()
        if args.reset:
            result = await runtime.reset()
            if not result.performed:
                logger.warning("A reset was already in progress")
        report = runtime.status_report()
    except (ApplicationError, RedisError, OSError) as exc:
        logger.error("Connection check failed: %s", exc)
        return 1
    finally:
        await runtime.shutdown()

    _print_report(report, args.json)
    return 0 if report["state"] == "active" else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
