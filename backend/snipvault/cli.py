"""Management CLI for recycle bin maintenance.

Usage:
    python -m snipvault.cli list-expired [--days N]
    python -m snipvault.cli purge-expired [--days N] [--dry-run]

The service never purges on its own; schedule ``purge-expired`` (cron,
k8s CronJob, ...) to enforce the grace period.
"""

import argparse
import asyncio
import sys
from datetime import datetime, timedelta

from snipvault.config import settings
from snipvault.database import async_session, engine
from snipvault.services.batch import find_expired_owners, purge_expired
from snipvault.services.recycle_bin import list_recycle_bin


async def list_expired(days: int) -> None:
    cutoff = datetime.utcnow() - timedelta(days=days)
    owners = await find_expired_owners(async_session, cutoff)
    for owner_id in sorted(owners):
        view = await list_recycle_bin(async_session, owner_id, deleted_before=cutoff)
        print(f"  {owner_id}: {view.total_count} expired item(s)")
    print(f"\n{len(owners)} owner(s) with items deleted before {cutoff:%Y-%m-%d %H:%M} UTC")


async def run_purge(days: int) -> int:
    results = await purge_expired(async_session, retention_days=days)
    failures = 0
    for owner_id, result in results.items():
        print(f"  {owner_id}: {result.summary}")
        for failure in result.failed:
            print(f"    FAILED {failure.kind} {failure.entity_id}: {failure.message}")
        failures += len(result.failed)
    if not results:
        print("Nothing to purge.")
    return failures


async def _main(args: argparse.Namespace) -> int:
    try:
        if args.command == "list-expired" or args.dry_run:
            await list_expired(args.days)
            return 0
        failures = await run_purge(args.days)
        return 1 if failures else 0
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="snipvault.cli", description="Recycle bin maintenance")
    parser.add_argument("command", choices=["list-expired", "purge-expired"])
    parser.add_argument(
        "--days", type=int, default=settings.recycle_bin_retention_days,
        help="Grace period in days (default: %(default)s)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="With purge-expired: only list the owners that would be purged",
    )
    args = parser.parse_args(argv)
    if args.days < 0:
        parser.error("--days must be >= 0")
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
