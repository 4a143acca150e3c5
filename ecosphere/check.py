"""
check.py — Post-seed Sanity Checks
EcoSphere Seeder

Reports row counts and a user sample, then confirms every fixture user can
log in with the placeholder password.

Run:  ecosphere-check      (or: python -m ecosphere.check)
"""

import asyncio
import sys
from typing import Optional
from loguru import logger

from ecosphere.config import configure_logging
from ecosphere.repository import SeedStore, PostgresSeedStore
from ecosphere.schemas import SeedFixture, load_fixture
from ecosphere.utils import verify_password, format_counts


async def check_users(store: SeedStore, sample: int = 5) -> int:
    """Log the user count and a few users; returns the count."""
    counts = await store.count_rows()
    total = counts["users"]
    logger.info(f"Total users: {total}")
    if total > 0:
        users = await store.list_users(limit=sample)
        logger.info(f"Sample users: {users}")
    return total


async def verify_login(store: SeedStore, email: str, password: str) -> bool:
    user = await store.get_user_by_email(email)
    if user is None:
        logger.warning(f"Login check: no user {email}")
        return False
    ok = await asyncio.to_thread(verify_password, password, user["password"])
    if not ok:
        logger.warning(f"Login check failed for {email}")
    return ok


async def run_check(
    store: Optional[SeedStore] = None,
    fixture: Optional[SeedFixture] = None,
) -> bool:
    store = store or PostgresSeedStore.from_settings()
    try:
        fixture = fixture or load_fixture()
        logger.info(f"Row counts: {format_counts(await store.count_rows())}")
        await check_users(store)
        results = [
            await verify_login(store, u.email, fixture.placeholder_password)
            for u in fixture.users
        ]
    finally:
        await store.close()
    logger.info(f"Login check: {sum(results)}/{len(results)} seeded users verified.")
    return all(results)


def main(store: Optional[SeedStore] = None) -> int:
    try:
        ok = asyncio.run(run_check(store))
    except Exception:
        logger.exception("❌ Check error")
        return 1
    return 0 if ok else 1


def cli() -> None:
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    cli()
