"""
seed.py — Development Database Seeder
EcoSphere Seeder

Populates baseline users, NGOs, community events, plantation events and
AQI snapshots. Safe to re-run: users are upserted on email with an empty
update, every other row is insert-or-skip on its natural key.

Run:  ecosphere-seed      (or: python -m ecosphere.seed)
"""

import asyncio
import sys
from dataclasses import dataclass, field
from typing import Dict, Optional
from loguru import logger

from ecosphere.config import settings, configure_logging
from ecosphere.repository import SeedStore, PostgresSeedStore
from ecosphere.schemas import SeedFixture, load_fixture
from ecosphere.utils import hash_password, format_counts


@dataclass
class SeedSummary:
    user_ids: Dict[str, str] = field(default_factory=dict)
    attempted: Dict[str, int] = field(default_factory=dict)
    inserted: Dict[str, int] = field(default_factory=dict)

    @property
    def total_inserted(self) -> int:
        return sum(self.inserted.values())

    def record(self, table: str, attempted: int, inserted: int) -> None:
        self.attempted[table] = self.attempted.get(table, 0) + attempted
        self.inserted[table] = self.inserted.get(table, 0) + inserted


class Seeder:
    """Applies a fixture to a store, one awaited step at a time."""

    def __init__(self, store: SeedStore, fixture: SeedFixture):
        self.store = store
        self.fixture = fixture

    async def run(self) -> SeedSummary:
        logger.info("🌱 Seeding EcoSphere database …")
        summary = SeedSummary()

        # bcrypt is CPU-bound; hash off the event loop
        password_hash = await asyncio.to_thread(hash_password, self.fixture.placeholder_password)

        await self._seed_users(password_hash, summary)
        await self._seed_ngos(summary)
        await self._seed_events(summary)
        await self._seed_plantation_events(summary)
        await self._seed_aqi_records(summary)

        logger.info(f"🌿 Seed data created successfully ({format_counts(summary.inserted)}).")
        logger.info(f"   Users: {' / '.join(u.email for u in self.fixture.users)}")
        logger.info(f"   Password: {self.fixture.placeholder_password}")
        return summary

    async def _seed_users(self, password_hash: str, summary: SeedSummary) -> None:
        logger.info("👤 Creating users …")
        created = 0
        for user in self.fixture.users:
            user_id, is_new = await self.store.upsert_user(user, password_hash)
            summary.user_ids[user.email] = user_id
            created += int(is_new)
        summary.record("users", len(self.fixture.users), created)
        logger.info(f"   ✅ Users: {created} created, {len(self.fixture.users) - created} already present")

    async def _seed_ngos(self, summary: SeedSummary) -> None:
        logger.info("🏢 Creating NGOs …")
        n = await self.store.insert_ngos(self.fixture.ngos)
        summary.record("ngos", len(self.fixture.ngos), n)
        logger.info(f"   ✅ NGOs: {n} inserted, {len(self.fixture.ngos) - n} skipped")

    async def _seed_events(self, summary: SeedSummary) -> None:
        logger.info("📅 Creating community events …")
        n = await self.store.insert_events(self.fixture.events, summary.user_ids)
        summary.record("events", len(self.fixture.events), n)
        logger.info(f"   ✅ Community events: {n} inserted, {len(self.fixture.events) - n} skipped")

    async def _seed_plantation_events(self, summary: SeedSummary) -> None:
        logger.info("🌳 Creating plantation events with polygon boundaries …")
        total = 0
        for plantation in self.fixture.plantation_events:
            n = await self.store.insert_plantation_event(plantation)
            logger.debug(f"   {plantation.title}: {'inserted' if n else 'skipped'}")
            total += n
        summary.record("plantation_events", len(self.fixture.plantation_events), total)
        logger.info(
            f"   ✅ Plantation events: {total} inserted, "
            f"{len(self.fixture.plantation_events) - total} skipped"
        )

    async def _seed_aqi_records(self, summary: SeedSummary) -> None:
        logger.info("🌫️ Creating AQI records …")
        n = await self.store.insert_aqi_records(self.fixture.aqi_records)
        summary.record("aqi_records", len(self.fixture.aqi_records), n)
        logger.info(f"   ✅ AQI records: {n} inserted, {len(self.fixture.aqi_records) - n} skipped")


async def run_seed(
    store: Optional[SeedStore] = None,
    fixture: Optional[SeedFixture] = None,
) -> SeedSummary:
    """
    Seed ``store`` (default: PostgreSQL from settings) with ``fixture``
    (default: the packaged fixture). The store is closed on every exit path.
    """
    store = store or PostgresSeedStore.from_settings()
    try:
        fixture = fixture or load_fixture()
        if settings.SEED_INIT_SCHEMA:
            await store.init_schema()
        return await Seeder(store, fixture).run()
    finally:
        await store.close()


def main(store: Optional[SeedStore] = None) -> int:
    """Process entry point: 0 on success, 1 on any failure."""
    try:
        asyncio.run(run_seed(store))
    except Exception:
        logger.exception("❌ Seed error")
        return 1
    return 0


def cli() -> None:
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    cli()
