"""
repository.py — Seed Store Repositories
EcoSphere Seeder

Typed insert-if-absent operations per entity. ``PostgresSeedStore`` talks to
PostgreSQL/PostGIS; ``InMemorySeedStore`` enforces the same natural keys in
process memory.
"""

import abc
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncEngine
from loguru import logger

from ecosphere.database import create_engine, init_db, close_db
from ecosphere.models import User, NGO, Event, PlantationEvent, AQIRecord
from ecosphere.schemas import UserSeed, NGOSeed, EventSeed, PlantationEventSeed, AQIRecordSeed

TABLES = ("users", "ngos", "events", "plantation_events", "aqi_records")


class SeedStore(abc.ABC):
    """Store handle the seeder writes through. Callers own its lifecycle."""

    async def init_schema(self) -> None:
        """Create the schema if the backend needs one; no-op by default."""

    @abc.abstractmethod
    async def upsert_user(self, user: UserSeed, password_hash: str) -> Tuple[str, bool]:
        """Create the user if absent, else leave it untouched. Returns (id, created)."""

    @abc.abstractmethod
    async def insert_ngos(self, ngos: Sequence[NGOSeed]) -> int: ...

    @abc.abstractmethod
    async def insert_events(self, events: Sequence[EventSeed], host_ids: Dict[str, str]) -> int: ...

    @abc.abstractmethod
    async def insert_plantation_event(self, plantation: PlantationEventSeed) -> int: ...

    @abc.abstractmethod
    async def insert_aqi_records(self, records: Sequence[AQIRecordSeed]) -> int: ...

    @abc.abstractmethod
    async def count_rows(self) -> Dict[str, int]: ...

    @abc.abstractmethod
    async def list_users(self, limit: int = 5) -> List[Dict[str, Any]]: ...

    @abc.abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]: ...

    @abc.abstractmethod
    async def close(self) -> None: ...


# ── Row builders ──────────────────────────────────────────────────────────────
def _user_values(user: UserSeed, password_hash: str) -> Dict[str, Any]:
    return {**user.model_dump(), "password": password_hash}


def _ngo_values(ngo: NGOSeed) -> Dict[str, Any]:
    return {
        "name": ngo.name,
        "description": ngo.description,
        "address": ngo.address,
        "website": ngo.website,
        "coordinates": ngo.point.to_element(),
    }


def _event_values(event: EventSeed, host_id: str) -> Dict[str, Any]:
    return {
        "title": event.title,
        "description": event.description,
        "organizer": event.organizer,
        "date": event.date,
        "time": event.time,
        "location_name": event.location_name,
        "coordinates": event.point.to_element(),
        "current_participants": event.current_participants,
        "max_participants": event.max_participants,
        "host_id": host_id,
    }


def _plantation_values(p: PlantationEventSeed) -> Dict[str, Any]:
    return {
        "title": p.title,
        "description": p.description,
        "organizer_name": p.organizer_name,
        "date": p.date,
        "location_name": p.location_name,
        "site_boundary": p.boundary.to_element(),
        "centroid": p.centroid_point.to_element(),
        "trees_goal": p.trees_goal,
        "trees_planted": p.trees_planted,
        "status": p.status,
    }


def _aqi_values(record: AQIRecordSeed) -> Dict[str, Any]:
    return {
        "value": record.value,
        "location_name": record.location_name,
        "coordinates": record.point.to_element(),
        "timestamp": record.timestamp,
    }


def _resolve_host(event: EventSeed, host_ids: Dict[str, str]) -> str:
    try:
        return host_ids[event.host_email]
    except KeyError:
        raise LookupError(f"No seeded user for host '{event.host_email}' of event '{event.title}'") from None


# ── Statements ────────────────────────────────────────────────────────────────
def user_upsert_stmt(user: UserSeed, password_hash: str):
    return (
        pg_insert(User)
        .values(**_user_values(user, password_hash))
        .on_conflict_do_nothing(index_elements=[User.email])
        .returning(User.id)
    )


def user_lookup_stmt(email: str):
    # labelled by attribute name so rows match InMemorySeedStore's keys
    return select(
        User.id.label("id"),
        User.email.label("email"),
        User.name.label("name"),
        User.password.label("password"),
        User.eco_score.label("eco_score"),
    ).where(User.email == email)


def ngos_insert_stmt(ngos: Sequence[NGOSeed]):
    return (
        pg_insert(NGO)
        .values([_ngo_values(n) for n in ngos])
        .on_conflict_do_nothing()
        .returning(NGO.id)
    )


def events_insert_stmt(events: Sequence[EventSeed], host_ids: Dict[str, str]):
    return (
        pg_insert(Event)
        .values([_event_values(e, _resolve_host(e, host_ids)) for e in events])
        .on_conflict_do_nothing()
        .returning(Event.id)
    )


def plantation_insert_stmt(plantation: PlantationEventSeed):
    return (
        pg_insert(PlantationEvent)
        .values(**_plantation_values(plantation))
        .on_conflict_do_nothing()
        .returning(PlantationEvent.id)
    )


def aqi_insert_stmt(records: Sequence[AQIRecordSeed]):
    return (
        pg_insert(AQIRecord)
        .values([_aqi_values(r) for r in records])
        .on_conflict_do_nothing()
        .returning(AQIRecord.id)
    )


# ── PostgreSQL / PostGIS ──────────────────────────────────────────────────────
class PostgresSeedStore(SeedStore):
    """
    Each operation runs in its own transaction (``engine.begin()``); a failure
    part-way through a run leaves earlier statements committed.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @classmethod
    def from_settings(cls, url: Optional[str] = None) -> "PostgresSeedStore":
        return cls(create_engine(url))

    async def init_schema(self) -> None:
        await init_db(self.engine)

    async def _insert(self, stmt) -> int:
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
            return len(result.scalars().all())

    async def upsert_user(self, user: UserSeed, password_hash: str) -> Tuple[str, bool]:
        async with self.engine.begin() as conn:
            user_id = (await conn.execute(user_upsert_stmt(user, password_hash))).scalar_one_or_none()
            if user_id is not None:
                return str(user_id), True
            existing = await conn.execute(select(User.id).where(User.email == user.email))
            return str(existing.scalar_one()), False

    async def insert_ngos(self, ngos: Sequence[NGOSeed]) -> int:
        if not ngos:
            return 0
        return await self._insert(ngos_insert_stmt(ngos))

    async def insert_events(self, events: Sequence[EventSeed], host_ids: Dict[str, str]) -> int:
        if not events:
            return 0
        return await self._insert(events_insert_stmt(events, host_ids))

    async def insert_plantation_event(self, plantation: PlantationEventSeed) -> int:
        return await self._insert(plantation_insert_stmt(plantation))

    async def insert_aqi_records(self, records: Sequence[AQIRecordSeed]) -> int:
        if not records:
            return 0
        return await self._insert(aqi_insert_stmt(records))

    async def count_rows(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        async with self.engine.connect() as conn:
            for name, model in zip(TABLES, (User, NGO, Event, PlantationEvent, AQIRecord)):
                counts[name] = (await conn.execute(select(func.count()).select_from(model))).scalar_one()
        return counts

    async def list_users(self, limit: int = 5) -> List[Dict[str, Any]]:
        q = select(User.email, User.name).order_by(User.created_at, User.email).limit(limit)
        async with self.engine.connect() as conn:
            result = await conn.execute(q)
            return [dict(r._mapping) for r in result.fetchall()]

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        async with self.engine.connect() as conn:
            row = (await conn.execute(user_lookup_stmt(email))).first()
        if row is None:
            return None
        return {**row._mapping, "id": str(row.id)}

    async def close(self) -> None:
        await close_db(self.engine)


# ── In-memory ─────────────────────────────────────────────────────────────────
def _id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySeedStore(SeedStore):
    """Dict-backed store keyed on the same unique constraints as the database."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.users_by_email: Dict[str, str] = {}
        self.ngos: Dict[str, dict] = {}
        self.events: Dict[Tuple[str, datetime], dict] = {}
        self.plantation_events: Dict[Tuple[str, datetime], dict] = {}
        self.aqi_records: Dict[Tuple[str, datetime], dict] = {}
        self.closed = False
        self.close_calls = 0

    def _ensure_open(self) -> None:
        if self.closed:
            raise RuntimeError("store is closed")

    @staticmethod
    def _put(table: Dict, key, row: dict) -> int:
        if key in table:
            return 0
        table[key] = {"id": _id(), **row, "created_at": _now()}
        return 1

    # Users
    async def upsert_user(self, user: UserSeed, password_hash: str) -> Tuple[str, bool]:
        self._ensure_open()
        uid = self.users_by_email.get(user.email)
        if uid:
            return uid, False
        uid = _id()
        self.users[uid] = {"id": uid, **user.model_dump(), "password": password_hash, "created_at": _now()}
        self.users_by_email[user.email] = uid
        return uid, True

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        self._ensure_open()
        uid = self.users_by_email.get(email)
        return self.users.get(uid) if uid else None

    async def list_users(self, limit: int = 5) -> List[Dict[str, Any]]:
        self._ensure_open()
        return [{"email": u["email"], "name": u["name"]} for u in list(self.users.values())[:limit]]

    # Geo rows
    async def insert_ngos(self, ngos: Sequence[NGOSeed]) -> int:
        self._ensure_open()
        return sum(
            self._put(self.ngos, n.name, {**n.model_dump(exclude={"coordinates"}), "coordinates": n.point})
            for n in ngos
        )

    async def insert_events(self, events: Sequence[EventSeed], host_ids: Dict[str, str]) -> int:
        self._ensure_open()
        # Resolve every host before writing so a bad reference inserts nothing
        rows = [
            (e, {**e.model_dump(exclude={"coordinates", "host_email"}),
                 "coordinates": e.point, "host_id": _resolve_host(e, host_ids)})
            for e in events
        ]
        return sum(self._put(self.events, (e.title, e.date), row) for e, row in rows)

    async def insert_plantation_event(self, plantation: PlantationEventSeed) -> int:
        self._ensure_open()
        row = {
            **plantation.model_dump(exclude={"site_boundary", "centroid"}),
            "site_boundary": plantation.boundary,
            "centroid": plantation.centroid_point,
            "updated_at": _now(),
        }
        return self._put(self.plantation_events, (plantation.title, plantation.date), row)

    async def insert_aqi_records(self, records: Sequence[AQIRecordSeed]) -> int:
        self._ensure_open()
        return sum(
            self._put(self.aqi_records, (r.location_name, r.timestamp),
                      {**r.model_dump(exclude={"coordinates"}), "coordinates": r.point})
            for r in records
        )

    async def count_rows(self) -> Dict[str, int]:
        self._ensure_open()
        return {name: len(getattr(self, name)) for name in TABLES}

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True
        logger.debug("In-memory store closed.")
