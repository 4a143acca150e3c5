from datetime import datetime, timezone

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from ecosphere.models import NGO, AQIRecord, Event, PlantationEvent, User
from ecosphere.repository import (
    InMemorySeedStore,
    aqi_insert_stmt,
    events_insert_stmt,
    ngos_insert_stmt,
    plantation_insert_stmt,
    user_lookup_stmt,
    user_upsert_stmt,
)
from ecosphere.schemas import AQIRecordSeed


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_user_upsert_targets_email_with_empty_update(seed_fixture):
    sql = _sql(user_upsert_stmt(seed_fixture.users[0], "hash"))
    assert sql.startswith('INSERT INTO "User"')
    assert '"ecoScore"' in sql
    assert "ON CONFLICT (email) DO NOTHING" in sql
    assert "DO UPDATE" not in sql
    assert "RETURNING" in sql


def test_user_lookup_keys_match_in_memory_rows():
    stmt = user_lookup_stmt("alex.j@example.com")
    assert list(stmt.selected_columns.keys()) == ["id", "email", "name", "password", "eco_score"]
    assert '"ecoScore" AS eco_score' in _sql(stmt)


@pytest.mark.parametrize(
    "model, clause",
    [
        (NGO, "UNIQUE (name)"),
        (Event, "CONSTRAINT uq_event_title_date UNIQUE (title, date)"),
        (PlantationEvent, "CONSTRAINT uq_plantation_title_date UNIQUE (title, date)"),
        (AQIRecord, 'CONSTRAINT uq_aqi_location_time UNIQUE ("locationName", timestamp)'),
    ],
)
def test_natural_keys_are_unique_constraints(model, clause):
    ddl = str(CreateTable(model.__table__).compile(dialect=postgresql.dialect()))
    assert clause in ddl


def test_user_email_has_unique_index():
    assert any(ix.unique and list(ix.columns.keys()) == ["email"] for ix in User.__table__.indexes)


def test_ngos_are_one_batched_insert_or_skip(seed_fixture):
    stmt = ngos_insert_stmt(seed_fixture.ngos)
    sql = _sql(stmt)
    assert sql.startswith('INSERT INTO "NGO"')
    assert "ON CONFLICT DO NOTHING" in sql
    assert sql.count("ST_GeomFromEWKT") == 4


def test_events_carry_host_ids(seed_fixture):
    host_ids = {"alex.j@example.com": "u-alex", "maria.s@example.com": "u-maria"}
    compiled = events_insert_stmt(seed_fixture.events, host_ids).compile(dialect=postgresql.dialect())
    assert '"hostId"' in str(compiled)
    hosts = [v for k, v in compiled.params.items() if k.startswith("hostId") or k.startswith("host_id")]
    assert sorted(hosts) == ["u-alex", "u-alex", "u-alex", "u-maria"]


def test_events_with_unknown_host_fail_before_sql(seed_fixture):
    with pytest.raises(LookupError, match="alex.j@example.com"):
        events_insert_stmt(seed_fixture.events, {"maria.s@example.com": "u-maria"})


def test_plantation_insert_has_polygon_and_centroid(seed_fixture):
    compiled = plantation_insert_stmt(seed_fixture.plantation_events[0]).compile(
        dialect=postgresql.dialect()
    )
    sql = str(compiled)
    assert sql.startswith('INSERT INTO "PlantationEvent"')
    assert '"siteBoundary"' in sql and "centroid" in sql
    assert "ON CONFLICT DO NOTHING" in sql
    assert compiled.params["status"] == "active"


def test_aqi_records_are_one_batched_insert(seed_fixture):
    sql = _sql(aqi_insert_stmt(seed_fixture.aqi_records))
    assert sql.startswith('INSERT INTO "AQIRecord"')
    assert "ON CONFLICT DO NOTHING" in sql


@pytest.mark.anyio
async def test_in_memory_store_skips_conflicting_aqi_snapshot():
    store = InMemorySeedStore()
    ts = datetime(2026, 2, 1, 12, tzinfo=timezone.utc)
    first = AQIRecordSeed(value=42, location_name="Boston Downtown", coordinates=(-71.0589, 42.3601), timestamp=ts)
    again = AQIRecordSeed(value=99, location_name="Boston Downtown", coordinates=(-71.0589, 42.3601), timestamp=ts)

    assert await store.insert_aqi_records([first]) == 1
    assert await store.insert_aqi_records([again]) == 0
    (row,) = store.aqi_records.values()
    assert row["value"] == 42


@pytest.mark.anyio
async def test_in_memory_store_refuses_use_after_close():
    store = InMemorySeedStore()
    await store.close()
    with pytest.raises(RuntimeError):
        await store.count_rows()
