import pytest

from ecosphere.check import check_users, run_check, verify_login
from ecosphere.seed import Seeder

pytestmark = pytest.mark.anyio


@pytest.fixture
async def seeded(store, seed_fixture):
    await Seeder(store, seed_fixture).run()
    return store


async def test_check_users_counts_and_samples(seeded, log_records):
    assert await check_users(seeded, sample=2) == 4
    sample = [r for r in log_records if r["message"].startswith("Sample users")]
    assert sample and "alex.j@example.com" in sample[0]["message"]


async def test_verify_login_accepts_placeholder(seeded):
    assert await verify_login(seeded, "maria.s@example.com", "password123")


async def test_verify_login_rejects_wrong_password(seeded):
    assert not await verify_login(seeded, "maria.s@example.com", "password124")


async def test_verify_login_unknown_user(seeded):
    assert not await verify_login(seeded, "ghost@example.com", "password123")


async def test_run_check_passes_after_seed_and_closes(seeded, seed_fixture):
    assert await run_check(seeded, seed_fixture)
    assert seeded.closed
