# tests/conftest.py
import pytest
from loguru import logger

from ecosphere.repository import InMemorySeedStore
from ecosphere.schemas import load_fixture


@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"


@pytest.fixture(scope="session")
def seed_fixture():
    return load_fixture()


@pytest.fixture
def store():
    return InMemorySeedStore()


@pytest.fixture
def log_records():
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
