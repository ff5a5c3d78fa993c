"""
Shared fixtures.

Async code is driven with asyncio.run inside each test; every test
gets fresh storage (a memory slot for the embedded backend, a tmp_path
file for the native one).
"""

import asyncio

import pytest

from gym_tracker.config import Settings, StorageSettings
from gym_tracker.service import GymDataService
from gym_tracker.services.storage import (
    EmbeddedSnapshotBackend,
    MemoryKeyValueStore,
    NativeConnectionBackend,
)


@pytest.fixture
def snapshot_store():
    return MemoryKeyValueStore()


@pytest.fixture
def settings(tmp_path):
    return Settings(storage=StorageSettings(data_dir=tmp_path))


def make_backend(kind, tmp_path, store):
    if kind == "embedded":
        return EmbeddedSnapshotBackend(store=store)
    return NativeConnectionBackend(tmp_path / "gym-trackerSQLite.db")


@pytest.fixture(params=["embedded", "native"])
def service(request, tmp_path, settings, snapshot_store):
    """An uninitialized service on each backend."""
    svc = GymDataService(
        settings=settings,
        backend=make_backend(request.param, tmp_path, snapshot_store),
    )
    yield svc
    asyncio.run(svc.close())


@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run
