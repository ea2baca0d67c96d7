"""Pytest configuration: point the default database at a temp dir before any package import."""

import os
import tempfile

import pytest
import pytest_asyncio

_tmp = tempfile.mkdtemp(prefix="editorstore_test_")
os.environ.setdefault("EDITORSTORE_DB_PATH", os.path.join(_tmp, "default.db"))


@pytest_asyncio.fixture
async def storage(tmp_path):
    """A connected LocalStorage on a fresh database file."""
    from editorstore.storage import LocalStorage

    store = LocalStorage(tmp_path / "store.db")
    await store.connect()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def project(storage):
    """A project named "a1" in the fresh store."""
    return await storage.new_project("a1")


@pytest.fixture
def session_factory(storage):
    """storage.atomic, so tests can use async with session_factory() as session."""
    return storage.atomic
