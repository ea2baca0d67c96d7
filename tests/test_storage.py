"""Tests for the store itself: lifecycle, schema version, atomic units, concurrency."""

import asyncio
import logging

import pytest

from editorstore.db.session import SCHEMA_VERSION, get_schema_version
from editorstore.errors import MalformedChangeError, NotFoundError
from editorstore.storage import LocalStorage


@pytest.mark.asyncio
async def test_connect_sets_schema_version(storage) -> None:
    """A fresh database is stamped with the current schema version."""
    assert await get_schema_version(storage._engine) == SCHEMA_VERSION


@pytest.mark.asyncio
async def test_reopen_keeps_data(tmp_path) -> None:
    """Data survives close and reconnect."""
    store = LocalStorage(tmp_path / "s.db")
    await store.connect()
    await store.new_project("a1")
    await store.close()
    store = LocalStorage(tmp_path / "s.db")
    await store.connect()
    try:
        assert [p.name for p in await store.get_projects()] == ["a1"]
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_delete_db_removes_file(tmp_path) -> None:
    store = LocalStorage(tmp_path / "s.db")
    await store.connect()
    assert store.db_path.exists()
    await store.delete_db()
    assert not store.db_path.exists()


@pytest.mark.asyncio
async def test_not_connected_raises(tmp_path) -> None:
    """Operations before connect() fail clearly."""
    store = LocalStorage(tmp_path / "s.db")
    with pytest.raises(RuntimeError, match="not connected"):
        await store.get_projects()


@pytest.mark.asyncio
async def test_atomic_rolls_back_on_error(storage, project) -> None:
    """Writes inside a failing unit are discarded."""
    from editorstore.files import service as files

    with pytest.raises(NotFoundError):
        async with storage.atomic() as session:
            await files.new_file(session, project.id, "q1/a.c", "A")
            await files.read_file(session, "missing")
    assert await storage.get_all_files() == []
    assert await storage.count_change_logs() == 0


@pytest.mark.asyncio
async def test_concurrent_writes_do_not_interleave(storage, project) -> None:
    """Concurrent saves of one file all land; the last writer's contents win and one edit entry remains."""
    brief = await storage.new_file(project.id, "q1/a.c", "")
    await asyncio.gather(*(storage.write_file(brief.id, str(i)) for i in range(10)))
    f = await storage.read_file(brief.id)
    assert f.contents in {str(i) for i in range(10)}
    entries = await storage.get_change_logs()
    assert [e.type for e in entries] == ["editFile", "newFile"]
    assert entries[0].contents == f.contents


@pytest.mark.asyncio
async def test_concurrent_creates_are_isolated(storage, project) -> None:
    """Concurrent creates of distinct files all succeed; each logs its own entry."""
    await asyncio.gather(*(storage.new_file(project.id, f"q1/{i}.c", str(i)) for i in range(8)))
    assert len(await storage.get_project_files(project.id)) == 8
    assert await storage.count_change_logs() == 8


@pytest.mark.asyncio
async def test_each_unit_logs_debug_line(storage, caplog) -> None:
    """Every operation logs its name at DEBUG when its unit starts."""
    with caplog.at_level(logging.DEBUG, logger="editorstore.storage"):
        await storage.get_projects()
        await storage.get_settings()
    names = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
    assert "get_projects" in names
    assert "get_settings" in names


@pytest.mark.asyncio
async def test_apply_changes_abort_logged_once(storage, caplog) -> None:
    """A failed batch produces a single WARNING."""
    from editorstore.changelog.models import ChangeEntry, ChangeTarget

    change = ChangeEntry(type="chmod", target=ChangeTarget(file="q1/a.c", project="a1"))
    with caplog.at_level(logging.DEBUG, logger="editorstore"):
        with pytest.raises(MalformedChangeError):
            await storage.apply_changes([change], new_projects=["a1"])
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "apply_changes" in warnings[0].getMessage()
