"""Pending-change log (outbox): push with editFile coalescing, top, pop, list, count, clear.

All functions work inside the caller's session; the caller commits.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from editorstore.changelog.models import ChangeEntry, ChangeLogRecord, ChangeType

log = logging.getLogger(__name__)


async def _top_record(session: AsyncSession) -> Optional[ChangeLogRecord]:
    result = await session.execute(
        select(ChangeLogRecord).order_by(ChangeLogRecord.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()


def _coalesces(top: ChangeLogRecord, change: ChangeEntry) -> bool:
    """True if change replaces top: both are edits."""
    return change.type == ChangeType.EDIT_FILE.value and top.type == ChangeType.EDIT_FILE.value


async def push_change(session: AsyncSession, change: ChangeEntry) -> int:
    """
    Append change and return its sequence number.
    A run of edits keeps only the newest: the previous top entry is
    popped first. Creations and deletions are never merged.
    """
    top = await _top_record(session)
    if top is not None and _coalesces(top, change):
        log.debug("push_change coalescing edit of %s/%s (replaces #%d)", change.target.project, change.target.file, top.id)
        await session.delete(top)
        await session.flush()
    row = ChangeLogRecord(
        type=change.type,
        file=change.target.file,
        project=change.target.project,
        contents=change.contents,
    )
    session.add(row)
    await session.flush()
    return row.id


async def top_change(session: AsyncSession) -> Optional[ChangeEntry]:
    """Most recent entry, or None when the log is empty."""
    row = await _top_record(session)
    return ChangeEntry.from_record(row) if row is not None else None


async def pop_change(session: AsyncSession) -> Optional[ChangeEntry]:
    """Remove and return the most recent entry, or None when the log is empty."""
    row = await _top_record(session)
    if row is None:
        return None
    entry = ChangeEntry.from_record(row)
    await session.delete(row)
    await session.flush()
    return entry


async def count_changes(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(ChangeLogRecord))
    return result.scalar_one()


async def list_changes(session: AsyncSession) -> List[ChangeEntry]:
    """All entries, newest first."""
    result = await session.execute(select(ChangeLogRecord).order_by(ChangeLogRecord.id.desc()))
    return [ChangeEntry.from_record(row) for row in result.scalars().all()]


async def clear_changes(session: AsyncSession) -> None:
    """Drop every entry (after the remote side has accepted them)."""
    await session.execute(delete(ChangeLogRecord))
