"""Apply a batch of remote changes to local state (reconciliation).

The whole batch runs in the caller's transaction: any failure rolls back every
step, including the change-log clear, so the batch can be retried as is.
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from editorstore.changelog.models import ChangeEntry, ChangeType
from editorstore.changelog.service import clear_changes
from editorstore.errors import MalformedChangeError
from editorstore.files import service as files
from editorstore.identity import file_id, project_id
from editorstore.projects import service as projects

log = logging.getLogger(__name__)


async def _resolve_file_id(session: AsyncSession, pid: str, name: str) -> str:
    """Id of the named file: the stored one if present (it may have been renamed), else the derived one."""
    return await files.find_file_id(session, pid, name) or file_id(pid, name)


async def apply_change(session: AsyncSession, change: ChangeEntry) -> None:
    """Replay one remote change through the regular file operations."""
    pid = project_id(change.target.project)
    fid = await _resolve_file_id(session, pid, change.target.file)
    if change.type == ChangeType.DELETE_FILE.value:
        await files.delete_file(session, fid)
    elif change.type == ChangeType.EDIT_FILE.value:
        await files.write_file(session, fid, change.contents)
    elif change.type == ChangeType.NEW_FILE.value:
        await files.new_file(session, pid, change.target.file, change.contents or "")
    else:
        raise MalformedChangeError(f"unknown change type {change.type!r} for {change.target.project}/{change.target.file}")


async def apply_changes(
    session: AsyncSession,
    changes: Iterable[ChangeEntry],
    new_projects: Iterable[str],
    deleted_projects: Iterable[str],
) -> None:
    """
    Create new_projects, replay changes in order, delete deleted_projects (ids),
    then clear the local change log.
    """
    created = applied = removed = 0
    for name in new_projects:
        await projects.new_project(session, name)
        created += 1
    for change in changes:
        await apply_change(session, change)
        applied += 1
    for pid in deleted_projects:
        await projects.delete_project(session, pid)
        removed += 1
    await clear_changes(session)
    log.info("apply_changes new_projects=%d changes=%d deleted_projects=%d", created, applied, removed)
