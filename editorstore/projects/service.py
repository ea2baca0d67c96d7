"""Project operations: create, delete, list, run-file map, file listing.

Functions take the caller's session; editorstore.storage wraps each in one transaction.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from editorstore.db.session import utc_now
from editorstore.errors import AlreadyExistsError, NotFoundError
from editorstore.files.models import FileBrief, FileRecord
from editorstore.identity import project_id
from editorstore.projects.models import ProjectBrief, ProjectRead, ProjectRecord

log = logging.getLogger(__name__)


async def get_project_record(session: AsyncSession, pid: str) -> Optional[ProjectRecord]:
    """Return project by id or None."""
    return await session.get(ProjectRecord, pid)


async def require_project(session: AsyncSession, pid: str) -> ProjectRecord:
    """Return project by id. Raises NotFoundError if missing."""
    project = await get_project_record(session, pid)
    if project is None:
        raise NotFoundError(f"project {pid!r} does not exist")
    return project


async def new_project(session: AsyncSession, name: str) -> ProjectBrief:
    """Create an empty project. Raises AlreadyExistsError if one with this name exists."""
    pid = project_id(name)
    if await get_project_record(session, pid) is not None:
        raise AlreadyExistsError(f"project {name!r} already exists")
    project = ProjectRecord(id=pid, name=name, runs={}, open_tabs={}, last_modified=utc_now())
    session.add(project)
    await session.flush()
    log.info("new_project name=%s id=%s", name, pid)
    return ProjectBrief.model_validate(project)


async def delete_project(session: AsyncSession, pid: str) -> None:
    """Delete project and all its files. A missing project is not an error."""
    project = await get_project_record(session, pid)
    result = await session.execute(delete(FileRecord).where(FileRecord.project_id == pid))
    if project is None:
        log.info("delete_project id=%s: project already gone (files removed=%d)", pid, result.rowcount)
        return
    await session.delete(project)
    await session.flush()
    log.info("delete_project id=%s name=%s files=%d", pid, project.name, result.rowcount)


async def get_project(session: AsyncSession, pid: str) -> ProjectRead:
    return ProjectRead.model_validate(await require_project(session, pid))


async def list_projects(session: AsyncSession) -> List[ProjectBrief]:
    result = await session.execute(select(ProjectRecord).order_by(ProjectRecord.name))
    return [ProjectBrief.model_validate(p) for p in result.scalars().all()]


async def get_project_files(session: AsyncSession, pid: str) -> List[FileBrief]:
    """
    List the project's files (no contents). Called when the project is opened,
    so the project's last_modified is bumped here as well.
    """
    project = await require_project(session, pid)
    project.last_modified = utc_now()
    result = await session.execute(
        select(FileRecord).where(FileRecord.project_id == pid).order_by(FileRecord.name)
    )
    return [FileBrief.model_validate(f) for f in result.scalars().all()]


async def get_file_to_run(session: AsyncSession, pid: str, question: str) -> Optional[str]:
    """File name to run for question, or None if none was chosen."""
    project = await require_project(session, pid)
    return project.runs.get(question) or None


async def set_file_to_run(session: AsyncSession, pid: str, question: str, file_name: str) -> None:
    """Record file_name (e.g. "q1/main.c") as the file to run for question. The file must exist."""
    project = await require_project(session, pid)
    result = await session.execute(
        select(FileRecord.id).where(FileRecord.project_id == pid, FileRecord.name == file_name)
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError(f"file {file_name!r} does not exist in project {pid!r}")
    # Reassign so the JSON column is marked dirty
    project.runs = {**project.runs, question: file_name}
    await session.flush()


def drop_runs_for(project: ProjectRecord, fid: str, file_name: str) -> List[str]:
    """Remove run entries pointing at the file (by name or id). Returns affected questions."""
    dropped = [q for q, target in project.runs.items() if target in (file_name, fid)]
    if dropped:
        project.runs = {q: t for q, t in project.runs.items() if q not in dropped}
    return dropped


def rename_runs_for(project: ProjectRecord, old_name: str, new_name: str) -> None:
    """Point run entries at a file's new name."""
    if old_name in project.runs.values():
        project.runs = {q: (new_name if t == old_name else t) for q, t in project.runs.items()}
