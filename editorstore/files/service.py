"""File operations. Every mutation also pushes a change-log entry.

Functions take the caller's session; editorstore.storage wraps each in one transaction.
"""

import binascii
import logging
import re
from base64 import b64decode
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from editorstore.changelog.models import ChangeEntry, ChangeTarget, ChangeType
from editorstore.changelog.service import push_change
from editorstore.db.session import utc_now
from editorstore.errors import AlreadyExistsError, MalformedChangeError, NotFoundError
from editorstore.files.models import FileBrief, FileRead, FileRecord
from editorstore.identity import compute_checksum, file_id
from editorstore.projects.service import (
    drop_runs_for,
    get_project_record,
    rename_runs_for,
    require_project,
)

log = logging.getLogger(__name__)

# data:<mime>[;<param>][;base64],<payload>
_DATA_URI = re.compile(r"^data:([^;]*)?(?:;(?!base64)([^;]*))?(?:;(base64))?,(.*)", re.DOTALL)


def decode_data_uri(contents: str) -> str:
    """
    Return the decoded payload if contents is a base64 data URI, else contents unchanged.
    Payload bytes are read as UTF-8, or Latin-1 (one char per byte) if not valid UTF-8.
    """
    m = _DATA_URI.match(contents)
    if m is None:
        return contents
    mime, _param, is_b64, payload = m.groups()
    if not is_b64 and mime != "base64":
        return contents
    try:
        raw = b64decode(payload)
    except (binascii.Error, ValueError) as e:
        raise MalformedChangeError(f"invalid base64 payload: {e}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


async def _get_record(session: AsyncSession, fid: str) -> FileRecord:
    record = await session.get(FileRecord, fid)
    if record is None:
        raise NotFoundError(f"file {fid!r} does not exist")
    return record


async def _target(session: AsyncSession, record: FileRecord) -> ChangeTarget:
    """Change-log target for the file: its name plus its project's name."""
    project = await require_project(session, record.project_id)
    return ChangeTarget(file=record.name, project=project.name)


async def find_file_id(session: AsyncSession, pid: str, name: str) -> Optional[str]:
    """Id of the file called name in project pid, looked up by name (survives renames)."""
    result = await session.execute(
        select(FileRecord.id).where(FileRecord.project_id == pid, FileRecord.name == name)
    )
    return result.scalar_one_or_none()


async def read_file(session: AsyncSession, fid: str) -> FileRead:
    """Return the full file. Raises NotFoundError if missing."""
    return FileRead.model_validate(await _get_record(session, fid))


async def write_file(session: AsyncSession, fid: str, contents: Optional[str]) -> None:
    """
    Replace contents (None clears the file). The editFile entry is pushed
    before the record changes so it names the file as it currently is.
    """
    record = await _get_record(session, fid)
    checksum = compute_checksum(contents)
    target = await _target(session, record)
    await push_change(session, ChangeEntry(type=ChangeType.EDIT_FILE.value, target=target, contents=contents))
    record.contents = contents
    record.checksum = checksum
    record.last_modified = utc_now()
    await session.flush()
    log.debug("write_file id=%s checksum=%s", fid, checksum or "-")


async def rename_file(session: AsyncSession, fid: str, new_name: str) -> None:
    """
    Rename in place (the id does not change). Logged as newFile(new name, contents)
    followed by deleteFile(old name).
    """
    record = await _get_record(session, fid)
    old_name = record.name
    if new_name == old_name:
        return
    if await find_file_id(session, record.project_id, new_name) is not None:
        raise AlreadyExistsError(f"file {new_name!r} already exists in project {record.project_id!r}")
    project = await require_project(session, record.project_id)
    record.name = new_name
    record.last_modified = utc_now()
    rename_runs_for(project, old_name, new_name)
    await session.flush()
    await push_change(
        session,
        ChangeEntry(
            type=ChangeType.NEW_FILE.value,
            target=ChangeTarget(file=new_name, project=project.name),
            contents=record.contents,
        ),
    )
    await push_change(
        session,
        ChangeEntry(type=ChangeType.DELETE_FILE.value, target=ChangeTarget(file=old_name, project=project.name)),
    )
    log.info("rename_file id=%s %s -> %s", fid, old_name, new_name)


async def delete_file(session: AsyncSession, fid: str) -> None:
    """
    Delete the file and drop run entries pointing at it. Raises NotFoundError if
    missing. If the owning project is already gone (deleted from another side),
    the record is removed with a warning and nothing is logged.
    """
    record = await _get_record(session, fid)
    project = await get_project_record(session, record.project_id)
    await session.delete(record)
    await session.flush()
    if project is None:
        log.warning("delete_file id=%s name=%s: project %s no longer exists", fid, record.name, record.project_id)
        return
    await push_change(
        session,
        ChangeEntry(type=ChangeType.DELETE_FILE.value, target=ChangeTarget(file=record.name, project=project.name)),
    )
    dropped = drop_runs_for(project, fid, record.name)
    if dropped:
        log.debug("delete_file id=%s cleared run for questions %s", fid, dropped)
    await session.flush()
    log.info("delete_file id=%s name=%s", fid, record.name)


async def new_file(
    session: AsyncSession,
    pid: str,
    name: str,
    contents: str = "",
    base64: bool = False,
) -> FileBrief:
    """
    Create a file in project pid. With base64=True a data URI in contents is
    decoded first. Raises AlreadyExistsError if the name is taken in the project,
    NotFoundError if the project does not exist.
    """
    if base64:
        contents = decode_data_uri(contents)
    fid = file_id(pid, name)
    if await find_file_id(session, pid, name) is not None:
        raise AlreadyExistsError(f"file {name!r} already exists in project {pid!r}")
    project = await require_project(session, pid)
    if await session.get(FileRecord, fid) is not None:
        # A file renamed away from this name still holds the derived id
        raise AlreadyExistsError(f"file id for {name!r} is held by a renamed file in project {pid!r}")
    record = FileRecord(
        id=fid,
        project_id=pid,
        name=name,
        contents=contents,
        checksum=compute_checksum(contents),
        last_modified=utc_now(),
        open=False,
    )
    session.add(record)
    await session.flush()
    await push_change(
        session,
        ChangeEntry(
            type=ChangeType.NEW_FILE.value,
            target=ChangeTarget(file=name, project=project.name),
            contents=contents,
        ),
    )
    log.info("new_file project=%s name=%s id=%s", pid, name, fid)
    return FileBrief.model_validate(record)


async def list_all_files(session: AsyncSession) -> List[FileBrief]:
    result = await session.execute(select(FileRecord).order_by(FileRecord.project_id, FileRecord.name))
    return [FileBrief.model_validate(f) for f in result.scalars().all()]


async def get_open_tabs(session: AsyncSession, pid: str) -> List[FileBrief]:
    """Files of the project currently open in editor tabs."""
    result = await session.execute(
        select(FileRecord).where(FileRecord.project_id == pid, FileRecord.open.is_(True)).order_by(FileRecord.name)
    )
    return [FileBrief.model_validate(f) for f in result.scalars().all()]


async def set_open_tab(session: AsyncSession, fid: str, is_open: bool) -> None:
    """Mark a file as open or closed in the editor. Not change-logged."""
    record = await _get_record(session, fid)
    record.open = is_open
    await session.flush()
