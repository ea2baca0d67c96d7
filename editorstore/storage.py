"""LocalStorage: the public, async API over the four tables.

Each public method is one atomic unit: it runs inside a single transaction
under the store lock, so concurrent callers see either the old state or the
new one. apply_changes runs the whole batch as one unit.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from editorstore.changelog import service as changelog
from editorstore.changelog.models import ChangeEntry
from editorstore.db.session import init_db, make_engine, make_session_factory
from editorstore.errors import (
    AlreadyExistsError,
    MalformedChangeError,
    NotFoundError,
    StoreError,
    TransactionAbortedError,
)
from editorstore.files import service as files
from editorstore.files.models import FileBrief, FileRead
from editorstore.projects import service as projects
from editorstore.projects.models import ProjectBrief, ProjectRead
from editorstore.settings import service as settings_service
from editorstore.settings.models import EditorSettings
from editorstore.sync import service as sync

log = logging.getLogger(__name__)


class LocalStorage:
    """Projects, files, editor settings and the pending-change log in one SQLite file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock: Optional[asyncio.Lock] = None

    async def connect(self) -> None:
        """Open the database and create or migrate the schema."""
        self._engine = make_engine(self.db_path)
        self._sessions = make_session_factory(self._engine)
        self._lock = asyncio.Lock()
        await init_db(self._engine)
        log.info("Opened store at %s", self.db_path)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessions = None

    async def delete_db(self) -> None:
        """Close the store and remove its database file."""
        await self.close()
        self.db_path.unlink(missing_ok=True)
        log.info("Deleted store at %s", self.db_path)

    @asynccontextmanager
    async def atomic(self, name: str = "transaction") -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session whose writes commit together on exit, or not at all if the
        body raises. Units are serialized by the store lock.
        """
        if self._sessions is None or self._lock is None:
            raise RuntimeError("LocalStorage is not connected")
        async with self._lock:
            log.debug("%s", name)
            async with self._sessions() as session:
                try:
                    yield session
                    await session.commit()
                except StoreError as e:
                    await session.rollback()
                    log.debug("%s rolled back: %s", name, e)
                    raise
                except SQLAlchemyError as e:
                    await session.rollback()
                    log.warning("%s transaction aborted: %s", name, e)
                    raise TransactionAbortedError(f"{name} aborted: {e}") from e
                except Exception:
                    await session.rollback()
                    log.warning("%s transaction aborted", name)
                    raise

    # Files

    async def read_file(self, fid: str) -> FileRead:
        async with self.atomic("read_file") as session:
            return await files.read_file(session, fid)

    async def write_file(self, fid: str, contents: Optional[str]) -> None:
        async with self.atomic("write_file") as session:
            await files.write_file(session, fid, contents)

    async def rename_file(self, fid: str, new_name: str) -> None:
        async with self.atomic("rename_file") as session:
            await files.rename_file(session, fid, new_name)

    async def delete_file(self, fid: str) -> None:
        async with self.atomic("delete_file") as session:
            await files.delete_file(session, fid)

    async def new_file(self, pid: str, name: str, contents: str = "", base64: bool = False) -> FileBrief:
        async with self.atomic("new_file") as session:
            return await files.new_file(session, pid, name, contents, base64)

    async def get_all_files(self) -> List[FileBrief]:
        async with self.atomic("get_all_files") as session:
            return await files.list_all_files(session)

    async def get_open_tabs(self, pid: str) -> List[FileBrief]:
        async with self.atomic("get_open_tabs") as session:
            return await files.get_open_tabs(session, pid)

    async def add_open_tab(self, fid: str) -> None:
        async with self.atomic("add_open_tab") as session:
            await files.set_open_tab(session, fid, True)

    async def remove_open_tab(self, fid: str) -> None:
        async with self.atomic("remove_open_tab") as session:
            await files.set_open_tab(session, fid, False)

    # Projects

    async def new_project(self, name: str) -> ProjectBrief:
        async with self.atomic("new_project") as session:
            return await projects.new_project(session, name)

    async def delete_project(self, pid: str) -> None:
        async with self.atomic("delete_project") as session:
            await projects.delete_project(session, pid)

    async def get_project(self, pid: str) -> ProjectRead:
        async with self.atomic("get_project") as session:
            return await projects.get_project(session, pid)

    async def get_projects(self) -> List[ProjectBrief]:
        async with self.atomic("get_projects") as session:
            return await projects.list_projects(session)

    async def get_project_files(self, pid: str) -> List[FileBrief]:
        async with self.atomic("get_project_files") as session:
            return await projects.get_project_files(session, pid)

    async def get_file_to_run(self, pid: str, question: str) -> Optional[str]:
        async with self.atomic("get_file_to_run") as session:
            return await projects.get_file_to_run(session, pid, question)

    async def set_file_to_run(self, pid: str, question: str, file_name: str) -> None:
        async with self.atomic("set_file_to_run") as session:
            await projects.set_file_to_run(session, pid, question, file_name)

    # Settings

    async def get_settings(self) -> EditorSettings:
        async with self.atomic("get_settings") as session:
            return await settings_service.get_settings(session)

    async def set_settings(self, settings: EditorSettings) -> None:
        async with self.atomic("set_settings") as session:
            await settings_service.set_settings(session, settings)

    # Change log

    async def push_change_log(self, change: ChangeEntry) -> int:
        async with self.atomic("push_change_log") as session:
            return await changelog.push_change(session, change)

    async def pop_change_log(self) -> Optional[ChangeEntry]:
        async with self.atomic("pop_change_log") as session:
            return await changelog.pop_change(session)

    async def top_change_log(self) -> Optional[ChangeEntry]:
        async with self.atomic("top_change_log") as session:
            return await changelog.top_change(session)

    async def count_change_logs(self) -> int:
        async with self.atomic("count_change_logs") as session:
            return await changelog.count_changes(session)

    async def get_change_logs(self) -> List[ChangeEntry]:
        async with self.atomic("get_change_logs") as session:
            return await changelog.list_changes(session)

    async def clear_change_logs(self) -> None:
        async with self.atomic("clear_change_logs") as session:
            await changelog.clear_changes(session)

    # Sync

    async def apply_changes(
        self,
        changes: Iterable[ChangeEntry],
        new_projects: Iterable[str] = (),
        deleted_projects: Iterable[str] = (),
    ) -> None:
        """Apply a remote batch atomically; on failure nothing is applied and the local log is kept."""
        try:
            async with self.atomic("apply_changes") as session:
                await sync.apply_changes(session, changes, new_projects, deleted_projects)
        except (NotFoundError, AlreadyExistsError, MalformedChangeError) as e:
            # Driver failures are already logged by atomic()
            log.warning("apply_changes transaction aborted: %s", e)
            raise
