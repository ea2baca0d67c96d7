"""Change log routes: the pending changes the sync client pushes upstream."""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends

from editorstore.changelog.models import ChangeEntry
from editorstore.dependencies import get_storage
from editorstore.storage import LocalStorage

router = APIRouter(prefix="/api/changes", tags=["changes"])

Storage = Annotated[LocalStorage, Depends(get_storage)]


@router.get("", response_model=List[ChangeEntry])
async def list_changes(storage: Storage) -> List[ChangeEntry]:
    """Pending changes, newest first."""
    return await storage.get_change_logs()


@router.get("/count")
async def count_changes(storage: Storage) -> dict:
    return {"count": await storage.count_change_logs()}


@router.get("/top", response_model=Optional[ChangeEntry])
async def top_change(storage: Storage) -> Optional[ChangeEntry]:
    """Most recent change, or null."""
    return await storage.top_change_log()


@router.post("/pop", response_model=Optional[ChangeEntry])
async def pop_change(storage: Storage) -> Optional[ChangeEntry]:
    return await storage.pop_change_log()


@router.delete("")
async def clear_changes(storage: Storage) -> dict:
    await storage.clear_change_logs()
    return {"cleared": True}
