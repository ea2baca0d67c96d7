"""Editor settings routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from editorstore.dependencies import get_storage
from editorstore.settings.models import EditorSettings
from editorstore.storage import LocalStorage

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=EditorSettings)
async def get_settings(storage: Annotated[LocalStorage, Depends(get_storage)]) -> EditorSettings:
    return await storage.get_settings()


@router.put("", response_model=EditorSettings)
async def put_settings(
    body: EditorSettings,
    storage: Annotated[LocalStorage, Depends(get_storage)],
) -> EditorSettings:
    """Replace all settings."""
    await storage.set_settings(body)
    return body
