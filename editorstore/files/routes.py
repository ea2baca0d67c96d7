"""File API routes: create, read, write, rename, delete, open tabs."""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, status

from editorstore.dependencies import get_storage
from editorstore.files.models import FileBrief, FileCreate, FileRead, FileRename, FileWrite
from editorstore.storage import LocalStorage

router = APIRouter(prefix="/api/files", tags=["files"])
log = logging.getLogger(__name__)

Storage = Annotated[LocalStorage, Depends(get_storage)]


@router.get("", response_model=List[FileBrief])
async def list_all_files(storage: Storage) -> List[FileBrief]:
    """All files of all projects, without contents."""
    return await storage.get_all_files()


@router.post("", response_model=FileBrief, status_code=status.HTTP_201_CREATED)
async def create_file(body: FileCreate, storage: Storage) -> FileBrief:
    """Create a file. 409 if the name is taken in the project, 404 if the project is missing."""
    return await storage.new_file(body.project_id, body.name, body.contents, body.base64)


@router.get("/{fid}", response_model=FileRead)
async def read_file(fid: str, storage: Storage) -> FileRead:
    return await storage.read_file(fid)


@router.put("/{fid}")
async def write_file(fid: str, body: FileWrite, storage: Storage) -> dict:
    """Save new contents (null clears the file)."""
    await storage.write_file(fid, body.contents)
    return {"id": fid, "saved": True}


@router.post("/{fid}/rename")
async def rename_file(fid: str, body: FileRename, storage: Storage) -> dict:
    await storage.rename_file(fid, body.name)
    return {"id": fid, "name": body.name}


@router.delete("/{fid}")
async def delete_file(fid: str, storage: Storage) -> dict:
    await storage.delete_file(fid)
    return {"id": fid, "deleted": True}


@router.put("/{fid}/open")
async def open_tab(fid: str, storage: Storage) -> dict:
    """Mark file as open in an editor tab."""
    await storage.add_open_tab(fid)
    return {"id": fid, "open": True}


@router.delete("/{fid}/open")
async def close_tab(fid: str, storage: Storage) -> dict:
    await storage.remove_open_tab(fid)
    return {"id": fid, "open": False}
