"""Project API routes: list, create, delete, file listing, run files, open tabs."""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, status

from editorstore.dependencies import get_storage
from editorstore.files.models import FileBrief
from editorstore.projects.models import ProjectBrief, ProjectCreate, ProjectRead, RunFile
from editorstore.storage import LocalStorage

router = APIRouter(prefix="/api/projects", tags=["projects"])
log = logging.getLogger(__name__)

Storage = Annotated[LocalStorage, Depends(get_storage)]


@router.get("", response_model=List[ProjectBrief])
async def list_projects(storage: Storage) -> List[ProjectBrief]:
    return await storage.get_projects()


@router.post("", response_model=ProjectBrief, status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, storage: Storage) -> ProjectBrief:
    """Create an empty project. 409 if the name is taken."""
    return await storage.new_project(body.name)


@router.get("/{pid}", response_model=ProjectRead)
async def get_project(pid: str, storage: Storage) -> ProjectRead:
    return await storage.get_project(pid)


@router.delete("/{pid}")
async def delete_project(pid: str, storage: Storage) -> dict:
    """Delete the project and all its files."""
    await storage.delete_project(pid)
    return {"id": pid, "deleted": True}


@router.get("/{pid}/files", response_model=List[FileBrief])
async def project_files(pid: str, storage: Storage) -> List[FileBrief]:
    """Files of the project (opening a project; bumps its last_modified)."""
    return await storage.get_project_files(pid)


@router.get("/{pid}/open-tabs", response_model=List[FileBrief])
async def open_tabs(pid: str, storage: Storage) -> List[FileBrief]:
    return await storage.get_open_tabs(pid)


@router.get("/{pid}/runs/{question}")
async def get_run_file(pid: str, question: str, storage: Storage) -> dict:
    """File to run for question; file is null when none was chosen."""
    return {"question": question, "file": await storage.get_file_to_run(pid, question)}


@router.put("/{pid}/runs/{question}")
async def set_run_file(pid: str, question: str, body: RunFile, storage: Storage) -> dict:
    await storage.set_file_to_run(pid, question, body.file)
    log.info("set_run_file project=%s question=%s file=%s", pid, question, body.file)
    return {"question": question, "file": body.file}
