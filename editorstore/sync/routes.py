"""Sync route: apply a batch of remote changes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from editorstore.changelog.models import ApplyChangesRequest
from editorstore.dependencies import get_storage
from editorstore.limiter import limiter
from editorstore.storage import LocalStorage

router = APIRouter(prefix="/api/sync", tags=["sync"])
log = logging.getLogger(__name__)


@router.post("/apply")
@limiter.limit("30/minute")
async def apply_changes(
    request: Request,
    body: ApplyChangesRequest,
    storage: Annotated[LocalStorage, Depends(get_storage)],
) -> dict:
    """
    Apply remote changes, create new projects and delete removed ones, then clear
    the local change log. All or nothing: on error nothing is applied.
    """
    await storage.apply_changes(body.changes, body.new_projects, body.deleted_projects)
    log.info(
        "apply_changes changes=%d new_projects=%d deleted_projects=%d",
        len(body.changes),
        len(body.new_projects),
        len(body.deleted_projects),
    )
    return {
        "applied": len(body.changes),
        "new_projects": len(body.new_projects),
        "deleted_projects": len(body.deleted_projects),
    }
