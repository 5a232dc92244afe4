"""Folder API routes: Pro only, owner-scoped."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response

from app.core.context import RequestContext, require_pro
from app.domain.tier import FEATURE_FOLDERS
from app.schemas.folders import FolderCreate, FolderResponse, FolderUpdate
from app.services import folder_service

router = APIRouter()

require_folders = require_pro(FEATURE_FOLDERS)


@router.get("/", response_model=list[FolderResponse])
async def list_folders(ctx: RequestContext = Depends(require_folders)):
    """List the caller's folders ordered by name."""
    return await folder_service.list_folders(ctx)


@router.post("/", response_model=FolderResponse, status_code=201)
async def create_folder(body: FolderCreate, ctx: RequestContext = Depends(require_folders)):
    return await folder_service.create_folder(ctx, name=body.name, description=body.description)


@router.get("/{folder_id}", response_model=FolderResponse)
async def get_folder(folder_id: UUID, ctx: RequestContext = Depends(require_folders)):
    return await folder_service.get_folder(ctx, folder_id)


@router.patch("/{folder_id}", response_model=FolderResponse)
async def update_folder(
    folder_id: UUID,
    body: FolderUpdate,
    ctx: RequestContext = Depends(require_folders),
):
    return await folder_service.update_folder(ctx, folder_id, body.model_dump(exclude_unset=True))


@router.delete("/{folder_id}", status_code=204)
async def delete_folder(folder_id: UUID, ctx: RequestContext = Depends(require_folders)):
    """Delete a folder. Its prompts stay, with their folder cleared."""
    await folder_service.delete_folder(ctx, folder_id)
    return Response(status_code=204)
