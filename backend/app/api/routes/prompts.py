"""Prompt API routes: owner-scoped CRUD."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from app.core.config import get_settings
from app.core.context import RequestContext, get_request_context
from app.domain.prompts import FolderSelection, filter_prompts
from app.schemas.prompts import PromptCreate, PromptResponse, PromptUpdate
from app.services import prompt_service

router = APIRouter()


@router.get("/", response_model=list[PromptResponse])
async def list_prompts(
    q: str = Query("", description="Matches title, content or tags (case-insensitive)"),
    folder: str = Query(FolderSelection.ALL, description="all, favorites, no-folder or a folder id"),
    ctx: RequestContext = Depends(get_request_context),
):
    """List the caller's prompts, newest first."""
    prompts = await prompt_service.list_prompts(ctx)
    return filter_prompts(prompts, query=q, selection=folder)


@router.post("/", response_model=PromptResponse, status_code=201)
async def create_prompt(body: PromptCreate, ctx: RequestContext = Depends(get_request_context)):
    """Create a prompt. Free-tier users are capped at ``free_prompt_limit``."""
    settings = get_settings()
    return await prompt_service.create_prompt(
        ctx,
        title=body.title,
        content=body.content,
        tags=body.tags,
        folder_id=body.folder_id,
        free_limit=settings.free_prompt_limit,
    )


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(prompt_id: UUID, ctx: RequestContext = Depends(get_request_context)):
    return await prompt_service.get_prompt(ctx, prompt_id)


@router.patch("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: UUID,
    body: PromptUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    """Update any of title, content, tags or folder_id (null clears the folder)."""
    return await prompt_service.update_prompt(ctx, prompt_id, body.model_dump(exclude_unset=True))


@router.post("/{prompt_id}/favorite", response_model=PromptResponse)
async def toggle_favorite(prompt_id: UUID, ctx: RequestContext = Depends(get_request_context)):
    return await prompt_service.toggle_favorite(ctx, prompt_id)


@router.delete("/{prompt_id}", status_code=204)
async def delete_prompt(prompt_id: UUID, ctx: RequestContext = Depends(get_request_context)):
    await prompt_service.delete_prompt(ctx, prompt_id)
    return Response(status_code=204)
