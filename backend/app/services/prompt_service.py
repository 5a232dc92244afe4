"""Prompt CRUD scoped to the request owner.

Every query filters on ``ctx.user_id``; a prompt owned by someone else is
indistinguishable from a missing one (NotFoundError).
"""

from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy import func, select, update

from app.core.context import RequestContext
from app.core.exceptions import NotFoundError, PromptLimitExceededError, PromptVaultError
from app.db.models.folder import Folder
from app.db.models.profile import Profile
from app.db.models.prompt import Prompt
from app.domain.prompts import normalize_tags
from app.domain.tier import FEATURE_FOLDERS, ensure_pro, prompt_limit_for

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = ("title", "content", "folder_id", "tags")


async def list_prompts(ctx: RequestContext) -> list[Prompt]:
    """Return the owner's prompts, newest first."""
    result = await ctx.session.execute(
        select(Prompt)
        .where(Prompt.user_id == ctx.user_id)
        .order_by(Prompt.created_at.desc())
    )
    return list(result.scalars().all())


async def list_prompts_with_folder_names(ctx: RequestContext) -> list[tuple[Prompt, str | None]]:
    """Return (prompt, folder name) pairs, newest first."""
    result = await ctx.session.execute(
        select(Prompt, Folder.name)
        .outerjoin(Folder, Prompt.folder_id == Folder.id)
        .where(Prompt.user_id == ctx.user_id)
        .order_by(Prompt.created_at.desc())
    )
    return [(prompt, folder_name) for prompt, folder_name in result.all()]


async def count_prompts(ctx: RequestContext) -> int:
    result = await ctx.session.execute(
        select(func.count(Prompt.id)).where(Prompt.user_id == ctx.user_id)
    )
    return result.scalar() or 0


async def get_prompt(ctx: RequestContext, prompt_id: UUID) -> Prompt:
    result = await ctx.session.execute(
        select(Prompt).where(
            Prompt.id == prompt_id,
            Prompt.user_id == ctx.user_id,
        )
    )
    prompt = result.scalar_one_or_none()
    if prompt is None:
        raise NotFoundError("Prompt")
    return prompt


async def _check_folder(ctx: RequestContext, folder_id: UUID | None) -> None:
    """Assigning a folder needs Pro and a folder the caller owns."""
    if folder_id is None:
        return
    ensure_pro(ctx.profile, FEATURE_FOLDERS)
    result = await ctx.session.execute(
        select(Folder.id).where(
            Folder.id == folder_id,
            Folder.user_id == ctx.user_id,
        )
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Folder")


async def _lock_owner(ctx: RequestContext) -> None:
    """Take the write lock on the owner's profile row.

    Concurrent creates for the same owner queue here until the holder
    commits or rolls back, so the count that follows sees every prompt
    they inserted.
    """
    await ctx.session.execute(
        update(Profile)
        .where(Profile.id == ctx.user_id)
        .values(updated_at=datetime.now(timezone.utc))
    )


async def create_prompt(
    ctx: RequestContext,
    title: str,
    content: str,
    tags: list[str] | None = None,
    folder_id: UUID | None = None,
    free_limit: int = 50,
) -> Prompt:
    """Create a prompt, enforcing the free-tier cap.

    Raises:
        PromptLimitExceededError: non-Pro owner already holds ``free_limit`` prompts
        UpgradeRequiredError: non-Pro owner tried to file it into a folder
        NotFoundError: folder_id is not one of the owner's folders
    """
    limit = prompt_limit_for(ctx.profile, free_limit)
    try:
        if limit != -1:
            await _lock_owner(ctx)
            count = await count_prompts(ctx)
            if count >= limit:
                logger.info("prompt_limit_reached", user_id=ctx.user_id, count=count, limit=limit)
                raise PromptLimitExceededError(limit)

        await _check_folder(ctx, folder_id)
    except PromptVaultError:
        await ctx.session.rollback()
        raise

    prompt = Prompt(
        user_id=ctx.user_id,
        folder_id=folder_id,
        title=title,
        content=content,
        tags=normalize_tags(tags),
        is_favorite=False,
    )
    ctx.session.add(prompt)
    await ctx.session.commit()
    await ctx.session.refresh(prompt)

    logger.info("prompt_created", user_id=ctx.user_id, prompt_id=str(prompt.id))
    return prompt


async def update_prompt(ctx: RequestContext, prompt_id: UUID, changes: dict) -> Prompt:
    """Apply a partial update (title, content, folder_id, tags)."""
    prompt = await get_prompt(ctx, prompt_id)

    if "folder_id" in changes:
        await _check_folder(ctx, changes["folder_id"])
    if "tags" in changes:
        changes["tags"] = normalize_tags(changes["tags"])

    for field in _UPDATABLE_FIELDS:
        if field in changes:
            setattr(prompt, field, changes[field])

    await ctx.session.commit()
    await ctx.session.refresh(prompt)
    logger.info("prompt_updated", user_id=ctx.user_id, prompt_id=str(prompt.id), fields=sorted(changes))
    return prompt


async def toggle_favorite(ctx: RequestContext, prompt_id: UUID) -> Prompt:
    prompt = await get_prompt(ctx, prompt_id)
    prompt.is_favorite = not prompt.is_favorite
    await ctx.session.commit()
    await ctx.session.refresh(prompt)
    return prompt


async def delete_prompt(ctx: RequestContext, prompt_id: UUID) -> None:
    """Hard-delete a prompt (no soft delete)."""
    prompt = await get_prompt(ctx, prompt_id)
    await ctx.session.delete(prompt)
    await ctx.session.commit()
    logger.info("prompt_deleted", user_id=ctx.user_id, prompt_id=str(prompt_id))
