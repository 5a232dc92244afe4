"""Folder CRUD scoped to the request owner.

Callers are expected to have passed the Pro gate already; the route
layer wires ``require_pro`` in front of every operation here.
"""

from uuid import UUID

import structlog
from sqlalchemy import select, update

from app.core.context import RequestContext
from app.core.exceptions import NotFoundError
from app.db.models.folder import Folder
from app.db.models.prompt import Prompt

logger = structlog.get_logger(__name__)


async def list_folders(ctx: RequestContext) -> list[Folder]:
    """Return the owner's folders ordered by name."""
    result = await ctx.session.execute(
        select(Folder).where(Folder.user_id == ctx.user_id).order_by(Folder.name)
    )
    return list(result.scalars().all())


async def get_folder(ctx: RequestContext, folder_id: UUID) -> Folder:
    result = await ctx.session.execute(
        select(Folder).where(
            Folder.id == folder_id,
            Folder.user_id == ctx.user_id,
        )
    )
    folder = result.scalar_one_or_none()
    if folder is None:
        raise NotFoundError("Folder")
    return folder


async def create_folder(ctx: RequestContext, name: str, description: str | None = None) -> Folder:
    folder = Folder(user_id=ctx.user_id, name=name, description=description or None)
    ctx.session.add(folder)
    await ctx.session.commit()
    await ctx.session.refresh(folder)
    logger.info("folder_created", user_id=ctx.user_id, folder_id=str(folder.id))
    return folder


async def update_folder(ctx: RequestContext, folder_id: UUID, changes: dict) -> Folder:
    folder = await get_folder(ctx, folder_id)
    if "name" in changes:
        folder.name = changes["name"]
    if "description" in changes:
        folder.description = changes["description"] or None
    await ctx.session.commit()
    await ctx.session.refresh(folder)
    return folder


async def delete_folder(ctx: RequestContext, folder_id: UUID) -> int:
    """Delete a folder, moving its prompts to "no folder".

    Returns the number of prompts whose folder reference was cleared.
    """
    folder = await get_folder(ctx, folder_id)

    result = await ctx.session.execute(
        update(Prompt)
        .where(Prompt.folder_id == folder.id, Prompt.user_id == ctx.user_id)
        .values(folder_id=None)
    )
    await ctx.session.delete(folder)
    await ctx.session.commit()

    detached = result.rowcount or 0
    logger.info("folder_deleted", user_id=ctx.user_id, folder_id=str(folder_id), prompts_detached=detached)
    return detached
