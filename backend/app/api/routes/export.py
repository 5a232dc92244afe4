"""Export API route: download all prompts as JSON, CSV or Markdown (Pro only)."""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.context import RequestContext, require_pro
from app.domain.tier import FEATURE_EXPORT
from app.export import build_export_record, render_export, resolve_format
from app.services import prompt_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/export")
async def export_prompts(
    format: str = Query("json", description="json, csv, markdown or md"),
    ctx: RequestContext = Depends(require_pro(FEATURE_EXPORT)),
):
    """Export every prompt the caller owns.

    Order of checks: auth (401), Pro gate (403), format (400). Prompts are
    only read once all three pass.
    """
    fmt = resolve_format(format)

    try:
        rows = await prompt_service.list_prompts_with_folder_names(ctx)
    except SQLAlchemyError:
        logger.exception("export_failed", user_id=ctx.user_id, format=fmt.value)
        return JSONResponse(status_code=500, content={"error": "Failed to export prompts"})

    records = [build_export_record(prompt, folder_name) for prompt, folder_name in rows]
    payload = render_export(records, fmt, exported_at=datetime.now(UTC))

    logger.info("prompts_exported", user_id=ctx.user_id, format=fmt.value, count=len(records))
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{payload.filename}"',
        },
    )
