from fastapi import APIRouter, Depends

from app.core.context import RequestContext, get_request_context
from app.schemas.profile import ProfileResponse

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(ctx: RequestContext = Depends(get_request_context)):
    """Return the caller's profile (created on first request)."""
    return ctx.profile
