from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from keyserver.presentation.dependencies import get_app_settings
from keyserver.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@router.get("/open")
async def open_redirect(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
):
    """Forward an emailed link to the configured app URL, keeping the query."""
    if not settings.open_url:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    target = settings.open_url
    query = request.url.query
    if query:
        target = f"{target}{'&' if '?' in target else '?'}{query}"
    return RedirectResponse(target, status_code=status.HTTP_302_FOUND)
