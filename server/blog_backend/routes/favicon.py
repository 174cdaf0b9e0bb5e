"""
Favicon endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from blog_backend.dependencies import get_favicon_service, get_required_identity
from blog_backend.favicon import FAVICON_CACHE_CONTROL, FaviconService
from blog_backend.schemas import StatusResponse
from blog_backend.types import Identity

router = APIRouter(prefix="/favicon", tags=["favicon"])


@router.get("")
def get_favicon(service: FaviconService = Depends(get_favicon_service)):
    data = service.get_favicon()
    return Response(
        content=data,
        media_type="image/webp",
        headers={"Cache-Control": FAVICON_CACHE_CONTROL},
    )


@router.get("/original")
def get_original_favicon(service: FaviconService = Depends(get_favicon_service)):
    data, content_type = service.get_original()
    return Response(
        content=data,
        media_type=content_type,
        headers={"Cache-Control": FAVICON_CACHE_CONTROL},
    )


@router.post("", response_model=StatusResponse)
async def upload_favicon(
    file: UploadFile = File(...),
    identity: Identity = Depends(get_required_identity),
    service: FaviconService = Depends(get_favicon_service),
):
    data = await file.read()
    await run_in_threadpool(service.upload, identity, data, file.content_type)
    return StatusResponse(status="ok")
