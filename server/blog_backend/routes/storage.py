"""
Generic object upload endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from blog_backend.dependencies import get_required_identity, get_upload_service
from blog_backend.schemas import UploadResponse
from blog_backend.types import Identity
from blog_backend.uploads import UploadService

router = APIRouter(prefix="/storage", tags=["storage"])


@router.post("", response_model=UploadResponse)
async def upload(
    file: UploadFile = File(...),
    key: str = Form(...),
    identity: Identity = Depends(get_required_identity),
    service: UploadService = Depends(get_upload_service),
):
    data = await file.read()
    url = await run_in_threadpool(
        service.upload, identity, data, key, file.content_type
    )
    return UploadResponse(url=url)
