"""
Site configuration endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from blog_backend.config_service import ConfigService
from blog_backend.dependencies import get_config_service, get_identity
from blog_backend.schemas import (
    AiTestRequest,
    AiTestResponse,
    ClearCacheResponse,
    UpdateConfigResponse,
)
from blog_backend.types import Identity

router = APIRouter(prefix="/config", tags=["config"])


# Fixed paths are registered before /{config_type} so they are not
# captured by it.
@router.delete("/cache", response_model=ClearCacheResponse)
def clear_cache(
    identity: Optional[Identity] = Depends(get_identity),
    service: ConfigService = Depends(get_config_service),
):
    service.clear_cache(identity)
    return ClearCacheResponse()


@router.post("/test-ai", response_model=AiTestResponse)
def test_ai(
    payload: AiTestRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: ConfigService = Depends(get_config_service),
):
    return service.test_ai(identity, payload)


@router.get("/{config_type}")
def get_config(
    config_type: str,
    identity: Optional[Identity] = Depends(get_identity),
    service: ConfigService = Depends(get_config_service),
) -> dict:
    return service.get_config(config_type, identity)


async def _read_json(request: Request) -> Any:
    # Malformed or missing bodies reach the service as None, which rejects
    # them only after the namespace and caller have been checked.
    try:
        return await request.json()
    except ValueError:
        return None


@router.post(
    "/{config_type}",
    response_model=UpdateConfigResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": {"type": "object"}}},
        }
    },
)
async def update_config(
    config_type: str,
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    service: ConfigService = Depends(get_config_service),
):
    payload = await _read_json(request)
    updated = await run_in_threadpool(
        service.update_config, config_type, identity, payload
    )
    return UpdateConfigResponse(updated=updated)
