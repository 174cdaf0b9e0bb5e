"""
Friend link endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from blog_backend.dependencies import get_friend_service, get_identity
from blog_backend.friends import FriendService
from blog_backend.schemas import (
    Friend,
    FriendCreateRequest,
    FriendListResponse,
    FriendResponse,
    FriendUpdateRequest,
    StatusResponse,
)
from blog_backend.types import Identity

router = APIRouter(prefix="/friend", tags=["friends"])


@router.get("", response_model=FriendListResponse, response_model_exclude_none=True)
def list_friends(
    identity: Optional[Identity] = Depends(get_identity),
    service: FriendService = Depends(get_friend_service),
):
    friends, apply_list = service.list_friends(identity)
    return FriendListResponse(
        friend_list=[Friend(**f.as_dict()) for f in friends],
        apply_list=(
            [Friend(**f.as_dict()) for f in apply_list]
            if apply_list is not None
            else None
        ),
    )


@router.post("", response_model=FriendResponse)
def create_friend(
    payload: FriendCreateRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: FriendService = Depends(get_friend_service),
):
    friend = service.create(identity, payload)
    return FriendResponse(friend=Friend(**friend.as_dict()))


@router.put("/{friend_id}", response_model=FriendResponse)
def update_friend(
    friend_id: int,
    payload: FriendUpdateRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: FriendService = Depends(get_friend_service),
):
    friend = service.update(identity, friend_id, payload)
    return FriendResponse(friend=Friend(**friend.as_dict()))


@router.delete("/{friend_id}", response_model=StatusResponse)
def delete_friend(
    friend_id: int,
    identity: Optional[Identity] = Depends(get_identity),
    service: FriendService = Depends(get_friend_service),
):
    service.delete(identity, friend_id)
    return StatusResponse(status="ok")
