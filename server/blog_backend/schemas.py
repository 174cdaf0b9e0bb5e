"""
Pydantic schemas for the blog backend.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from blog_backend.types import Namespace

AI_PROVIDERS = ("openai", "gemini", "deepseek", "claude", "custom")


class _ConfigUpdate(BaseModel):
    """Partial config update.

    Declared fields are the well-known keys and get validated and coerced.
    Anything else passes through as long as it is a scalar.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=False)

    @model_validator(mode="after")
    def _extras_are_scalars(self):
        for key, value in (self.model_extra or {}).items():
            if isinstance(value, (dict, list)):
                raise ValueError(f"{key} must be a scalar value")
        return self

    def changes(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class ClientConfigUpdate(_ConfigUpdate):
    site_name: Optional[str] = Field(None, alias="site.name", max_length=64)
    site_description: Optional[str] = Field(
        None, alias="site.description", max_length=256
    )
    site_avatar: Optional[str] = Field(None, alias="site.avatar", max_length=512)
    site_page_size: Optional[int] = Field(None, alias="site.page_size", ge=1, le=100)
    friend_apply_enable: Optional[bool] = Field(None, alias="friend_apply_enable")
    comment_enable: Optional[bool] = Field(None, alias="comment.enabled")
    counter_enable: Optional[bool] = Field(None, alias="counter.enabled")


class ServerConfigUpdate(_ConfigUpdate):
    webhook_url: Optional[str] = Field(None, alias="webhook_url", max_length=512)
    ai_summary_enabled: Optional[bool] = Field(None, alias="ai_summary.enabled")
    ai_summary_provider: Optional[str] = Field(None, alias="ai_summary.provider")
    ai_summary_model: Optional[str] = Field(
        None, alias="ai_summary.model", max_length=128
    )
    ai_summary_api_url: Optional[str] = Field(
        None, alias="ai_summary.api_url", max_length=512
    )
    ai_summary_api_key: Optional[str] = Field(
        None, alias="ai_summary.api_key", max_length=512
    )

    @field_validator("webhook_url", "ai_summary_api_url")
    @classmethod
    def _http_url(cls, value: Optional[str]) -> Optional[str]:
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value

    @field_validator("ai_summary_provider")
    @classmethod
    def _known_provider(cls, value: Optional[str]) -> Optional[str]:
        if value and value not in AI_PROVIDERS:
            raise ValueError(f"must be one of {', '.join(AI_PROVIDERS)}")
        return value


CONFIG_SCHEMAS: dict[Namespace, type[_ConfigUpdate]] = {
    Namespace.CLIENT: ClientConfigUpdate,
    Namespace.SERVER: ServerConfigUpdate,
}


class UpdateConfigResponse(BaseModel):
    success: Literal[True] = True
    updated: list[str]


class ClearCacheResponse(BaseModel):
    success: Literal[True] = True


class AiTestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: Optional[str] = None
    model: Optional[str] = None
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    test_prompt: str = Field(
        "Hello! Please reply with a short greeting.",
        alias="testPrompt",
        max_length=2000,
    )


class AiTestResponse(BaseModel):
    success: bool
    provider: str
    model: str
    response: str


class FriendCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=20)
    desc: str = Field(..., min_length=1, max_length=100)
    avatar: str = Field(..., min_length=1, max_length=100)
    url: str = Field(..., min_length=1, max_length=100)


class FriendUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=20)
    desc: str = Field(..., min_length=1, max_length=100)
    avatar: Optional[str] = Field(None, max_length=100)
    url: str = Field(..., min_length=1, max_length=100)
    accepted: Optional[int] = Field(None, ge=0, le=1)
    sort_order: Optional[int] = None


class Friend(BaseModel):
    id: int
    name: str
    desc: str
    avatar: str
    url: str
    uid: int
    accepted: int
    sort_order: int
    created_at: float
    updated_at: float


class FriendListResponse(BaseModel):
    friend_list: list[Friend]
    apply_list: Optional[list[Friend]] = None


class FriendResponse(BaseModel):
    friend: Friend


class StatusResponse(BaseModel):
    status: Literal["ok"]


class UploadResponse(BaseModel):
    url: str
