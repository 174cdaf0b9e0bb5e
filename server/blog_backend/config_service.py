"""
Config operations exposed over HTTP.

Every operation validates the namespace and checks the caller before it
touches a store, so rejected requests have no side effects.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from blog_backend.cache import Cache
from blog_backend.config_store import ConfigStore
from blog_backend.errors import InvalidArgument, ProviderError
from blog_backend.masking import is_mask, mask_config, should_mask
from blog_backend.policy import require_admin, require_config_read, require_config_write
from blog_backend.schemas import (
    AI_PROVIDERS,
    CONFIG_SCHEMAS,
    AiTestRequest,
    AiTestResponse,
)
from blog_backend.types import Identity, Namespace, parse_namespace
from llm.provider import (
    DEFAULT_MODELS,
    AiProvider,
    CompletionRequest,
    ProviderCallError,
)

logger = logging.getLogger(__name__)


def describe_validation_error(exc: ValidationError) -> str:
    # Locations and messages only; input values may be secrets.
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(parts)


class ConfigService:
    def __init__(
        self,
        server_config: ConfigStore,
        client_config: ConfigStore,
        cache: Cache,
        ai_provider: AiProvider,
    ):
        self.server_config = server_config
        self.client_config = client_config
        self.cache = cache
        self.ai_provider = ai_provider

    def _store(self, namespace: Namespace) -> ConfigStore:
        if namespace is Namespace.SERVER:
            return self.server_config
        return self.client_config

    def get_config(self, config_type: str, identity: Optional[Identity]) -> dict:
        namespace = parse_namespace(config_type)
        require_config_read(namespace, identity)
        values = self._store(namespace).all()
        if namespace is Namespace.SERVER:
            return mask_config(namespace, values)
        return values

    def update_config(
        self,
        config_type: str,
        identity: Optional[Identity],
        values: Any,
    ) -> list[str]:
        """
        Applies a partial update and persists it as one batch.

        Well-known keys are validated and coerced, unknown keys pass through.
        A sensitive key posted back with the mask token keeps its stored
        value. If persisting fails nothing of the batch is kept.

        Returns:
            list[str]: The keys that were written.
        """
        namespace = parse_namespace(config_type)
        require_config_write(namespace, identity)
        if not isinstance(values, dict):
            raise InvalidArgument("Config payload must be an object")
        try:
            changes = CONFIG_SCHEMAS[namespace].model_validate(values).changes()
        except ValidationError as exc:
            raise InvalidArgument(describe_validation_error(exc)) from None

        changes = {
            key: value
            for key, value in changes.items()
            if not (should_mask(namespace, key) and is_mask(value))
        }
        if not changes:
            return []

        store = self._store(namespace)
        try:
            for key, value in changes.items():
                store.set(key, value, auto_save=False)
            store.save()
        except Exception:
            store.discard()
            raise
        logger.info(
            "User %s updated %s config: %s",
            identity.user_id,
            namespace.value,
            ", ".join(sorted(changes)),
        )
        return sorted(changes)

    def clear_cache(self, identity: Optional[Identity]) -> None:
        require_config_write(Namespace.SERVER, identity)
        self.cache.clear()
        logger.info("User %s cleared the cache", identity.user_id)

    def test_ai(
        self, identity: Optional[Identity], request: AiTestRequest
    ) -> AiTestResponse:
        """
        Sends a test prompt to an AI provider without saving anything.

        Fields left empty fall back to the stored ``ai_summary.*`` settings
        when the provider matches the stored one. A masked key means "use
        the stored key".
        """
        require_admin(identity)
        stored_provider = self.server_config.get_or_default(
            "ai_summary.provider", "openai"
        )
        provider = request.provider or stored_provider
        if provider not in AI_PROVIDERS:
            raise InvalidArgument(f"Unknown AI provider: {provider}")
        use_stored = provider == stored_provider

        api_key = request.api_key
        if not api_key or is_mask(api_key):
            api_key = (
                self.server_config.get("ai_summary.api_key") if use_stored else None
            )
        api_url = request.api_url or (
            self.server_config.get("ai_summary.api_url") if use_stored else None
        )
        model = (
            request.model
            or (self.server_config.get("ai_summary.model") if use_stored else None)
            or DEFAULT_MODELS.get(provider)
        )
        if not model:
            raise InvalidArgument("model is required")

        completion = CompletionRequest(
            provider=provider,
            model=model,
            prompt=request.test_prompt,
            api_key=api_key,
            api_url=api_url,
        )
        try:
            reply = self.ai_provider.generate(completion)
        except ProviderCallError as exc:
            logger.warning("AI test against %s/%s failed: %s", provider, model, exc)
            raise ProviderError(f"AI test failed: {exc}") from exc
        return AiTestResponse(
            success=True, provider=provider, model=model, response=reply
        )
