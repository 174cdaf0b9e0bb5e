# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""Dispatch of a completion request to the configured AI provider."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
import requests
from google.genai import errors as genai_errors

from llm import gemini, openai_compat

logger = logging.getLogger(__name__)

DEFAULT_API_URLS = {
    "openai": "https://api.openai.com/v1",
    "deepseek": "https://api.deepseek.com/v1",
    "claude": "https://api.anthropic.com/v1",
}

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "deepseek": "deepseek-chat",
    "claude": "claude-haiku-4-5",
    "gemini": gemini.DEFAULT_MODEL,
}


class ProviderCallError(Exception):
    """The provider could not produce a reply. Never carries credentials."""


@dataclass
class CompletionRequest:
    provider: str
    model: str
    prompt: str
    api_key: Optional[str] = None
    api_url: Optional[str] = None

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks.
        return (
            f"CompletionRequest(provider={self.provider!r}, model={self.model!r}, "
            f"api_url={self.api_url!r})"
        )


class AiProvider(Protocol):
    def generate(self, request: CompletionRequest) -> str:
        ...


@dataclass
class DefaultAiProvider:
    """Routes Gemini to google-genai and everything else to chat completions."""

    timeout: float = openai_compat.REQUEST_TIMEOUT
    gemini_api_key: Optional[str] = None

    def generate(self, request: CompletionRequest) -> str:
        try:
            if request.provider == "gemini":
                return gemini.call_predict(
                    request.prompt,
                    model=request.model,
                    api_key=request.api_key or self.gemini_api_key,
                    timeout=self.timeout,
                )
            api_url = request.api_url or DEFAULT_API_URLS.get(request.provider)
            if not api_url:
                raise ProviderCallError(
                    f"No API URL configured for provider {request.provider}"
                )
            return openai_compat.call_chat_completion(
                request.prompt,
                model=request.model,
                api_url=api_url,
                api_key=request.api_key,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise ProviderCallError(f"{request.provider} timed out") from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise ProviderCallError(
                f"{request.provider} returned HTTP {status}"
            ) from e
        except genai_errors.APIError as e:
            raise ProviderCallError(
                f"{request.provider} returned HTTP {e.code}"
            ) from e
        # google-genai talks to its API over httpx.
        except httpx.TimeoutException as e:
            raise ProviderCallError(f"{request.provider} timed out") from e
        except httpx.HTTPError as e:
            raise ProviderCallError(
                f"Could not reach {request.provider}: {type(e).__name__}"
            ) from e
        except requests.RequestException as e:
            raise ProviderCallError(
                f"Could not reach {request.provider}: {type(e).__name__}"
            ) from e
        except (
            gemini.GeminiInvalidResponseException,
            openai_compat.ChatCompletionInvalidResponseException,
        ) as e:
            raise ProviderCallError(f"{request.provider} returned an empty reply") from e
        except ValueError as e:
            raise ProviderCallError(str(e)) from e
