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

"""Client for providers exposing the OpenAI chat completions API."""

import logging
import time

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds
MAX_OUTPUT_TOKENS = 1000


class ChatCompletionInvalidResponseException(Exception):
    pass


def call_chat_completion(
    prompt: str,
    model: str,
    api_url: str,
    api_key: str | None = None,
    timeout: float = REQUEST_TIMEOUT,
) -> str:
    """
    Posts a single user message to ``{api_url}/chat/completions``.

    Args:
        prompt (str): The user message.
        model (str): Model name understood by the provider.
        api_url (str): Base URL of the API, e.g. https://api.openai.com/v1.
        api_key (str | None): Bearer token, if the provider needs one.
        timeout (float): Seconds before the request is abandoned.

    Returns:
        str: The assistant reply.

    Raises:
        requests.RequestException: On transport or HTTP errors.
        ChatCompletionInvalidResponseException: If the reply has no text.
    """
    url = api_url.rstrip("/") + "/chat/completions"
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    body = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": MAX_OUTPUT_TOKENS,
        "temperature": 0,
    }

    start_time = time.time()
    response = requests.post(url, json=body, headers=headers, timeout=timeout)
    response.raise_for_status()
    logger.info("Chat completion call to %s took: %.2fs", url, time.time() - start_time)

    try:
        content = response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ChatCompletionInvalidResponseException() from e
    if not content:
        raise ChatCompletionInvalidResponseException()
    return content
