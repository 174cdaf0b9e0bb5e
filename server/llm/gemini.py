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

import logging
import time

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
QUERY_RESPONSE_MAX_OUTPUT_TOKENS = 1000


class GeminiInvalidResponseException(Exception):
    pass


def call_predict(
    query: str,
    model: str = DEFAULT_MODEL,
    api_key: str | None = None,
    timeout: float | None = None,
) -> str:
    """Sends a single prompt to Gemini and returns the text reply."""
    if not api_key:
        raise ValueError("A Gemini API key is required")

    http_options = None
    if timeout:
        # google-genai expects milliseconds.
        http_options = types.HttpOptions(timeout=int(timeout * 1000))
    client = genai.Client(api_key=api_key, http_options=http_options)

    start_time = time.time()
    truncated_query = (query[:200] + "...") if len(query) > 200 else query
    logger.info("Calling Gemini model %s, prompt: '%s'", model, truncated_query)
    response = client.models.generate_content(
        model=model,
        contents=query,
        config=types.GenerateContentConfig(
            temperature=0, max_output_tokens=QUERY_RESPONSE_MAX_OUTPUT_TOKENS
        ),
    )
    logger.info("Gemini call took: %.2fs", time.time() - start_time)
    if not response.text:
        raise GeminiInvalidResponseException()
    return response.text
