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

import time
import logging
from google import genai
from google.genai import types
from models import api_config

logger = logging.getLogger(__name__)

API_KEY_LOGGING_MESSAGE = "Ran with user-specified API key"
QUERY_RESPONSE_MAX_OUTPUT_TOKENS = 8000


class GeminiInvalidResponseException(Exception):
    pass


def call_predict(
    query: str,
    model: str | None = None,
    api_key: str | None = None,
) -> str:
    """
    Sends a single prompt to Gemini with deterministic sampling.

    Args:
        query (str): The full prompt text.
        model (str | None): Model name, defaults to api_config.DEFAULT_MODEL.
        api_key (str | None): Overrides api_config.DEFAULT_API_KEY when given.

    Returns:
        str: The raw text of the model response.

    Raises:
        GeminiInvalidResponseException: If the response carries no text.
    """
    if not api_key:
        api_key = api_config.DEFAULT_API_KEY
    else:
        logger.info(API_KEY_LOGGING_MESSAGE)

    client = genai.Client(api_key=api_key)
    start_time = time.time()
    truncated_query = (query[:200] + "...") if len(query) > 200 else query
    logger.debug("Calling Gemini, prompt: '%s'", truncated_query)

    response = client.models.generate_content(
        model=model or api_config.DEFAULT_MODEL,
        contents=query,
        config=types.GenerateContentConfig(
            temperature=0, max_output_tokens=QUERY_RESPONSE_MAX_OUTPUT_TOKENS
        ),
    )
    logger.debug("Gemini call took: %.2fs", time.time() - start_time)
    if not response.text:
        raise GeminiInvalidResponseException()
    return response.text
