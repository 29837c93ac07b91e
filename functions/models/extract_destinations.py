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

"""Extracts destination triples from raw panel HTML with Gemini."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, List

from destinations.errors import DestinationExtractionError
from models import gemini
from models import prompts
from shared.types import ExtractedDestination

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("country", "title", "link")

_CODE_FENCE_START = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_CODE_FENCE_END = re.compile(r"\s*```\s*$")


def strip_code_fences(text: str) -> str:
    """Removes a surrounding ``` or ```json fence, if present."""
    text = _CODE_FENCE_START.sub("", text, count=1)
    return _CODE_FENCE_END.sub("", text, count=1).strip()


def _is_valid_item(item: Any) -> bool:
    return isinstance(item, dict) and all(
        isinstance(item.get(key), str) for key in REQUIRED_KEYS
    )


def parse_extraction_response(text: str) -> List[ExtractedDestination]:
    """
    Decodes and validates the model output.

    Args:
        text (str): Raw model output, possibly wrapped in a code fence.

    Returns:
        List[ExtractedDestination]: One entry per extracted destination.

    Raises:
        DestinationExtractionError: If the text is not a JSON array of objects
            with string "country", "title" and "link" values.
    """
    try:
        payload = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise DestinationExtractionError(f"Model returned invalid JSON: {e}") from e

    if not isinstance(payload, list):
        raise DestinationExtractionError("Invalid response format: expected a JSON array")

    for index, item in enumerate(payload):
        if not _is_valid_item(item):
            raise DestinationExtractionError(
                f"Invalid response format: item {index} is not a destination object"
            )

    return [
        ExtractedDestination(
            country=item["country"], title=item["title"], link=item["link"]
        )
        for item in payload
    ]


def extract_destinations(
    section_title: str,
    panel_html: str,
    panel_country: str,
    model: str | None = None,
    api_key: str | None = None,
) -> List[ExtractedDestination]:
    """
    Asks the model for the destinations listed in one accordion panel.

    Any model or parsing failure is raised as DestinationExtractionError.
    """
    prompt = prompts.DESTINATION_EXTRACTION_PROMPT.format(
        section_title=section_title,
        panel_country=panel_country,
        panel_html=panel_html,
    )
    try:
        response_text = gemini.call_predict(prompt, model=model, api_key=api_key)
    except Exception as e:
        raise DestinationExtractionError(
            f"Extraction call failed for panel '{panel_country}' in '{section_title}': {e}"
        ) from e

    items = parse_extraction_response(response_text)
    logger.debug(
        "Extracted %d destinations for panel '%s' in '%s'",
        len(items),
        panel_country,
        section_title,
    )
    return items


@dataclass
class AiPanelExtractor:
    """PanelExtractor backed by Gemini."""

    model: str | None = None
    api_key: str | None = None

    def extract(
        self, section_title: str, panel_html: str, panel_country: str
    ) -> List[ExtractedDestination]:
        return extract_destinations(
            section_title,
            panel_html,
            panel_country,
            model=self.model,
            api_key=self.api_key,
        )
