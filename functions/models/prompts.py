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

DESTINATION_EXTRACTION_PROMPT = """You are an expert parser. Extract *all destinations* from the following HTML.
The HTML is one panel of the section "{section_title}" on a list of partner universities.
Return ONLY valid JSON.

### Rules:
- Each destination must have:
  - "country": string
  - "title": string
  - "link": string (absolute or relative)
- For each <li>, <a>, or text combo, reconstruct the most human-readable title.
- Do NOT include colons at the end.
- If no link exists, return an empty string.
- If an item does not name its own country, use "{panel_country}".
- Cleanup weird punctuation: merge duplicated colons, semicolons, etc.
- If the HTML contains no destinations, return [].

### Input HTML:
{panel_html}

### Output JSON format:
[
  {{
    "country": "...",
    "title": "...",
    "link": "..."
  }}
]
"""
