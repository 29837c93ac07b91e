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

import requests

from destinations.errors import DestinationFetchError

USER_AGENT = "destinations-directory/0.1 (+partner page sync)"


def fetch_html(url: str, timeout: float | None = None) -> str:
    """
    Fetches a partner page.

    Args:
        url (str): The configured source page.
        timeout (float | None): Seconds before giving up; None waits indefinitely.

    Returns:
        str: The decoded response body.

    Raises:
        DestinationFetchError: On network errors or a non-2xx status.
    """
    try:
        response = requests.get(
            url, headers={"User-Agent": USER_AGENT}, timeout=timeout
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise DestinationFetchError(f"Failed to fetch {url}: {e}") from e

    return response.text
