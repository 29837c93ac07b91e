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


class DestinationError(Exception):
    """Base class for destination pipeline failures."""


class SourceUrlNotConfiguredError(DestinationError):
    """No source page has been configured for the requested (field, lang)."""

    def __init__(self, field: str, lang: str):
        super().__init__(f"No destination URL configured for {field}/{lang}")
        self.field = field
        self.lang = lang


class DestinationFetchError(DestinationError):
    """The source page could not be downloaded."""


class DestinationExtractionError(DestinationError):
    """A panel could not be turned into well-formed destination records."""
