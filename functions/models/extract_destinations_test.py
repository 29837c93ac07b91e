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
import unittest
from unittest.mock import MagicMock, patch

from destinations.errors import DestinationExtractionError
from models import extract_destinations, gemini
from shared.types import ExtractedDestination

SORBONNE_JSON = '[{"country": "France", "title": "Sorbonne", "link": "http://example.edu"}]'
SORBONNE = ExtractedDestination(country="France", title="Sorbonne", link="http://example.edu")


class ParseExtractionResponseTest(unittest.TestCase):

    def test_plain_json(self):
        self.assertEqual(
            extract_destinations.parse_extraction_response(SORBONNE_JSON), [SORBONNE]
        )

    def test_code_fences_are_stripped(self):
        for text in (
            f"```json\n{SORBONNE_JSON}\n```",
            f"```\n{SORBONNE_JSON}\n```",
            f"  ```JSON {SORBONNE_JSON}```  ",
        ):
            with self.subTest(text=text):
                self.assertEqual(
                    extract_destinations.parse_extraction_response(text), [SORBONNE]
                )

    def test_empty_array(self):
        self.assertEqual(extract_destinations.parse_extraction_response("[]"), [])

    def test_invalid_json_raises(self):
        with self.assertRaises(DestinationExtractionError):
            extract_destinations.parse_extraction_response("Sorbonne, France")

    def test_wrong_shape_raises(self):
        for text in (
            '{"country": "France", "title": "Sorbonne", "link": ""}',
            '[{"country": "France", "title": "Sorbonne"}]',
            '[{"country": "France", "title": 7, "link": ""}]',
            '["Sorbonne"]',
        ):
            with self.subTest(text=text):
                with self.assertRaises(DestinationExtractionError):
                    extract_destinations.parse_extraction_response(text)


class ExtractDestinationsTest(unittest.TestCase):

    @patch("models.extract_destinations.gemini.call_predict")
    def test_prompt_carries_panel_context(self, mock_call_predict):
        mock_call_predict.return_value = f"```json\n{SORBONNE_JSON}\n```"

        result = extract_destinations.extract_destinations(
            "Europe", '<a href="http://example.edu">Sorbonne</a>', "FRANCE", model="m"
        )

        self.assertEqual(result, [SORBONNE])
        prompt = mock_call_predict.call_args.args[0]
        self.assertIn("Europe", prompt)
        self.assertIn("FRANCE", prompt)
        self.assertIn('<a href="http://example.edu">Sorbonne</a>', prompt)
        self.assertEqual(mock_call_predict.call_args.kwargs["model"], "m")

    @patch("models.extract_destinations.gemini.call_predict")
    def test_model_failure_is_wrapped(self, mock_call_predict):
        mock_call_predict.side_effect = gemini.GeminiInvalidResponseException()

        with self.assertRaises(DestinationExtractionError):
            extract_destinations.extract_destinations("Europe", "<p></p>", "FRANCE")

    @patch("models.extract_destinations.gemini.call_predict")
    def test_ai_panel_extractor(self, mock_call_predict):
        mock_call_predict.return_value = SORBONNE_JSON
        extractor = extract_destinations.AiPanelExtractor(model="m", api_key="k")

        self.assertEqual(extractor.extract("Europe", "<p></p>", "FRANCE"), [SORBONNE])
        self.assertEqual(mock_call_predict.call_args.kwargs["api_key"], "k")


class CallPredictTest(unittest.TestCase):

    @patch("models.gemini.genai.Client")
    def test_uses_zero_temperature(self, mock_client_cls):
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text=SORBONNE_JSON)
        mock_client_cls.return_value = client

        self.assertEqual(gemini.call_predict("prompt", model="m", api_key="k"), SORBONNE_JSON)

        mock_client_cls.assert_called_once_with(api_key="k")
        kwargs = client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "m")
        self.assertEqual(kwargs["contents"], "prompt")
        self.assertEqual(kwargs["config"].temperature, 0)

    @patch("models.gemini.genai.Client")
    def test_empty_response_raises(self, mock_client_cls):
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text="")
        mock_client_cls.return_value = client

        with self.assertRaises(gemini.GeminiInvalidResponseException):
            gemini.call_predict("prompt", api_key="k")


if __name__ == "__main__":
    unittest.main()
