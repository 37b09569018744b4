"""Example vision client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseVisionClient and register the provider in ModelInvokerFactory.
"""

import json
from typing import ClassVar

from attribute_extraction.extraction.client_base import BaseVisionClient
from attribute_extraction.extraction.models import TokenUsage, VisionResponse


class ExampleVisionClientAdapter(BaseVisionClient):
    """Example adapter that returns a fixed, valid extraction JSON.

    No network calls. The same payload carries an ``ocr`` section for the
    pre-pass and ``metadata``/``attributes`` sections for the main pass, so
    one adapter serves both calls. Useful for local development, tests, and
    as a template for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "ocr": {
            "vendor_name": None,
            "design_number": None,
            "size": None,
            "major_category": None,
            "colour": None,
            "fab_line": None,
        },
        "metadata": {},
        "attributes": {},
    }

    def __init__(self, response: dict[str, object] | None = None) -> None:
        self._response = response if response is not None else self.DEFAULT_RESPONSE

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        prompt: str,
        image: str,
    ) -> VisionResponse:
        _ = model, temperature, max_tokens, image
        text = json.dumps(self._response)
        return VisionResponse(
            text=text,
            usage=TokenUsage(prompt_units=len(prompt) // 4, completion_units=len(text) // 4),
        )
