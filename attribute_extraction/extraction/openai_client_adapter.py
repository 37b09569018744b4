import math
import re

import httpx
import openai

from attribute_extraction.extraction.client_base import BaseVisionClient
from attribute_extraction.extraction.exceptions import ExtractionError, ExtractionTransportError
from attribute_extraction.extraction.models import TokenUsage, VisionResponse

_DATA_URL = re.compile(r"^data:(image/[a-zA-Z0-9.+-]+);base64,(.+)$", re.DOTALL)

# Flat per-image prompt cost used when the provider reports no usage.
IMAGE_TOKEN_ESTIMATE = 258


def estimate_usage(prompt: str, text: str) -> TokenUsage:
    return TokenUsage(
        prompt_units=IMAGE_TOKEN_ESTIMATE + math.ceil(len(prompt) / 4),
        completion_units=math.ceil(len(text) / 4),
    )


class OpenAIVisionClientAdapter(BaseVisionClient):
    """Vision client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        prompt: str,
        image: str,
    ) -> VisionResponse:
        if not _DATA_URL.match(image.strip()):
            raise ExtractionError("Invalid image data format")
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": image.strip()}},
                        ],
                    },
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionTransportError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ExtractionTransportError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise ExtractionError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ExtractionError("AI returned empty response")

        usage = response.usage
        if usage is None:
            return VisionResponse(text=content, usage=estimate_usage(prompt, content))
        return VisionResponse(
            text=content,
            usage=TokenUsage(
                prompt_units=usage.prompt_tokens or 0,
                completion_units=usage.completion_tokens or 0,
            ),
        )
