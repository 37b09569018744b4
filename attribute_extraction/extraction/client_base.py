from abc import ABC, abstractmethod

from attribute_extraction.extraction.models import VisionResponse


class BaseVisionClient(ABC):
    """Contract for provider-specific vision model clients."""

    @abstractmethod
    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        prompt: str,
        image: str,
    ) -> VisionResponse:
        """Send one image and prompt, return the response text and token usage.

        Raises:
            ExtractionTransportError: if the provider cannot be reached.
            ExtractionError: if the provider returns no usable content.
        """
