"""Bounded-time vision model invocation."""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

from attribute_extraction.extraction.client_base import BaseVisionClient
from attribute_extraction.extraction.exceptions import ExtractionTransportError
from attribute_extraction.extraction.models import VisionResponse
from attribute_extraction.logging.logger import Log


class ModelInvoker:
    """Calls a vision client and races the call against a timeout.

    Every call runs on its own worker thread, so a call that is still hanging
    never delays another request. A call that does not finish in time is
    reported as a transport failure; its thread is left to finish on its own
    and the result is discarded.
    """

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        model: str,
        temperature: float = 0.0,
        max_tokens: int = 12000,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._max_tokens = max_tokens

    @property
    def model(self) -> str:
        return self._model

    def invoke(self, image: str, prompt: str, timeout_seconds: float) -> VisionResponse:
        """Return the model's response for ``image`` and ``prompt``.

        Raises:
            ExtractionTransportError: on timeout or when the provider is unreachable.
            ExtractionError: when the provider returns no usable content.
        """
        Log.debug(f"Vision prompt:\n{prompt}")
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="vision-call")
        future = executor.submit(
            self._client.create_vision_completion,
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            prompt=prompt,
            image=image,
        )
        try:
            response = future.result(timeout=timeout_seconds)
        except FutureTimeoutError as exc:
            raise ExtractionTransportError(
                f"Vision model call timed out after {timeout_seconds:g}s"
            ) from exc
        finally:
            executor.shutdown(wait=False)

        Log.debug(f"Vision raw response:\n{response.text}")
        return response
