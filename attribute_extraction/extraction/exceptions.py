class ExtractionError(Exception):
    """Raised when attribute extraction fails."""


class ExtractionTransportError(ExtractionError):
    """Raised when the vision model could not be reached or timed out."""


class ExtractionDecodeError(ExtractionError):
    """Raised when a model response cannot be decoded into the expected structure."""
