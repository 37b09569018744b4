from attribute_extraction.extraction.client_base import BaseVisionClient
from attribute_extraction.extraction.factory import ModelInvokerFactory
from attribute_extraction.extraction.invoker import ModelInvoker

__all__ = ["BaseVisionClient", "ModelInvoker", "ModelInvokerFactory"]
