from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from attribute_extraction.extraction.garment import GarmentClass
from attribute_extraction.extraction.models import (
    AttributeMap,
    ExtractionContext,
    ExtractionResult,
    HintUnavailable,
    OcrOutcome,
    ParsedResponse,
    VisionResponse,
)


@dataclass(slots=True)
class PipelineContext:
    request: ExtractionContext
    ocr_outcome: OcrOutcome = field(
        default_factory=lambda: HintUnavailable(reason="OCR pre-pass not run")
    )
    main_response: VisionResponse | None = None
    parsed: ParsedResponse | None = None
    attributes: AttributeMap = field(default_factory=dict)
    garment_class: GarmentClass = GarmentClass.UNKNOWN
    result: ExtractionResult | None = None


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
