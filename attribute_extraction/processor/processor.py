from attribute_extraction.config.settings import Settings
from attribute_extraction.extraction.exceptions import ExtractionError
from attribute_extraction.extraction.factory import ModelInvokerFactory
from attribute_extraction.extraction.invoker import ModelInvoker
from attribute_extraction.extraction.models import (
    ExtractionContext,
    ExtractionOutcome,
    HintAvailable,
)
from attribute_extraction.logging.logger import Log
from attribute_extraction.processor.pipeline import PipelineContext, PipelineStep
from attribute_extraction.processor.steps import (
    ConfidenceFilterStep,
    GarmentRulesStep,
    MainPassStep,
    OcrPrePassStep,
    ParseResponseStep,
    ReconcileMetadataStep,
    ValidateAttributesStep,
)


class ExtractionProcessor:
    """Orchestrates one attribute extraction.

    Pipeline: OCR pre-pass -> main pass -> parse -> validate -> reconcile ->
    garment rules -> confidence filter.

    The processor holds no per-request state; every call to ``process`` gets
    its own PipelineContext.
    """

    def __init__(
        self,
        invoker: ModelInvoker,
        *,
        ocr_enabled: bool = True,
        ocr_timeout_seconds: float = 60,
        main_timeout_seconds: float = 60,
        default_threshold: int = 65,
    ) -> None:
        self._steps: list[PipelineStep] = [
            OcrPrePassStep(invoker, ocr_timeout_seconds, enabled=ocr_enabled),
            MainPassStep(invoker, main_timeout_seconds),
            ParseResponseStep(),
            ValidateAttributesStep(),
            ReconcileMetadataStep(),
            GarmentRulesStep(),
            ConfidenceFilterStep(default_threshold),
        ]

    def process(self, request: ExtractionContext) -> ExtractionOutcome:
        """Run the full extraction pipeline for one image.

        Raises:
            ExtractionError: when the main pass fails (transport, decode or
                empty response). Unexpected errors from a client or step are
                wrapped in it. OCR pre-pass failures never propagate.
        """
        Log.info(
            f"Extracting {len(request.vocabulary)} attributes "
            f"for category '{request.category_label}'"
        )
        context = PipelineContext(request=request)
        try:
            for step in self._steps:
                context = step.run(context)
        except ExtractionError as exc:
            Log.error(f"Extraction failed: {exc}")
            raise
        except Exception as exc:
            Log.error(f"Extraction failed with unexpected error: {exc}")
            raise ExtractionError(f"Extraction failed: {exc}") from exc

        if context.result is None or context.main_response is None:
            raise ExtractionError("Pipeline finished without a result")
        outcome = context.ocr_outcome
        return ExtractionOutcome(
            result=context.result,
            garment_class=context.garment_class,
            main_usage=context.main_response.usage,
            ocr_usage=outcome.usage,
            ocr_hint_available=isinstance(outcome, HintAvailable),
        )


def build_processor(
    settings: Settings,
    invoker: ModelInvoker | None = None,
) -> ExtractionProcessor:
    """Build an ExtractionProcessor from application settings."""
    Log.configure(settings.log_level)
    return ExtractionProcessor(
        invoker if invoker is not None else ModelInvokerFactory.create(settings),
        ocr_enabled=settings.extraction_ocr_enabled,
        ocr_timeout_seconds=settings.extraction_ocr_timeout_seconds,
        main_timeout_seconds=settings.extraction_main_timeout_seconds,
        default_threshold=settings.default_confidence_threshold,
    )
