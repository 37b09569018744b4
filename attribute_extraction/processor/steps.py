from attribute_extraction.extraction.confidence import build_result
from attribute_extraction.extraction.garment import classify_garment
from attribute_extraction.extraction.invoker import ModelInvoker
from attribute_extraction.extraction.models import HintAvailable, HintUnavailable, VisionResponse
from attribute_extraction.extraction.parser import parse_main_response, parse_ocr_response
from attribute_extraction.extraction.prompt_builder import build_main_prompt, build_ocr_prompt
from attribute_extraction.extraction.reconciler import reconcile_metadata
from attribute_extraction.extraction.rules import apply_garment_rules
from attribute_extraction.extraction.validator import validate_attributes
from attribute_extraction.logging.logger import Log
from attribute_extraction.processor.pipeline import PipelineContext, PipelineStep


class OcrPrePassStep(PipelineStep):
    """Best-effort tag transcription. Never fails the pipeline."""

    def __init__(self, invoker: ModelInvoker, timeout_seconds: float, enabled: bool = True) -> None:
        self._invoker = invoker
        self._timeout_seconds = timeout_seconds
        self._enabled = enabled

    def run(self, context: PipelineContext) -> PipelineContext:
        if not self._enabled:
            context.ocr_outcome = HintUnavailable(reason="OCR pre-pass disabled")
            return context

        request = context.request
        response: VisionResponse | None = None
        try:
            prompt = build_ocr_prompt(request.schema, request)
            response = self._invoker.invoke(request.image, prompt, self._timeout_seconds)
            hint = parse_ocr_response(response.text)
        except Exception as exc:
            Log.warning(f"OCR pre-pass failed, continuing without hints: {exc}")
            context.ocr_outcome = HintUnavailable(
                reason=str(exc),
                usage=response.usage if response is not None else None,
            )
            return context

        context.ocr_outcome = HintAvailable(hint=hint, usage=response.usage)
        Log.info(f"OCR pre-pass read {len(hint.values)} tag fields")
        return context


class MainPassStep(PipelineStep):
    def __init__(self, invoker: ModelInvoker, timeout_seconds: float) -> None:
        self._invoker = invoker
        self._timeout_seconds = timeout_seconds

    def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        outcome = context.ocr_outcome
        hint = outcome.hint if isinstance(outcome, HintAvailable) else None
        prompt = build_main_prompt(request.schema, request, ocr_hint=hint)
        context.main_response = self._invoker.invoke(request.image, prompt, self._timeout_seconds)
        Log.info(
            f"Main pass returned {len(context.main_response.text)} chars "
            f"({context.main_response.usage.total_units} tokens)"
        )
        return context


class ParseResponseStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if context.main_response is None:
            raise ValueError("PipelineContext.main_response must be set before parsing")
        context.parsed = parse_main_response(context.main_response.text)
        return context


class ValidateAttributesStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if context.parsed is None:
            raise ValueError("PipelineContext.parsed must be set before validation")
        context.attributes = validate_attributes(context.request.vocabulary, context.parsed)
        return context


class ReconcileMetadataStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if context.parsed is None:
            raise ValueError("PipelineContext.parsed must be set before reconciliation")
        context.attributes = reconcile_metadata(
            context.attributes,
            context.request.vocabulary,
            context.parsed.metadata,
            context.ocr_outcome,
        )
        return context


class GarmentRulesStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        context.garment_class = classify_garment(request.category_label)
        context.attributes = apply_garment_rules(
            context.attributes,
            request.vocabulary,
            context.garment_class,
            category_label=request.category_label,
            metadata=context.parsed.metadata if context.parsed is not None else {},
        )
        return context


class ConfidenceFilterStep(PipelineStep):
    def __init__(self, default_threshold: int) -> None:
        self._default_threshold = default_threshold

    def run(self, context: PipelineContext) -> PipelineContext:
        context.result = build_result(
            context.attributes,
            context.request.vocabulary,
            self._default_threshold,
        )
        Log.info(
            f"Extraction complete: {context.result.extracted_count}/{len(context.request.vocabulary)} "
            f"attributes, overall confidence {context.result.overall_confidence}"
        )
        return context
