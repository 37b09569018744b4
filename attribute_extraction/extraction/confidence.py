"""Last pipeline stage: threshold filtering and the final result."""

from attribute_extraction.extraction.models import (
    AttributeMap,
    AttributeValue,
    ExtractionResult,
    is_absent,
)
from attribute_extraction.logging.logger import Log
from attribute_extraction.vocabulary.store import VocabularyStore


def filter_by_confidence(
    attributes: AttributeMap,
    vocabulary: VocabularyStore,
    default_threshold: int,
) -> dict[str, AttributeValue | None]:
    """Null every value below its attribute's threshold.

    A value exactly at the threshold is kept. Rejected records are nulled as
    well, and keys outside the schema are dropped.
    """
    filtered: dict[str, AttributeValue | None] = {}
    dropped = 0
    for key in vocabulary.keys():
        value = attributes.get(key)
        if is_absent(value):
            filtered[key] = None
            continue
        threshold = vocabulary.threshold_for(key, default_threshold)
        if value.confidence < threshold:
            Log.debug(
                "Dropped low-confidence value",
                attribute=key,
                confidence=value.confidence,
                threshold=threshold,
            )
            filtered[key] = None
            dropped += 1
        else:
            filtered[key] = value
    kept = sum(1 for v in filtered.values() if v is not None)
    Log.info("Filtered by confidence", dropped=dropped, kept=kept)
    return filtered


def overall_confidence(values: dict[str, AttributeValue | None]) -> int:
    """Rounded mean confidence of the non-null values, 0 when there are none."""
    confidences = [v.confidence for v in values.values() if v is not None]
    if not confidences:
        return 0
    return round(sum(confidences) / len(confidences))


def build_result(
    attributes: AttributeMap,
    vocabulary: VocabularyStore,
    default_threshold: int,
) -> ExtractionResult:
    filtered = filter_by_confidence(attributes, vocabulary, default_threshold)
    return ExtractionResult(values=filtered, overall_confidence=overall_confidence(filtered))
