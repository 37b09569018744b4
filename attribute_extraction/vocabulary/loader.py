"""Builds a VocabularyStore from taxonomy admin records."""

from collections.abc import Iterable, Mapping
from typing import Any

from attribute_extraction.logging.logger import Log
from attribute_extraction.vocabulary.exceptions import VocabularyError
from attribute_extraction.vocabulary.models import AllowedValue, AttributeDefinition, ValueType
from attribute_extraction.vocabulary.store import VocabularyStore
from attribute_extraction.vocabulary.thresholds import ATTRIBUTE_THRESHOLDS

_CONTROLLED_TYPES = frozenset({"controlled", "select", "enum"})
_FREE_TEXT_TYPES = frozenset({"free_text", "free-text", "text", "number", "boolean"})
# "text" is the admin default for every attribute, so only these override allowed values.
_EXPLICIT_FREE_TEXT_TYPES = frozenset({"free_text", "free-text"})


def load_vocabulary(
    records: Iterable[Mapping[str, Any]],
    thresholds: Mapping[str, int] | None = None,
) -> VocabularyStore:
    """Build the ordered attribute schema from admin taxonomy records.

    Each record carries ``key``, ``label``, an optional ``type``/``valueType``,
    ``allowedValues`` (plain strings or ``{shortForm, fullForm}`` objects) and
    an optional ``confidenceThreshold``. An unset threshold falls back to
    ``thresholds`` (the bundled per-attribute table by default), then to the
    pipeline-wide default applied later by the confidence filter.

    Raises:
        VocabularyError: on any malformed record.
    """
    table = ATTRIBUTE_THRESHOLDS if thresholds is None else thresholds
    definitions = [_build_definition(raw, i, table) for i, raw in enumerate(records)]
    return VocabularyStore(definitions)


def _build_definition(
    raw: Any, index: int, thresholds: Mapping[str, int]
) -> AttributeDefinition:
    if not isinstance(raw, Mapping):
        raise VocabularyError(f"Attribute record at index {index} must be an object")
    key = raw.get("key")
    if not key or not isinstance(key, str):
        raise VocabularyError(f"Attribute record at index {index}: 'key' must be a non-empty string")
    label = raw.get("label") or key
    if not isinstance(label, str):
        raise VocabularyError(f"Attribute '{key}': 'label' must be a string")
    allowed_values = _build_allowed_values(raw.get("allowedValues"), key)
    value_type = _build_value_type(raw.get("valueType", raw.get("type")), key, allowed_values)
    threshold = _build_threshold(raw.get("confidenceThreshold"), key)
    if threshold is None:
        threshold = thresholds.get(key)
    return AttributeDefinition(
        key=key,
        label=label,
        value_type=value_type,
        allowed_values=allowed_values,
        confidence_threshold=threshold,
    )


def _build_allowed_values(raw: Any, key: str) -> tuple[AllowedValue, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise VocabularyError(f"Attribute '{key}': 'allowedValues' must be a list")
    seen: set[str] = set()
    values: list[AllowedValue] = []
    for item in raw:
        allowed = _build_allowed_value(item, key)
        if allowed is None:
            continue
        if allowed.short_form in seen:
            Log.warning(
                "Duplicate allowed value dropped", attribute=key, short_form=allowed.short_form
            )
            continue
        seen.add(allowed.short_form)
        values.append(allowed)
    return tuple(values)


def _build_allowed_value(raw: Any, key: str) -> AllowedValue | None:
    if isinstance(raw, str):
        value = raw.strip()
        return AllowedValue(short_form=value, full_form=value) if value else None
    if not isinstance(raw, Mapping):
        raise VocabularyError(
            f"Attribute '{key}': allowed values must be strings or shortForm/fullForm objects"
        )
    short_form = raw.get("shortForm") or ""
    full_form = raw.get("fullForm") or ""
    if not isinstance(short_form, str) or not isinstance(full_form, str):
        raise VocabularyError(f"Attribute '{key}': shortForm/fullForm must be strings")
    short_form, full_form = short_form.strip(), full_form.strip()
    if not short_form and not full_form:
        return None
    return AllowedValue(short_form=short_form or full_form, full_form=full_form or short_form)


def _build_value_type(
    raw: Any, key: str, allowed_values: tuple[AllowedValue, ...]
) -> ValueType:
    if raw is not None and not isinstance(raw, str):
        raise VocabularyError(f"Attribute '{key}': 'type' must be a string")
    declared = (raw or "").strip().lower()
    if declared and declared not in _CONTROLLED_TYPES | _FREE_TEXT_TYPES:
        raise VocabularyError(f"Attribute '{key}': unknown value type {raw!r}")
    if not allowed_values:
        if declared in _CONTROLLED_TYPES:
            Log.warning(
                "Controlled attribute has no allowed values; treating as free text", attribute=key
            )
        return ValueType.FREE_TEXT
    if declared in _EXPLICIT_FREE_TEXT_TYPES:
        return ValueType.FREE_TEXT
    return ValueType.CONTROLLED


def _build_threshold(raw: Any, key: str) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise VocabularyError(f"Attribute '{key}': 'confidenceThreshold' must be a number")
    threshold = int(raw)
    if not 0 <= threshold <= 100:
        raise VocabularyError(
            f"Attribute '{key}': 'confidenceThreshold' must be between 0 and 100, got {threshold}"
        )
    return threshold
