"""Builds the OCR pre-pass prompt and the main visual-analysis prompt."""

import json
from collections.abc import Sequence
from functools import lru_cache

from attribute_extraction.extraction.garment import GarmentClass, classify_garment
from attribute_extraction.extraction.models import OCR_HINT_KEYS, ExtractionContext, OcrHint
from attribute_extraction.extraction.prompt_loader import (
    MAIN_PROMPT,
    OCR_PROMPT,
    load_prompt_template,
)
from attribute_extraction.vocabulary.models import AttributeDefinition

_FAB_LINE_FIELD = "fab_line"
_FAB_LINE_DESCRIPTION = "Fabric line starting with FAB or FABRIC, copied verbatim"


@lru_cache(maxsize=None)
def _default_template(name: str) -> str:
    return load_prompt_template(name)


def build_ocr_prompt(
    schema: Sequence[AttributeDefinition],
    context: ExtractionContext,
    template: str | None = None,
) -> str:
    """Prompt that only transcribes the tag fields present in ``schema``.

    Yarn and fabric fields are requested as one verbatim fabric line, which
    the parser splits afterwards.
    """
    labels = {d.key: d.label for d in schema if d.key in OCR_HINT_KEYS}
    fields: dict[str, str] = {
        key: label
        for key, label in labels.items()
        if key not in ("yarn_01", "yarn_02", "fabric_main_mvgr")
    }
    fields[_FAB_LINE_FIELD] = _FAB_LINE_DESCRIPTION
    return (template or _default_template(OCR_PROMPT)).format(
        category_context=_category_context(context),
        ocr_fields_json=json.dumps(fields, indent=2),
    )


def build_main_prompt(
    schema: Sequence[AttributeDefinition],
    context: ExtractionContext,
    ocr_hint: OcrHint | None = None,
    template: str | None = None,
) -> str:
    """Prompt for the full visual analysis.

    Every controlled attribute carries its complete allowed-value list. OCR
    hints are embedded only for allow-listed keys present in ``schema``.
    """
    garment_class = classify_garment(context.category_label)
    return (template or _default_template(MAIN_PROMPT)).format(
        attribute_count=len(schema),
        garment=_garment_label(garment_class),
        category_context=_category_context(context),
        schema_definition="\n".join(_describe_attribute(d) for d in schema),
        ocr_hint_block=_ocr_hint_block(schema, ocr_hint),
    )


def _describe_attribute(definition: AttributeDefinition) -> str:
    header = f"- {definition.key} ({definition.label})"
    if not definition.is_controlled:
        return f"{header}: free text"
    allowed = " | ".join(value.render() for value in definition.allowed_values)
    return f"{header}: {allowed}"


def _ocr_hint_block(schema: Sequence[AttributeDefinition], ocr_hint: OcrHint | None) -> str:
    if ocr_hint is None or ocr_hint.is_empty():
        return ""
    schema_keys = {d.key for d in schema}
    lines = [
        f"- {key}: {ocr_hint.get(key)}"
        for key in OCR_HINT_KEYS
        if key in schema_keys and ocr_hint.get(key)
    ]
    if not lines:
        return ""
    return (
        "\nOCR HINTS (advisory, read from the tag by a separate scan):\n"
        + "\n".join(lines)
        + "\nUse these hints ONLY for the keys listed above and only when the"
        " image agrees. They never apply to any other attribute.\n"
    )


def _category_context(context: ExtractionContext) -> str:
    parts = []
    if context.department_label:
        parts.append(f"Department: {context.department_label}")
    parts.append(f"Category: {context.category_label or 'unknown'}")
    return ", ".join(parts)


def _garment_label(garment_class: GarmentClass) -> str:
    return garment_class.value.replace("_", " ").upper()
