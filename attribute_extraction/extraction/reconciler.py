"""Merges tag fields read during visual analysis with OCR pre-pass hints.

Only the tag keys (OCR_HINT_KEYS) are touched here. For every tag key except
colour the main-pass value wins: first the attribute block, then the
main-pass metadata block, and only then the OCR hint. Colour is read both
from the tag and from the garment itself and gets its own reconciliation.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import replace

from attribute_extraction.extraction.models import (
    OCR_HINT_KEYS,
    AttributeMap,
    AttributeValue,
    HintAvailable,
    OcrHint,
    OcrOutcome,
    is_absent,
)
from attribute_extraction.extraction.validator import canonicalize
from attribute_extraction.logging.logger import Log
from attribute_extraction.vocabulary.models import AttributeDefinition
from attribute_extraction.vocabulary.store import VocabularyStore

COLOUR_KEY = "colour"

METADATA_CONFIDENCE = 95
OCR_HINT_CONFIDENCE = 90
BOARD_COLOUR_CONFIDENCE = 85
COLOUR_CONFLICT_PENALTY = 10

# Checked in order; first family with a matching fragment wins.
COLOUR_FAMILIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("blue", ("blu", "blue", "navy", "nvy", "sky", "denim")),
    ("grey", ("gry", "gray", "grey", "ash", "charcoal")),
    ("black", ("blk", "black", "jet")),
    ("white", ("wht", "white", "ivory")),
    ("red", ("red", "maroon", "wine", "burg")),
    ("green", ("grn", "green", "olive", "mint")),
    ("yellow", ("ylw", "yellow", "mustard")),
    ("orange", ("org", "orange", "rust")),
    ("pink", ("pnk", "pink", "rose", "peach")),
    ("purple", ("prp", "purple", "violet", "lav")),
    ("brown", ("brn", "brown", "choco", "tan")),
    ("beige", ("beige", "cream", "sand", "nude")),
)

# Lower-cased metadata keys a model may use for each tag field.
METADATA_ALIASES: dict[str, tuple[str, ...]] = {
    "division": ("division", "div"),
    "vendor_name": ("vendorname", "vendor_name", "vendor name", "vendor", "brand"),
    "design_number": ("designnumber", "design_number", "design number", "design_no", "design no", "design"),
    "ppt_number": ("pptnumber", "ppt_number", "ppt number", "ppt_no", "ppt no", "ppt"),
    "rate": ("rate", "price", "mrp", "cost"),
    "size": ("size", "sizes", "size_range", "size range", "size-range", "siz"),
    "major_category": ("majorcategory", "major_category", "major category", "category"),
    "gsm": ("gsm",),
    "yarn_01": ("yarn_01", "yarn01", "yarn1", "yarn 1"),
    "yarn_02": ("yarn_02", "yarn02", "yarn2", "yarn 2"),
    "fabric_main_mvgr": ("fabric_main_mvgr", "fabricmainmvgr", "fabric_main", "fabric main"),
    "colour": ("colour", "color", "clr"),
}


def _strip_plan_suffix(value: str) -> str | None:
    return re.sub(r"\s*[-_]?\s*PLAN\s*$", "", value.strip(), flags=re.IGNORECASE).strip() or None


# Free-text cleanup applied to a tag field whatever its source.
CLEANUP_RULES: dict[str, Callable[[str], str | None]] = {
    "design_number": _strip_plan_suffix,
}


def colour_family(value: str | None) -> str | None:
    """Map a colour value or abbreviation to a coarse family, or None."""
    if not value:
        return None
    lowered = value.lower()
    for family, fragments in COLOUR_FAMILIES:
        if any(fragment in lowered for fragment in fragments):
            return family
    return None


def resolve_metadata_value(metadata: Mapping[str, object], key: str) -> str | None:
    """Find a tag field in the main-pass metadata block under any of its aliases."""
    lowered = {str(k).lower(): v for k, v in metadata.items()}
    for alias in METADATA_ALIASES.get(key, (key,)):
        value = lowered.get(alias)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def reconcile_metadata(
    attributes: AttributeMap,
    vocabulary: VocabularyStore,
    metadata: Mapping[str, object],
    ocr_outcome: OcrOutcome,
) -> AttributeMap:
    """Return a new map with tag fields filled and colour reconciled."""
    hint = ocr_outcome.hint if isinstance(ocr_outcome, HintAvailable) else None
    reconciled: AttributeMap = dict(attributes)
    for key in OCR_HINT_KEYS:
        definition = vocabulary.get(key)
        if definition is None:
            continue
        if key == COLOUR_KEY:
            reconciled[key] = reconcile_colour(
                definition, reconciled.get(key), _board_colours(metadata, hint)
            )
        else:
            reconciled[key] = _reconcile_tag_field(definition, reconciled.get(key), metadata, hint)
    return reconciled


def reconcile_colour(
    definition: AttributeDefinition,
    visual: AttributeValue | None,
    board_candidates: list[str],
) -> AttributeValue | None:
    """Choose between the tag colour and the colour seen on the garment.

    Same family (or either family unknown): the tag wins, since it is printed
    at manufacture. Different families: the garment wins with a lowered
    confidence. One side only: that side. Neither: absent.
    """
    board_raw, board_value = None, None
    for candidate in board_candidates:
        normalized = canonicalize(definition, candidate)
        if normalized is not None:
            board_raw, board_value = candidate, normalized
            break
    visual_value = None if is_absent(visual) else visual

    if board_value is not None and visual_value is not None:
        board_family = _family_of(definition, board_value)
        visual_family = _family_of(definition, visual_value.normalized_value)
        if board_family is None or visual_family is None or board_family == visual_family:
            return AttributeValue(
                raw_value=board_raw,
                normalized_value=board_value,
                confidence=BOARD_COLOUR_CONFIDENCE,
                reasoning="Tag colour agrees with the garment colour family; using tag value",
            )
        Log.info(
            "Tag colour conflicts with garment colour",
            tag=board_value,
            garment=visual_value.normalized_value,
        )
        return replace(
            visual_value,
            confidence=max(0, visual_value.confidence - COLOUR_CONFLICT_PENALTY),
            reasoning=(
                f"Tag colour {board_value} ({board_family}) conflicts with garment "
                f"colour ({visual_family}); using garment colour"
            ),
        )
    if board_value is not None:
        return AttributeValue(
            raw_value=board_raw,
            normalized_value=board_value,
            confidence=BOARD_COLOUR_CONFIDENCE,
            reasoning="Colour read from tag/board",
        )
    return visual_value


def _reconcile_tag_field(
    definition: AttributeDefinition,
    current: AttributeValue | None,
    metadata: Mapping[str, object],
    hint: OcrHint | None,
) -> AttributeValue | None:
    if not is_absent(current):
        return _apply_cleanup(definition, current)

    candidates = (
        (resolve_metadata_value(metadata, definition.key), METADATA_CONFIDENCE,
         "Read from tag/board during visual analysis"),
        (hint.get(definition.key) if hint else None, OCR_HINT_CONFIDENCE,
         "Read from tag/board by OCR pre-pass"),
    )
    for raw, confidence, reasoning in candidates:
        if raw is None:
            continue
        cleaned = _clean(definition, raw)
        normalized = canonicalize(definition, cleaned)
        if normalized is not None:
            return AttributeValue(
                raw_value=raw if definition.is_controlled else normalized,
                normalized_value=normalized,
                confidence=confidence,
                reasoning=reasoning,
            )
    return current


def _apply_cleanup(
    definition: AttributeDefinition, value: AttributeValue | None
) -> AttributeValue | None:
    if value is None or definition.is_controlled or definition.key not in CLEANUP_RULES:
        return value
    cleaned = _clean(definition, value.normalized_value or "")
    if cleaned is None:
        return None
    return replace(value, raw_value=cleaned, normalized_value=cleaned)


def _clean(definition: AttributeDefinition, raw: str) -> str | None:
    rule = CLEANUP_RULES.get(definition.key)
    if rule is None or definition.is_controlled:
        return raw
    return rule(raw)


def _board_colours(metadata: Mapping[str, object], hint: OcrHint | None) -> list[str]:
    candidates: list[str] = []
    if hint is not None and hint.get(COLOUR_KEY):
        candidates.append(hint.get(COLOUR_KEY) or "")
    from_metadata = resolve_metadata_value(metadata, COLOUR_KEY)
    if from_metadata:
        candidates.append(from_metadata)
    return candidates


def _family_of(definition: AttributeDefinition, short_form: str | None) -> str | None:
    if short_form is None:
        return None
    family = colour_family(short_form)
    if family is not None:
        return family
    allowed = definition.find_allowed(short_form)
    return colour_family(allowed.full_form) if allowed else None
