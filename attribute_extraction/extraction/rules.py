"""Garment-class rule engine.

Runs after validation and reconciliation, in three passes:

1. the class rule masks structurally inapplicable attributes,
2. the class rule injects defaults (and, for bottomwear, derives the belt
   detail from the belt type),
3. cross-attribute corrections that apply to every class.

Every pass returns a fresh map and is a no-op when re-applied, so running the
engine twice gives the same result. Defaults are only injected for schema keys
the class does not mask and only when the default validates against the
attribute's vocabulary.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass

from attribute_extraction.extraction.garment import GarmentClass
from attribute_extraction.extraction.models import AttributeMap, AttributeValue, is_absent
from attribute_extraction.extraction.validator import canonicalize
from attribute_extraction.logging.logger import Log
from attribute_extraction.vocabulary.store import VocabularyStore

TOPWEAR_ONLY_KEYS = frozenset({
    "neck", "neck_details", "collar", "placket", "sleeve", "front_open_style",
})
BOTTOMWEAR_ONLY_KEYS = frozenset({"drawcord", "father_belt", "child_belt"})
INNERWEAR_VISUAL_KEYS = frozenset({
    "fit", "pattern", "colour",
    "print_type", "print_style", "print_placement",
    "embroidery", "embroidery_type",
    "wash",
})

BELT_TYPE_KEY = "father_belt"
BELT_DETAIL_KEY = "child_belt"
ELASTIC_BELT_TYPES = frozenset({"ELS_BLT", "IE", "OE", "HLF_ELS_BLT", "3/4 ELS_BLT", "FLEXI"})


@dataclass(frozen=True)
class DefaultValue:
    """A value injected when an attribute is absent."""

    key: str
    value: str
    confidence: int
    reasoning: str


# Belt detail derived from the belt type: elastic-style vs fixed-style.
BELT_DETAIL_DEFAULTS: dict[bool, DefaultValue] = {
    True: DefaultValue(
        BELT_DETAIL_KEY, "SLF GTHR BLT", 65, "Elastic waistband; defaulted to SELF GATHER BELT"
    ),
    False: DefaultValue(
        BELT_DETAIL_KEY, "SELF C&S BLT", 65, "Fixed waistband; defaulted to SELF CUT & SEW BELT"
    ),
}

_BOTTOM_FOLD_DEFAULT = DefaultValue(
    "bottom_fold", "BTM OPEN", 65, "Bottom fold not detected; defaulted to BOTTOM OPEN"
)


@dataclass(frozen=True)
class GarmentRule:
    """Per-class masking and default injection.

    ``retained_only`` wins over ``masked``: when set, every key outside it is
    masked.
    """

    masked: frozenset[str] = frozenset()
    retained_only: frozenset[str] | None = None
    defaults: tuple[DefaultValue, ...] = ()
    derive_belt_detail: bool = False

    def excludes(self, key: str) -> bool:
        if self.retained_only is not None:
            return key not in self.retained_only
        return key in self.masked


GARMENT_RULES: dict[GarmentClass, GarmentRule] = {
    GarmentClass.TOPWEAR: GarmentRule(
        masked=BOTTOMWEAR_ONLY_KEYS,
        defaults=(_BOTTOM_FOLD_DEFAULT,),
    ),
    GarmentClass.BOTTOMWEAR: GarmentRule(
        masked=TOPWEAR_ONLY_KEYS,
        defaults=(
            DefaultValue(
                BELT_TYPE_KEY, "FIXED _BLT", 65,
                "Bottomwear waistband present; defaulted to FIXED BELT",
            ),
            _BOTTOM_FOLD_DEFAULT,
        ),
        derive_belt_detail=True,
    ),
    GarmentClass.FULL_BODY: GarmentRule(),
    GarmentClass.INNERWEAR_ACCESSORY: GarmentRule(retained_only=INNERWEAR_VISUAL_KEYS),
    GarmentClass.UNKNOWN: GarmentRule(),
}

# Cross-attribute corrections.
YARN_KEY = "yarn_01"
WEAVE_KEY = "weave"
IMPORTED_YARN_VALUES = frozenset({"imp", "imported"})
DENIM_MARKERS = ("denim", "jean")
DENIM_DISALLOWED_WEAVES = frozenset({"twl", "twill"})

PRINT_TYPE_KEY = "print_type"
PRINT_DETAIL_KEYS = ("print_style", "print_placement")
PATTERN_KEY = "pattern"

PATCH_TYPE_KEY = "patches_type"
PATCH_NUMERIC_VALUE = "NUM"
PATCH_NUMERIC_MIN_CONFIDENCE = 75
PATCH_DIGIT_FLAGS = ("patchdigitspresent", "patch_digits_present", "patch_digits")
PATCH_TEXT_FIELDS = ("patchtext", "patch_text")

FALLBACK_DEFAULTS: tuple[DefaultValue, ...] = (
    DefaultValue("wash", "RINSE", 70, "Wash not detected; defaulted to RINSE"),
)

_DIGIT = re.compile(r"\d")


def apply_garment_rules(
    attributes: AttributeMap,
    vocabulary: VocabularyStore,
    garment_class: GarmentClass,
    *,
    category_label: str = "",
    metadata: Mapping[str, object] | None = None,
) -> AttributeMap:
    """Apply class masking, class defaults and cross-attribute corrections."""
    rule = GARMENT_RULES[garment_class]
    ruled = _apply_mask(attributes, vocabulary, rule)
    masked = [
        key for key in vocabulary.keys()
        if rule.excludes(key) and not is_absent(attributes.get(key))
    ]

    for default in rule.defaults:
        _inject_default(ruled, vocabulary, rule, default)
    if rule.derive_belt_detail:
        _derive_belt_detail(ruled, vocabulary, rule)

    _apply_cross_rules(ruled, vocabulary, rule, category_label, metadata or {})
    Log.info("Applied garment rules", garment_class=garment_class.value, masked=len(masked))
    return ruled


def _apply_mask(
    attributes: AttributeMap, vocabulary: VocabularyStore, rule: GarmentRule
) -> AttributeMap:
    ruled: AttributeMap = {}
    for key in vocabulary.keys():
        ruled[key] = None if rule.excludes(key) else attributes.get(key)
    return ruled


def _inject_default(
    attributes: AttributeMap,
    vocabulary: VocabularyStore,
    rule: GarmentRule,
    default: DefaultValue,
    *,
    force: bool = False,
) -> bool:
    definition = vocabulary.get(default.key)
    if definition is None or rule.excludes(default.key):
        return False
    if not force and not is_absent(attributes.get(default.key)):
        return False
    normalized = canonicalize(definition, default.value)
    if normalized is None:
        Log.debug("Default not in vocabulary; skipped", attribute=default.key, value=default.value)
        return False
    attributes[default.key] = AttributeValue(
        raw_value=default.value,
        normalized_value=normalized,
        confidence=default.confidence,
        reasoning=default.reasoning,
    )
    return True


def _derive_belt_detail(
    attributes: AttributeMap, vocabulary: VocabularyStore, rule: GarmentRule
) -> None:
    belt_type = attributes.get(BELT_TYPE_KEY)
    if is_absent(belt_type):
        return
    is_elastic = belt_type.normalized_value in ELASTIC_BELT_TYPES
    _inject_default(attributes, vocabulary, rule, BELT_DETAIL_DEFAULTS[is_elastic])


def _apply_cross_rules(
    attributes: AttributeMap,
    vocabulary: VocabularyStore,
    rule: GarmentRule,
    category_label: str,
    metadata: Mapping[str, object],
) -> None:
    if _is_imported_yarn(attributes.get(YARN_KEY)) and WEAVE_KEY in attributes:
        attributes[WEAVE_KEY] = None

    if _is_denim(attributes, category_label) and _is_disallowed_denim_weave(attributes.get(WEAVE_KEY)):
        Log.debug("Dropped twill weave for denim garment")
        attributes[WEAVE_KEY] = None

    for default in FALLBACK_DEFAULTS:
        _inject_default(attributes, vocabulary, rule, default)

    if _lacks_print_details(attributes):
        attributes[PRINT_TYPE_KEY] = None

    _force_numeric_patch(attributes, vocabulary, rule, metadata)


def _is_imported_yarn(value: AttributeValue | None) -> bool:
    if is_absent(value):
        return False
    return value.normalized_value.strip().lower() in IMPORTED_YARN_VALUES


def _is_denim(attributes: AttributeMap, category_label: str) -> bool:
    texts = [category_label or ""]
    major_category = attributes.get("major_category")
    if not is_absent(major_category):
        texts.append(major_category.normalized_value)
    return any(marker in text.lower() for text in texts for marker in DENIM_MARKERS)


def _is_disallowed_denim_weave(value: AttributeValue | None) -> bool:
    if is_absent(value):
        return False
    candidates = {value.normalized_value.lower(), (value.raw_value or "").lower()}
    return any(c in DENIM_DISALLOWED_WEAVES or "twill" in c for c in candidates)


def _lacks_print_details(attributes: AttributeMap) -> bool:
    if is_absent(attributes.get(PRINT_TYPE_KEY)):
        return False
    if any(not is_absent(attributes.get(key)) for key in PRINT_DETAIL_KEYS):
        return False
    pattern = attributes.get(PATTERN_KEY)
    return is_absent(pattern) or "basic" in pattern.normalized_value.lower()


def _force_numeric_patch(
    attributes: AttributeMap,
    vocabulary: VocabularyStore,
    rule: GarmentRule,
    metadata: Mapping[str, object],
) -> None:
    current = attributes.get(PATCH_TYPE_KEY)
    if PATCH_TYPE_KEY not in attributes or not _patch_has_digits(current, metadata):
        return
    if not is_absent(current) and current.normalized_value == PATCH_NUMERIC_VALUE:
        return
    previous = 0 if current is None else current.confidence
    numeric = DefaultValue(
        PATCH_TYPE_KEY,
        PATCH_NUMERIC_VALUE,
        max(previous, PATCH_NUMERIC_MIN_CONFIDENCE),
        "Patch contains numeric characters; patch type forced to NUM",
    )
    _inject_default(attributes, vocabulary, rule, numeric, force=True)


def _patch_has_digits(current: AttributeValue | None, metadata: Mapping[str, object]) -> bool:
    lowered = {str(k).lower(): v for k, v in metadata.items()}
    for flag in PATCH_DIGIT_FLAGS:
        value = lowered.get(flag)
        if value is None:
            continue
        if isinstance(value, bool):
            if value:
                return True
            break
        if isinstance(value, str) and value.strip().lower() == "true":
            return True
        break
    for field_name in PATCH_TEXT_FIELDS:
        text = lowered.get(field_name)
        if isinstance(text, str) and _DIGIT.search(text):
            return True
    return current is not None and bool(_DIGIT.search(current.reasoning or ""))
