"""Canonicalizes raw model values against the controlled vocabulary.

Controlled attributes are matched in order: exact short form, exact full
form, case-insensitive short form, case-insensitive full form, then the
attribute's alias table. The first match wins and is returned as the
vocabulary's short form. A value that matches nothing is rejected: it becomes
absent, its confidence drops to 0 and its reasoning is replaced by a rejection
note.
"""

from attribute_extraction.extraction.models import (
    AttributeMap,
    AttributeValue,
    ParsedResponse,
    RawAttribute,
)
from attribute_extraction.logging.logger import Log
from attribute_extraction.vocabulary.models import AllowedValue, AttributeDefinition
from attribute_extraction.vocabulary.store import VocabularyStore

# Model answers that mean "no value".
NON_ANSWER_TOKENS = frozenset({
    "",
    "-",
    "null",
    "none",
    "n/a",
    "na",
    "nil",
    "unknown",
    "not visible",
    "not applicable",
    "not found",
    "not available",
    "cannot determine",
    "no_packet",
    "no_placket",
    "no placket",
    "no plackets",
})

# Hand-curated domain spellings, keyed by attribute key. Targets are matched
# against the vocabulary like any other candidate, so an alias only resolves
# when its target is an allowed value.
ALIAS_TABLE: dict[str, dict[str, str]] = {
    "colour": {
        "sky": "SKY BLUE",
        "skyblue": "SKY BLUE",
        "sky blue": "SKY BLUE",
        "lt sky": "LIGHT SKY BLUE",
        "light sky": "LIGHT SKY BLUE",
        "light sky blue": "LIGHT SKY BLUE",
        "denim blue": "DENIM BLUE",
        "navy": "NAVY BLUE",
        "navy blue": "NAVY BLUE",
    },
    "wash": {
        "clean": "RINSE",
        "normal": "RINSE",
        "plain": "RINSE",
        "rinse wash": "RINSE",
        "stone wash": "STONE",
        "stone washed": "STONE",
        "acid wash": "ACID",
    },
    "yarn_01": {
        "imported": "IMP",
        "imp": "IMP",
    },
    "yarn_02": {
        "imported": "IMP",
        "imp": "IMP",
    },
}

DEFAULT_CONFIDENCE = 70
DEFAULT_CONFIDENCE_BY_KEY: dict[str, int] = {
    "colour": 80,
    "wash": 80,
}


def is_non_answer(value: str | None) -> bool:
    return value is None or value.strip().lower() in NON_ANSWER_TOKENS


def match_allowed_value(definition: AttributeDefinition, candidate: str) -> str | None:
    """Return the short form ``candidate`` resolves to, or None."""
    matched = _match_forms(definition.allowed_values, candidate.strip())
    if matched is not None:
        return matched
    alias = ALIAS_TABLE.get(definition.key, {}).get(candidate.strip().lower())
    if alias is not None:
        return _match_forms(definition.allowed_values, alias)
    return None


def canonicalize(definition: AttributeDefinition, raw_value: str | None) -> str | None:
    """Return the normalized value for ``raw_value``, or None if it is absent or rejected.

    Controlled values are matched against the vocabulary before the non-answer
    list, so an allowed value such as "NA" is kept.
    """
    if raw_value is None:
        return None
    value = raw_value.strip()
    if definition.is_controlled:
        return match_allowed_value(definition, value) if value else None
    return None if is_non_answer(value) else value


def validate_attribute(
    definition: AttributeDefinition, raw: RawAttribute | None
) -> AttributeValue | None:
    """Validate one attribute entry of the model's response.

    Returns None when the model gave no answer, a rejected AttributeValue
    (``normalized_value`` None) when the answer is outside the vocabulary,
    and an accepted AttributeValue otherwise.
    """
    if raw is None or raw.raw_value is None:
        return None
    value = raw.raw_value.strip()
    normalized = canonicalize(definition, value)
    if normalized is None:
        if is_non_answer(value):
            return None
        Log.debug("Rejected value outside vocabulary", attribute=definition.key, value=repr(value))
        return AttributeValue(
            raw_value=value,
            normalized_value=None,
            confidence=0,
            reasoning=f"Value {value!r} is not an allowed value for {definition.label}; rejected",
        )
    confidence = raw.confidence
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE_BY_KEY.get(definition.key, DEFAULT_CONFIDENCE)
    return AttributeValue(
        raw_value=value,
        normalized_value=normalized,
        confidence=confidence,
        reasoning=raw.reasoning,
    )


def validate_attributes(vocabulary: VocabularyStore, parsed: ParsedResponse) -> AttributeMap:
    """Validate every schema attribute; keys the model omitted come back as None."""
    validated: AttributeMap = {}
    for definition in vocabulary:
        validated[definition.key] = validate_attribute(
            definition, parsed.attributes.get(definition.key)
        )

    extra = set(parsed.attributes) - set(validated)
    if extra:
        Log.debug("Ignoring attributes outside the schema", keys=sorted(extra))
    rejected = sum(1 for v in validated.values() if v is not None and v.is_absent)
    accepted = sum(1 for v in validated.values() if v is not None and not v.is_absent)
    Log.info("Validated attributes", accepted=accepted, rejected=rejected, schema=len(vocabulary))
    return validated


def _match_forms(allowed_values: tuple[AllowedValue, ...], candidate: str) -> str | None:
    if not candidate:
        return None
    for allowed in allowed_values:
        if allowed.short_form == candidate:
            return allowed.short_form
    for allowed in allowed_values:
        if allowed.full_form == candidate:
            return allowed.short_form
    lowered = candidate.lower()
    for allowed in allowed_values:
        if allowed.short_form.lower() == lowered:
            return allowed.short_form
    for allowed in allowed_values:
        if allowed.full_form.lower() == lowered:
            return allowed.short_form
    return None
