from unittest.mock import patch

import pytest

from attribute_extraction.extraction.models import ParsedResponse, RawAttribute
from attribute_extraction.extraction.validator import (
    canonicalize,
    is_non_answer,
    match_allowed_value,
    validate_attribute,
    validate_attributes,
)
from attribute_extraction.vocabulary.loader import load_vocabulary
from attribute_extraction.vocabulary.store import VocabularyStore


def _make_parsed(**attributes: RawAttribute | None) -> ParsedResponse:
    return ParsedResponse(metadata={}, attributes=dict(attributes))


class TestNonAnswers:
    @pytest.mark.parametrize("value", ["", "  ", "N/A", "not visible", "Unknown", "none", "null", "-"])
    def test_recognizes_non_answers(self, value: str) -> None:
        assert is_non_answer(value)

    def test_real_value_is_answer(self) -> None:
        assert not is_non_answer("ACME")

    def test_free_text_non_answer_becomes_absent(self, vocabulary: VocabularyStore) -> None:
        assert validate_attribute(vocabulary.get("vendor_name"), RawAttribute("Not Visible", 90)) is None

    def test_controlled_non_answer_outside_vocabulary_is_absent(
        self, vocabulary: VocabularyStore
    ) -> None:
        assert validate_attribute(vocabulary.get("neck"), RawAttribute("N/A", 90)) is None


class TestMatchAllowedValue:
    def test_exact_short_form(self, vocabulary: VocabularyStore) -> None:
        assert match_allowed_value(vocabulary.get("colour"), "NVY") == "NVY"

    def test_exact_full_form(self, vocabulary: VocabularyStore) -> None:
        assert match_allowed_value(vocabulary.get("weave"), "TWILL") == "TWL"

    def test_case_insensitive_short_form(self, vocabulary: VocabularyStore) -> None:
        assert match_allowed_value(vocabulary.get("colour"), "blk") == "BLK"

    def test_case_insensitive_full_form(self, vocabulary: VocabularyStore) -> None:
        assert match_allowed_value(vocabulary.get("colour"), "black") == "BLK"

    def test_alias_table(self, vocabulary: VocabularyStore) -> None:
        assert match_allowed_value(vocabulary.get("yarn_01"), "imp") == "IMP"
        assert match_allowed_value(vocabulary.get("wash"), "Clean") == "RINSE"
        assert match_allowed_value(vocabulary.get("colour"), "sky") == "SKY BLUE"

    def test_exact_match_wins_over_case_insensitive(self) -> None:
        store = load_vocabulary([
            {
                "key": "fit",
                "label": "Fit",
                "allowedValues": [
                    {"shortForm": "slim", "fullForm": "SLIM (LOWER)"},
                    {"shortForm": "SLIM", "fullForm": "SLIM FIT"},
                ],
            }
        ])
        assert match_allowed_value(store.get("fit"), "SLIM") == "SLIM"

    def test_alias_target_must_be_in_vocabulary(self) -> None:
        store = load_vocabulary([{"key": "yarn_01", "label": "Yarn 1", "allowedValues": ["CP"]}])
        assert match_allowed_value(store.get("yarn_01"), "imported") is None

    def test_no_match(self, vocabulary: VocabularyStore) -> None:
        assert match_allowed_value(vocabulary.get("colour"), "MAUVE") is None


class TestCanonicalize:
    def test_free_text_passes_through_stripped(self, vocabulary: VocabularyStore) -> None:
        assert canonicalize(vocabulary.get("design_number"), "  D-1042 ") == "D-1042"

    def test_none_is_absent(self, vocabulary: VocabularyStore) -> None:
        assert canonicalize(vocabulary.get("colour"), None) is None


class TestValidateAttribute:
    def test_accepts_and_keeps_confidence(self, vocabulary: VocabularyStore) -> None:
        value = validate_attribute(vocabulary.get("fit"), RawAttribute("Regular Fit", 77, "straight leg"))
        assert value.normalized_value == "REG FIT"
        assert value.raw_value == "Regular Fit"
        assert value.confidence == 77
        assert value.reasoning == "straight leg"

    def test_rejection_zeroes_confidence_and_replaces_reasoning(
        self, vocabulary: VocabularyStore
    ) -> None:
        with patch("attribute_extraction.extraction.validator.Log"):
            value = validate_attribute(
                vocabulary.get("neck"), RawAttribute("Boat Neck", 95, "wide neckline")
            )
        assert value.is_absent
        assert value.confidence == 0
        assert "wide neckline" not in value.reasoning
        assert "'Boat Neck'" in value.reasoning
        assert "rejected" in value.reasoning

    def test_missing_confidence_defaults(self, vocabulary: VocabularyStore) -> None:
        assert validate_attribute(vocabulary.get("fit"), RawAttribute("SLIM FIT")).confidence == 70
        assert validate_attribute(vocabulary.get("colour"), RawAttribute("RED")).confidence == 80

    def test_free_text_normalized_equals_raw(self, vocabulary: VocabularyStore) -> None:
        value = validate_attribute(vocabulary.get("vendor_name"), RawAttribute("ACME", 90))
        assert value.normalized_value == value.raw_value == "ACME"


class TestValidateAttributes:
    def test_every_schema_key_present(self, vocabulary: VocabularyStore) -> None:
        validated = validate_attributes(vocabulary, _make_parsed(colour=RawAttribute("NVY", 90)))
        assert tuple(validated) == vocabulary.keys()
        assert validated["colour"].normalized_value == "NVY"
        assert validated["fit"] is None

    def test_extra_keys_are_dropped(self, vocabulary: VocabularyStore) -> None:
        validated = validate_attributes(vocabulary, _make_parsed(hemline=RawAttribute("RAW", 90)))
        assert "hemline" not in validated

    def test_controlled_values_always_in_vocabulary(self, vocabulary: VocabularyStore) -> None:
        candidates = ["NVY", "navy", "Teal", "twill", "IMPORTED", "xyz", "Stone Wash", "SLF FOLD", "4"]
        for definition in vocabulary:
            if not definition.is_controlled:
                continue
            allowed = {a.short_form for a in definition.allowed_values}
            for candidate in candidates:
                value = validate_attribute(definition, RawAttribute(candidate, 90))
                assert value is None or value.is_absent or value.normalized_value in allowed

    def test_verbatim_short_forms_round_trip(self, vocabulary: VocabularyStore) -> None:
        for definition in vocabulary:
            for allowed in definition.allowed_values:
                value = validate_attribute(definition, RawAttribute(allowed.short_form, 90))
                assert value.normalized_value == value.raw_value == allowed.short_form

    @pytest.mark.parametrize("short_form", ["NA", "None", "-", "NO PLACKET"])
    def test_allowed_values_that_look_like_non_answers_round_trip(self, short_form: str) -> None:
        store = load_vocabulary(
            [{"key": "placket", "label": "Placket", "allowedValues": [short_form, "BTN PLKT"]}]
        )
        parsed = _make_parsed(placket=RawAttribute(short_form, 90))
        value = validate_attributes(store, parsed)["placket"]
        assert value.normalized_value == value.raw_value == short_form
        assert value.confidence == 90
