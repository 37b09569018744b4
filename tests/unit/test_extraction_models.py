import pytest

from attribute_extraction.extraction.garment import GarmentClass
from attribute_extraction.extraction.models import (
    ExtractionOutcome,
    ExtractionResult,
    OcrHint,
    TokenUsage,
)


class TestOcrHint:
    def test_rejects_keys_outside_allow_list(self) -> None:
        with pytest.raises(ValueError, match="not allowed"):
            OcrHint(values={"neck": "RN"})

    def test_from_raw_filters_and_strips(self) -> None:
        hint = OcrHint.from_raw({"size": " S-XXL ", "gsm": 180, "rate": True, "neck": "RN", "ppt_number": ""})
        assert hint.values == {"size": "S-XXL", "gsm": "180"}

    def test_is_empty(self) -> None:
        assert OcrHint().is_empty()
        assert not OcrHint(values={"size": "M"}).is_empty()


class TestTokenUsage:
    def test_addition_and_total(self) -> None:
        total = TokenUsage(100, 20) + TokenUsage(300, 50)
        assert total == TokenUsage(400, 70)
        assert total.total_units == 470


class TestExtractionOutcome:
    def test_total_usage_includes_ocr_pass(self) -> None:
        outcome = ExtractionOutcome(
            result=ExtractionResult(values={}),
            garment_class=GarmentClass.TOPWEAR,
            main_usage=TokenUsage(1000, 200),
            ocr_usage=TokenUsage(500, 40),
            ocr_hint_available=True,
        )
        assert outcome.total_usage == TokenUsage(1500, 240)

    def test_total_usage_without_ocr_pass(self) -> None:
        outcome = ExtractionOutcome(
            result=ExtractionResult(values={}),
            garment_class=GarmentClass.UNKNOWN,
            main_usage=TokenUsage(1000, 200),
        )
        assert outcome.total_usage == TokenUsage(1000, 200)
