import pytest

from attribute_extraction.extraction.garment import GarmentClass, classify_garment


class TestClassifyGarment:
    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Denim Jeans", GarmentClass.BOTTOMWEAR),
            ("M.JEANS", GarmentClass.BOTTOMWEAR),
            ("Track Pants", GarmentClass.BOTTOMWEAR),
            ("Capri", GarmentClass.BOTTOMWEAR),
            ("Shorts", GarmentClass.BOTTOMWEAR),
            ("Round Neck T-Shirt", GarmentClass.TOPWEAR),
            ("Denim Jacket", GarmentClass.TOPWEAR),
            ("Kurta", GarmentClass.TOPWEAR),
            ("Maxi Dress", GarmentClass.FULL_BODY),
            ("Kurta Set", GarmentClass.FULL_BODY),
            ("Co-ord Set", GarmentClass.FULL_BODY),
            ("Sports Bra", GarmentClass.INNERWEAR_ACCESSORY),
            ("Boxer Briefs", GarmentClass.INNERWEAR_ACCESSORY),
            ("Baseball Cap", GarmentClass.INNERWEAR_ACCESSORY),
            ("MENS TSHIRT", GarmentClass.TOPWEAR),
            ("Polo", GarmentClass.TOPWEAR),
            ("JEANSWEAR", GarmentClass.BOTTOMWEAR),
            ("Kids Denimwear", GarmentClass.BOTTOMWEAR),
        ],
    )
    def test_classifies_label(self, label: str, expected: GarmentClass) -> None:
        assert classify_garment(label) is expected

    def test_full_body_wins_over_top_and_bottom(self) -> None:
        assert classify_garment("Shirt and Shorts Set") is GarmentClass.FULL_BODY

    def test_unknown_label(self) -> None:
        assert classify_garment("Home Furnishing") is GarmentClass.UNKNOWN

    def test_empty_label(self) -> None:
        assert classify_garment("") is GarmentClass.UNKNOWN
        assert classify_garment(None) is GarmentClass.UNKNOWN

    def test_is_case_insensitive(self) -> None:
        assert classify_garment("JOGGERS") is GarmentClass.BOTTOMWEAR

    def test_does_not_match_inside_words(self) -> None:
        assert classify_garment("Settee Cover") is GarmentClass.UNKNOWN
