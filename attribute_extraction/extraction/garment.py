"""Maps a category label to a coarse garment class."""

import re
from enum import Enum


class GarmentClass(str, Enum):
    TOPWEAR = "topwear"
    BOTTOMWEAR = "bottomwear"
    FULL_BODY = "full_body"
    INNERWEAR_ACCESSORY = "innerwear_accessory"
    UNKNOWN = "unknown"


# Checked in order; the first class with a matching keyword wins.
# Full-body garments keep every attribute, so they must win over top/bottom.
GARMENT_KEYWORDS: tuple[tuple[GarmentClass, tuple[str, ...]], ...] = (
    (
        GarmentClass.FULL_BODY,
        (
            "dress", "jumpsuit", "romper", "set", "co-ord", "coord", "overall",
            "dungaree", "saree", "gown", "kaftan", "playsuit", "onesie",
        ),
    ),
    (
        GarmentClass.INNERWEAR_ACCESSORY,
        (
            "innerwear", "inner wear", "lingerie", "bra", "bralette", "panty", "panties",
            "brief", "boxer", "trunk", "thong", "camisole", "vest", "socks",
            "accessory", "accessories", "belt", "scarf", "scarves", "stole", "muffler",
            "cap", "hat",
        ),
    ),
    (
        GarmentClass.TOPWEAR,
        (
            "topwear", "upper", "top", "t-shirt", "tshirt", "t shirt", "tee", "shirt", "polo",
            "sweatshirt", "hoodie", "sweater", "cardigan", "jacket", "blazer", "outerwear",
            "blouse", "tunic", "kurti", "kurta",
        ),
    ),
    (
        GarmentClass.BOTTOMWEAR,
        (
            "bottomwear", "bottom", "lower", "jean", "jeanswear", "denim", "denimwear", "pant",
            "trouser", "short", "skirt", "pyjama", "pajama", "legging", "plazo", "palazzo",
            "culotte", "capri", "bermuda", "cargo", "jogger", "track pant", "trackpant", "sweatpant",
        ),
    ),
)


def _keyword_pattern(keyword: str) -> str:
    return rf"(?<![a-z]){re.escape(keyword)}(?:s|es)?(?![a-z])"


_CLASS_PATTERNS: tuple[tuple[GarmentClass, re.Pattern[str]], ...] = tuple(
    (garment_class, re.compile("|".join(_keyword_pattern(k) for k in keywords)))
    for garment_class, keywords in GARMENT_KEYWORDS
)


def classify_garment(category_label: str | None) -> GarmentClass:
    """Return the garment class for a category label such as ``"Denim Jeans"``.

    Keywords match whole words (plural forms included), so ``"M.JEANS"`` is
    bottomwear while ``"Capri"`` is not mistaken for a cap.
    """
    if not category_label:
        return GarmentClass.UNKNOWN
    label = category_label.lower()
    for garment_class, pattern in _CLASS_PATTERNS:
        if pattern.search(label):
            return garment_class
    return GarmentClass.UNKNOWN
