import base64
from typing import Any

import pytest

from attribute_extraction.extraction.models import ExtractionContext
from attribute_extraction.vocabulary.loader import load_vocabulary
from attribute_extraction.vocabulary.store import VocabularyStore


def _pairs(*values: tuple[str, str]) -> list[dict[str, str]]:
    return [{"shortForm": short, "fullForm": full} for short, full in values]


VOCABULARY_RECORDS: list[dict[str, Any]] = [
    {"key": "division", "label": "Division", "type": "text"},
    {"key": "major_category", "label": "Major Category", "type": "text"},
    {"key": "vendor_name", "label": "Vendor Name", "type": "text"},
    {"key": "design_number", "label": "Design Number", "type": "text"},
    {"key": "ppt_number", "label": "PPT Number", "type": "text"},
    {"key": "rate", "label": "Rate/Price", "type": "text"},
    {"key": "size", "label": "Size", "type": "text"},
    {"key": "gsm", "label": "GSM", "type": "text"},
    {
        "key": "yarn_01",
        "label": "Yarn 1",
        "allowedValues": _pairs(("CP", "COMBED COTTON"), ("IMP", "IMPORTED"), ("PC", "POLY COTTON")),
    },
    {
        "key": "yarn_02",
        "label": "Yarn 2",
        "allowedValues": _pairs(("CP", "COMBED COTTON"), ("LCR", "LYCRA")),
    },
    {
        "key": "fabric_main_mvgr",
        "label": "Fabric Main MVGR",
        "allowedValues": _pairs(("DNM", "DENIM"), ("JRSY", "JERSEY"), ("PQ", "PIQUE")),
    },
    {
        "key": "weave",
        "label": "Weave",
        "allowedValues": _pairs(("TWL", "TWILL"), ("PLN", "PLAIN"), ("DBY", "DOBBY")),
    },
    {
        "key": "neck",
        "label": "Neck",
        "allowedValues": _pairs(("RN", "ROUND NECK"), ("VN", "V NECK"), ("HNL_NK", "HENLEY NECK")),
    },
    {
        "key": "collar",
        "label": "Collar",
        "allowedValues": _pairs(("SPRD", "SPREAD COLLAR"), ("MAND", "MANDARIN COLLAR")),
    },
    {
        "key": "sleeve",
        "label": "Sleeve",
        "allowedValues": _pairs(("SS", "SHORT SLEEVE"), ("FS", "FULL SLEEVE")),
    },
    {
        "key": "bottom_fold",
        "label": "Bottom Fold",
        "allowedValues": _pairs(("BTM OPEN", "BOTTOM OPEN"), ("SLF FOLD", "SELF FOLD")),
    },
    {
        "key": "fit",
        "label": "Fit",
        "allowedValues": _pairs(("SLIM FIT", "SLIM FIT"), ("REG FIT", "REGULAR FIT")),
    },
    {
        "key": "pattern",
        "label": "Pattern",
        "allowedValues": _pairs(("BASIC", "BASIC"), ("C&S", "CUT AND SEW")),
    },
    {
        "key": "drawcord",
        "label": "Drawcord",
        "allowedValues": _pairs(("DRW_CRD", "DRAWCORD"), ("NO_DRW", "NO DRAWCORD")),
    },
    {
        "key": "print_type",
        "label": "Print Type",
        "allowedValues": _pairs(("AOP", "ALL OVER PRINT"), ("GRPHC", "GRAPHIC")),
    },
    {
        "key": "print_style",
        "label": "Print Style",
        "allowedValues": _pairs(("SCRN", "SCREEN PRINT"), ("DGTL", "DIGITAL PRINT")),
    },
    {
        "key": "print_placement",
        "label": "Print Placement",
        "allowedValues": _pairs(("CHST", "CHEST"), ("BCK", "BACK")),
    },
    {
        "key": "patches_type",
        "label": "Patches Type",
        "allowedValues": _pairs(("NUM", "NUMERIC"), ("BRAND LOGO", "BRAND LOGO")),
    },
    {"key": "embroidery", "label": "Embroidery", "type": "text"},
    {
        "key": "wash",
        "label": "Wash",
        "allowedValues": _pairs(("RINSE", "RINSE WASH"), ("STONE", "STONE WASH"), ("ACID", "ACID WASH")),
    },
    {
        "key": "colour",
        "label": "Colour",
        "allowedValues": _pairs(
            ("NVY", "NAVY"),
            ("NAVY BLUE", "NAVY BLUE"),
            ("SKY BLUE", "SKY BLUE"),
            ("BLK", "BLACK"),
            ("GRY", "GREY"),
            ("CHARCOAL", "CHARCOAL"),
            ("RED", "RED"),
            ("WHT", "WHITE"),
        ),
    },
    {
        "key": "father_belt",
        "label": "Father Belt",
        "allowedValues": _pairs(("FIXED _BLT", "FIXED BELT"), ("ELS_BLT", "ELASTIC BELT")),
    },
    {
        "key": "child_belt",
        "label": "Child Belt",
        "allowedValues": _pairs(("SLF GTHR BLT", "SELF GATHER BELT"), ("SELF C&S BLT", "SELF CUT & SEW BELT")),
    },
]


@pytest.fixture()
def vocabulary() -> VocabularyStore:
    return load_vocabulary(VOCABULARY_RECORDS)


@pytest.fixture()
def image() -> str:
    payload = base64.b64encode(b"\x89PNG\r\n\x1a\nfake-image-bytes").decode("ascii")
    return f"data:image/png;base64,{payload}"


@pytest.fixture()
def make_context(vocabulary: VocabularyStore, image: str) -> Any:
    def _make(category_label: str = "Denim Jeans", department_label: str | None = "MENS") -> ExtractionContext:
        return ExtractionContext(
            image=image,
            vocabulary=vocabulary,
            category_label=category_label,
            department_label=department_label,
        )

    return _make
