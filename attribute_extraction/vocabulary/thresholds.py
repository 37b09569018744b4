"""Per-attribute confidence thresholds.

Attributes that are hard to observe reliably in a catalog photo (pockets,
fit, trims, wash, colour) accept a lower model confidence. Reference article
fields are copied from the taxonomy and never filtered.
"""

ATTRIBUTE_THRESHOLDS: dict[str, int] = {
    "division": 65,
    "major_category": 65,
    "reference_article_number": 0,
    "reference_article_description": 0,
    "vendor_name": 65,
    "design_number": 65,
    "ppt_number": 65,
    "rate": 65,
    "size": 65,
    "yarn_01": 65,
    "yarn_02": 65,
    "fabric_main_mvgr": 65,
    "weave": 65,
    "composition": 65,
    "finish": 65,
    "gsm": 65,
    "shade": 65,
    "lycra_non_lycra": 65,
    "neck": 65,
    "neck_details": 65,
    "collar": 65,
    "placket": 65,
    "sleeve": 65,
    "bottom_fold": 65,
    "front_open_style": 65,
    "pocket_type": 50,
    "fit": 50,
    "pattern": 65,
    "length": 65,
    "drawcord": 65,
    "button": 50,
    "zipper": 50,
    "zip_colour": 65,
    "print_type": 65,
    "print_style": 65,
    "print_placement": 65,
    "patches": 65,
    "patches_type": 65,
    "embroidery": 65,
    "embroidery_type": 65,
    "wash": 50,
    "colour": 50,
    "father_belt": 65,
    "child_belt": 65,
}
