import json
from typing import Any

from attribute_extraction.extraction.models import OcrHint
from attribute_extraction.extraction.prompt_builder import build_main_prompt, build_ocr_prompt


class TestBuildOcrPrompt:
    def test_lists_only_tag_fields_and_fab_line(self, make_context: Any) -> None:
        context = make_context()
        prompt = build_ocr_prompt(
            context.schema,
            context,
            template="{category_context}|{ocr_fields_json}",
        )
        _, fields_json = prompt.split("|", 1)
        fields = json.loads(fields_json)
        assert "vendor_name" in fields
        assert "colour" in fields
        assert "fab_line" in fields
        assert "neck" not in fields
        assert "yarn_01" not in fields

    def test_includes_category_context(self, make_context: Any) -> None:
        context = make_context("Denim Jeans", "MENS")
        prompt = build_ocr_prompt(context.schema, context, template="{category_context}{ocr_fields_json}")
        assert "Department: MENS" in prompt
        assert "Category: Denim Jeans" in prompt

    def test_default_template_demands_whole_field_null(self, make_context: Any) -> None:
        context = make_context()
        prompt = build_ocr_prompt(context.schema, context)
        assert "null for the WHOLE field" in prompt


class TestBuildMainPrompt:
    def test_embeds_every_allowed_value(self, make_context: Any) -> None:
        context = make_context()
        prompt = build_main_prompt(context.schema, context)
        for definition in context.schema:
            for allowed in definition.allowed_values:
                assert allowed.render() in prompt

    def test_free_text_attributes_marked(self, make_context: Any) -> None:
        context = make_context()
        prompt = build_main_prompt(context.schema, context)
        assert "- vendor_name (Vendor Name): free text" in prompt

    def test_controlled_line_format(self, make_context: Any) -> None:
        context = make_context()
        prompt = build_main_prompt(context.schema, context)
        assert "- wash (Wash): RINSE (RINSE WASH) | STONE (STONE WASH) | ACID (ACID WASH)" in prompt

    def test_states_garment_class_and_count(self, make_context: Any) -> None:
        context = make_context("Denim Jeans")
        template = "{garment}/{attribute_count}{category_context}{schema_definition}{ocr_hint_block}"
        prompt = build_main_prompt(context.schema, context, template=template)
        assert prompt.startswith(f"BOTTOMWEAR/{len(context.schema)}")

    def test_no_hint_block_without_hint(self, make_context: Any) -> None:
        context = make_context()
        prompt = build_main_prompt(context.schema, context)
        assert "OCR HINTS" not in prompt

    def test_hint_block_is_advisory_and_restricted(self, make_context: Any) -> None:
        context = make_context()
        hint = OcrHint(values={"vendor_name": "ACME", "colour": "NVY"})
        prompt = build_main_prompt(context.schema, context, ocr_hint=hint)
        assert "OCR HINTS (advisory" in prompt
        assert "- vendor_name: ACME" in prompt
        assert "- colour: NVY" in prompt
        assert "ONLY for the keys listed above" in prompt

    def test_hint_keys_outside_schema_are_skipped(self, make_context: Any) -> None:
        context = make_context()
        schema = tuple(d for d in context.schema if d.key != "vendor_name")
        hint = OcrHint(values={"vendor_name": "ACME"})
        prompt = build_main_prompt(schema, context, ocr_hint=hint)
        assert "ACME" not in prompt
        assert "OCR HINTS" not in prompt

    def test_json_example_survives_formatting(self, make_context: Any) -> None:
        context = make_context()
        prompt = build_main_prompt(context.schema, context)
        assert '"attributes": {' in prompt
        assert '"metadata": {' in prompt
