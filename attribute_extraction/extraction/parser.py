"""Decodes raw model text into structured OCR hints and attribute blocks."""

import json
import math
import re
from collections.abc import Mapping
from typing import Any

from attribute_extraction.extraction.exceptions import ExtractionDecodeError
from attribute_extraction.extraction.models import OcrHint, ParsedResponse, RawAttribute

_VALUE_FIELDS = ("rawValue", "schemaValue", "value")
_CONFIDENCE_FIELDS = ("confidence", "visualConfidence", "mappingConfidence")
_CONFIDENCE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*%?\s*$")
_FAB_SEPARATORS = re.compile(r"[/,|\-\s]+")
_TRAILING_BRACKET = re.compile(r"\s*\(([^)]*)\)\s*$")
_IMPORTED_TOKENS = frozenset({"imp", "imported"})
_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\s*```\s*$")


def strip_fences(raw: str) -> str:
    """Remove markdown code fences (```json ... ```) around a payload.

    Works for fences on their own lines and for a whole reply on one line.
    """
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
        cleaned = _CLOSING_FENCE.sub("", cleaned)
    return cleaned.strip()


def decode_json_object(raw: str) -> dict[str, Any]:
    """Decode a (possibly fenced) JSON object.

    Falls back to the outermost ``{...}`` span when the model wraps the object
    in prose.

    Raises:
        ExtractionDecodeError: if no JSON object can be decoded.
    """
    cleaned = strip_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        source = cleaned or raw
        start, end = source.find("{"), source.rfind("}")
        if start == -1 or end <= start:
            raise ExtractionDecodeError(f"Invalid JSON response: {exc}") from exc
        try:
            parsed = json.loads(source[start:end + 1])
        except json.JSONDecodeError as inner:
            raise ExtractionDecodeError(f"Invalid JSON response: {inner}") from inner

    if not isinstance(parsed, dict):
        raise ExtractionDecodeError("JSON response must be an object")
    return parsed


def parse_main_response(raw: str) -> ParsedResponse:
    """Decode the main-pass response into its metadata and attribute blocks.

    Raises:
        ExtractionDecodeError: if the text is not a JSON object, the
            ``attributes`` section is missing or either section is not an object.
    """
    payload = decode_json_object(raw)

    metadata = payload.get("metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ExtractionDecodeError("'metadata' must be an object or null")

    if "attributes" not in payload:
        raise ExtractionDecodeError("Missing required top-level field: attributes")
    attributes = payload["attributes"]
    if not isinstance(attributes, dict):
        raise ExtractionDecodeError("'attributes' must be an object")

    return ParsedResponse(
        metadata=dict(metadata),
        attributes={str(key): _build_raw_attribute(entry) for key, entry in attributes.items()},
    )


def parse_ocr_response(raw: str) -> OcrHint:
    """Decode the OCR pre-pass response into an allow-listed hint.

    The fabric line is copied verbatim by the model and split here into the
    yarn and fabric fields.

    Raises:
        ExtractionDecodeError: if the text is not a JSON object or has no
            ``ocr`` object.
    """
    payload = decode_json_object(raw)
    ocr = payload.get("ocr")
    if not isinstance(ocr, dict):
        raise ExtractionDecodeError("OCR response must contain an 'ocr' object")

    fields: dict[str, object] = dict(ocr)
    fab_line = ocr.get("fab_line")
    if isinstance(fab_line, str) and fab_line.strip():
        for key, value in split_fab_line(fab_line).items():
            if not fields.get(key):
                fields[key] = value
    return OcrHint.from_raw(fields)


def split_fab_line(line: str) -> dict[str, str]:
    """Split a tag's FAB line into yarn_01 / yarn_02 / fabric_main_mvgr.

    - a trailing bracketed token means only the first token is kept as yarn_01
    - 1 part: yarn_01
    - 2 parts: yarn_01, fabric_main_mvgr
    - 3 or more parts: yarn_01, yarn_02, and the last part as fabric_main_mvgr
    - any IMP/IMPORTED token makes yarn_01 "IMP"
    """
    text = line.strip()
    text = re.sub(r"^(fab(ric)?)\s*[:\-]?\s*", "", text, flags=re.IGNORECASE)
    has_bracket = bool(_TRAILING_BRACKET.search(text))
    text = _TRAILING_BRACKET.sub("", text)
    parts = [p for p in _FAB_SEPARATORS.split(text) if p]
    if not parts:
        return {}

    if any(p.lower() in _IMPORTED_TOKENS for p in parts):
        return {"yarn_01": "IMP"}
    if has_bracket or len(parts) == 1:
        return {"yarn_01": parts[0]}
    if len(parts) == 2:
        return {"yarn_01": parts[0], "fabric_main_mvgr": parts[1]}
    return {"yarn_01": parts[0], "yarn_02": parts[1], "fabric_main_mvgr": parts[-1]}


def _build_raw_attribute(entry: Any) -> RawAttribute | None:
    if entry is None:
        return None
    if isinstance(entry, str):
        return RawAttribute(raw_value=entry)
    if not isinstance(entry, Mapping):
        return None

    raw_value: str | None = None
    for field_name in _VALUE_FIELDS:
        candidate = entry.get(field_name)
        if isinstance(candidate, bool):
            continue
        if isinstance(candidate, (int, float)):
            candidate = str(candidate)
        if isinstance(candidate, str):
            raw_value = candidate
            break

    confidence: int | None = None
    for field_name in _CONFIDENCE_FIELDS:
        confidence = _coerce_confidence(entry.get(field_name))
        if confidence is not None:
            break

    reasoning = entry.get("reasoning")
    return RawAttribute(
        raw_value=raw_value,
        confidence=confidence,
        reasoning=reasoning if isinstance(reasoning, str) else "",
    )


def _coerce_confidence(raw: Any) -> int | None:
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, str):
        match = _CONFIDENCE_PATTERN.match(raw)
        if match is None:
            return None
        raw = float(match.group(1))
    if not isinstance(raw, (int, float)) or not math.isfinite(raw):
        return None
    return max(0, min(100, round(raw)))
