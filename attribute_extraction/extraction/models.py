from collections.abc import Mapping
from dataclasses import dataclass, field

from attribute_extraction.extraction.garment import GarmentClass
from attribute_extraction.vocabulary.models import AttributeDefinition
from attribute_extraction.vocabulary.store import VocabularyStore

# Fields a printed tag or board can carry. OCR hints are only ever used for these.
OCR_HINT_KEYS: tuple[str, ...] = (
    "division",
    "vendor_name",
    "design_number",
    "ppt_number",
    "rate",
    "size",
    "major_category",
    "gsm",
    "yarn_01",
    "yarn_02",
    "fabric_main_mvgr",
    "colour",
)


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported (or estimated) for one model call."""

    prompt_units: int = 0
    completion_units: int = 0

    @property
    def total_units(self) -> int:
        return self.prompt_units + self.completion_units

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_units=self.prompt_units + other.prompt_units,
            completion_units=self.completion_units + other.completion_units,
        )


@dataclass(frozen=True)
class VisionResponse:
    """Raw text returned by the vision model plus its usage."""

    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class ExtractionContext:
    """Everything one extraction request needs. Read-only for the whole pipeline."""

    image: str
    vocabulary: VocabularyStore
    category_label: str = ""
    department_label: str | None = None

    @property
    def schema(self) -> tuple[AttributeDefinition, ...]:
        return self.vocabulary.definitions


@dataclass(frozen=True)
class OcrHint:
    """Tag fields transcribed by the OCR pre-pass, limited to OCR_HINT_KEYS."""

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.values) - set(OCR_HINT_KEYS)
        if unknown:
            raise ValueError(f"OCR hint keys not allowed: {sorted(unknown)}")

    @classmethod
    def from_raw(cls, raw: Mapping[str, object]) -> "OcrHint":
        """Keep allow-listed, non-empty scalar fields; drop everything else."""
        values: dict[str, str] = {}
        for key in OCR_HINT_KEYS:
            value = raw.get(key)
            if isinstance(value, bool) or value is None:
                continue
            if isinstance(value, (int, float)):
                value = str(value)
            if isinstance(value, str) and value.strip():
                values[key] = value.strip()
        return cls(values=values)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def is_empty(self) -> bool:
        return not self.values


@dataclass(frozen=True)
class HintAvailable:
    """The OCR pre-pass produced a decoded hint."""

    hint: OcrHint
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class HintUnavailable:
    """The OCR pre-pass was skipped or failed; the main pass runs without hints."""

    reason: str
    usage: TokenUsage | None = None


OcrOutcome = HintAvailable | HintUnavailable


@dataclass(frozen=True)
class RawAttribute:
    """One entry of the model's attribute block, before validation."""

    raw_value: str | None
    confidence: int | None = None
    reasoning: str = ""


@dataclass(frozen=True)
class ParsedResponse:
    """Decoded main-pass response."""

    metadata: dict[str, object] = field(default_factory=dict)
    attributes: dict[str, RawAttribute | None] = field(default_factory=dict)


@dataclass(frozen=True)
class AttributeValue:
    """A validated attribute value.

    ``normalized_value`` is None for a value the validator rejected; such a
    record only carries the rejection note and never survives into an
    ExtractionResult.
    """

    raw_value: str | None
    normalized_value: str | None
    confidence: int
    reasoning: str = ""

    @property
    def is_absent(self) -> bool:
        return self.normalized_value is None


AttributeMap = dict[str, AttributeValue | None]


def is_absent(value: AttributeValue | None) -> bool:
    return value is None or value.is_absent


@dataclass(frozen=True)
class ExtractionResult:
    """Final attribute map: exactly one entry per schema key."""

    values: Mapping[str, AttributeValue | None]
    overall_confidence: int = 0

    def __getitem__(self, key: str) -> AttributeValue | None:
        return self.values[key]

    def keys(self) -> tuple[str, ...]:
        return tuple(self.values)

    def normalized(self, key: str) -> str | None:
        value = self.values.get(key)
        return value.normalized_value if value is not None else None

    @property
    def extracted_count(self) -> int:
        return sum(1 for v in self.values.values() if v is not None)

    def to_dict(self) -> dict[str, object]:
        return {
            "attributes": {
                key: None if value is None else {
                    "rawValue": value.raw_value,
                    "normalizedValue": value.normalized_value,
                    "confidence": value.confidence,
                    "reasoning": value.reasoning,
                }
                for key, value in self.values.items()
            },
            "overallConfidence": self.overall_confidence,
        }


@dataclass(frozen=True)
class ExtractionOutcome:
    """What the engine hands to the persistence/API layer."""

    result: ExtractionResult
    garment_class: GarmentClass
    main_usage: TokenUsage
    ocr_usage: TokenUsage | None = None
    ocr_hint_available: bool = False

    @property
    def total_usage(self) -> TokenUsage:
        if self.ocr_usage is None:
            return self.main_usage
        return self.main_usage + self.ocr_usage
