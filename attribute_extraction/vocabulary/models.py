from dataclasses import dataclass
from enum import Enum


class ValueType(str, Enum):
    """How an attribute's values are constrained."""

    FREE_TEXT = "free_text"
    CONTROLLED = "controlled"


@dataclass(frozen=True)
class AllowedValue:
    """One entry of a controlled vocabulary."""

    short_form: str
    full_form: str

    def render(self) -> str:
        if self.full_form and self.full_form != self.short_form:
            return f"{self.short_form} ({self.full_form})"
        return self.short_form


@dataclass(frozen=True)
class AttributeDefinition:
    """A single attribute of the administrator-defined schema."""

    key: str
    label: str
    value_type: ValueType = ValueType.FREE_TEXT
    allowed_values: tuple[AllowedValue, ...] = ()
    confidence_threshold: int | None = None

    @property
    def is_controlled(self) -> bool:
        return self.value_type is ValueType.CONTROLLED

    def find_allowed(self, short_form: str) -> AllowedValue | None:
        for allowed in self.allowed_values:
            if allowed.short_form == short_form:
                return allowed
        return None
