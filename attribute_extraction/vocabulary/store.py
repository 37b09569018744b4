from collections.abc import Iterable, Iterator

from attribute_extraction.vocabulary.exceptions import VocabularyError
from attribute_extraction.vocabulary.models import AttributeDefinition


class VocabularyStore:
    """Immutable, ordered view of the attribute schema for one extraction."""

    def __init__(self, definitions: Iterable[AttributeDefinition]) -> None:
        self._definitions = tuple(definitions)
        self._by_key: dict[str, AttributeDefinition] = {}
        for definition in self._definitions:
            if definition.key in self._by_key:
                raise VocabularyError(f"Duplicate attribute key: {definition.key}")
            self._by_key[definition.key] = definition

    @property
    def definitions(self) -> tuple[AttributeDefinition, ...]:
        return self._definitions

    def keys(self) -> tuple[str, ...]:
        return tuple(d.key for d in self._definitions)

    def get(self, key: str) -> AttributeDefinition | None:
        return self._by_key.get(key)

    def threshold_for(self, key: str, default: int) -> int:
        """Return the attribute's own threshold, or ``default`` when it has none."""
        definition = self._by_key.get(key)
        if definition is None or definition.confidence_threshold is None:
            return default
        return definition.confidence_threshold

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[AttributeDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)
