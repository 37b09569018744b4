class VocabularyError(Exception):
    """Raised when taxonomy records cannot be turned into attribute definitions."""
