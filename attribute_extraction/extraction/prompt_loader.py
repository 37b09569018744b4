from pathlib import Path

from attribute_extraction.extraction.exceptions import ExtractionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

OCR_PROMPT = "ocr_prompt.txt"
MAIN_PROMPT = "main_prompt.txt"


def load_prompt_template(name: str = MAIN_PROMPT, path: Path | None = None) -> str:
    """Load a prompt template from a file.

    Args:
        name: File name of a bundled template under ``prompts/``.
        path: Explicit path to a template file. Takes precedence over ``name``.

    Returns:
        The raw template string with placeholders.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load prompt template: {exc}") from exc
