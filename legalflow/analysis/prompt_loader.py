from pathlib import Path

from legalflow.analysis.exceptions import AnalysisError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

PROMPT_NAMES = (
    "analyze_document",
    "detect_clauses",
    "risk_score",
    "next_steps",
    "answer_question",
    "translate",
)


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load one analysis prompt template.

    Args:
        name: Template name without extension, e.g. ``"detect_clauses"``.
        prompt_dir: Directory holding ``<name>.txt``.
                    Defaults to the bundled prompts directory.

    Returns:
        The raw template string with ``str.format`` placeholders.

    Raises:
        AnalysisError: if the file cannot be read.
    """
    directory = prompt_dir if prompt_dir is not None else _DEFAULT_PROMPT_DIR
    path = directory / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AnalysisError(f"Failed to load prompt template '{name}': {exc}") from exc


def load_prompt_templates(prompt_dir: Path | None = None) -> dict[str, str]:
    return {name: load_prompt_template(name, prompt_dir) for name in PROMPT_NAMES}
