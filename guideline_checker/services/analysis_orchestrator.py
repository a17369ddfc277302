"""
Analysis orchestrator - validates an app idea submission and runs the
guideline analysis for it.
"""
import logging

from guideline_checker.services.llm_client import analyze_app_idea

logger = logging.getLogger(__name__)

MIN_IDEA_LENGTH = 50
MAX_IDEA_LENGTH = 5000


def validate_app_idea(
    app_idea,
    min_length: int = MIN_IDEA_LENGTH,
    max_length: int = MAX_IDEA_LENGTH
) -> str:
    """
    Check that a submitted app idea is usable for analysis.

    Args:
        app_idea: Raw submitted value.
        min_length: Minimum characters after stripping whitespace.
        max_length: Maximum characters after stripping whitespace.

    Returns:
        The stripped app idea text.

    Raises:
        ValueError: If the idea is not a string, or is too short or too long.
    """
    if not isinstance(app_idea, str):
        raise ValueError("App idea is required.")

    text = app_idea.strip()

    if len(text) < min_length:
        raise ValueError(
            f"App idea should be at least {min_length} characters long "
            f"to provide enough context for analysis."
        )

    if len(text) > max_length:
        raise ValueError(
            f"App idea must be at most {max_length} characters long."
        )

    return text


def run_compliance_check(
    app_idea,
    min_length: int = MIN_IDEA_LENGTH,
    max_length: int = MAX_IDEA_LENGTH
) -> dict:
    """
    Validate an app idea and analyze it against the App Store Review Guidelines.

    Args:
        app_idea: Raw submitted value.
        min_length: Minimum idea length.
        max_length: Maximum idea length.

    Returns:
        Report dictionary with 'violations' and 'isCompliant'.

    Raises:
        ValueError: If the submission fails validation (no model call is made).
        RuntimeError: If the analysis fails for any reason.
    """
    text = validate_app_idea(app_idea, min_length, max_length)

    try:
        report = analyze_app_idea(text)
    except Exception as e:
        logger.exception(f"Failed to analyze app idea: {type(e).__name__} - {e}")
        raise RuntimeError("Failed to analyze app idea") from e

    if not report['isCompliant']:
        logger.info(f"Idea flagged with {len(report['violations'])} potential violations")

    return report
