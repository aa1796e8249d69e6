"""
Fuzzy string matching utilities.

Wraps the thefuzz library to suggest the closest name in a target
vocabulary for a name that failed an exact join.  Suggestions are only
reported in the coverage report; they never change join results.
"""

import logging

from thefuzz import fuzz

logger = logging.getLogger(__name__)


def best_match(
    value: str,
    candidates: list[str],
    threshold: int = 80,
) -> tuple[str | None, int]:
    """
    Find the best fuzzy match for *value* among *candidates*.

    Uses token_sort_ratio, which tolerates reordered words
    (e.g. "Beans, dry" vs "Dry beans").  Comparison is case-insensitive.

    Args:
        value: The unmatched name.
        candidates: Names from the target vocabulary.
        threshold: Minimum score (0-100) to accept a match.

    Returns:
        (candidate, score) for the best candidate at or above threshold,
        or (None, 0) if no candidate qualifies.
    """
    if not value or not candidates:
        return None, 0

    value_lower = value.strip().lower()

    best_candidate: str | None = None
    best_score: int = 0

    for candidate in candidates:
        score = fuzz.token_sort_ratio(value_lower, candidate.lower())
        if score > best_score:
            best_score = score
            best_candidate = candidate

    if best_score >= threshold:
        logger.debug(f"Suggested '{best_candidate}' for '{value}' (score={best_score})")
        return best_candidate, best_score

    return None, 0


def suggest_matches(
    values: list[str],
    candidates: list[str],
    threshold: int = 80,
) -> dict[str, str]:
    """
    Suggest a candidate for each value that has one above threshold.

    Returns:
        Dict of value → suggested candidate (values without a suggestion
        are omitted).
    """
    suggestions: dict[str, str] = {}
    for value in values:
        candidate, _ = best_match(value, candidates, threshold)
        if candidate is not None:
            suggestions[value] = candidate
    return suggestions
