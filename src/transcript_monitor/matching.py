"""Selection rules deciding which transcript messages become candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .utils import normalize_words


def contains_any(text: str, terms: Iterable[str], *, case_sensitive: bool = False) -> bool:
    """Return True if ``text`` contains *any* of the provided search terms.

    Empty terms are ignored, so an empty list never matches.
    """

    haystack = text if case_sensitive else text.lower()
    for term in normalize_words(terms):
        needle = term if case_sensitive else term.lower()
        if needle in haystack:
            return True
    return False


@dataclass(slots=True)
class FilterDecision:
    """Result of evaluating a message block."""

    allowed: bool
    reason: str | None = None


class CandidateFilter:
    """Apply the keyword-or-stars rule and the used-message exclusion."""

    def __init__(
        self,
        *,
        min_stars: int,
        matching_words: Iterable[str],
        messages_used: Iterable[int] = (),
    ):
        self._min_stars = min_stars
        self._words = normalize_words(matching_words)
        self._used = set(messages_used)

    def evaluate(self, message_id: int, body: str, stars: int) -> FilterDecision:
        if contains_any(body, self._words):
            reason = "keyword_match"
        elif stars >= self._min_stars:
            reason = "star_threshold"
        else:
            return FilterDecision(False, "no_match")
        if message_id in self._used:
            return FilterDecision(False, "already_used")
        return FilterDecision(True, reason)
