"""Approximate task lookup by name."""
from __future__ import annotations
from difflib import SequenceMatcher
from typing import Iterable, Optional

from tnt.models import Task


def _in_order(pattern: str, text: str) -> bool:
    it = iter(text)
    return all(ch in it for ch in pattern)


def fuzzy_score(text: str, pattern: str) -> float:
    """Similarity of text to pattern; 0.0 means no match.

    The pattern's characters must appear in text in order. Matching is
    case-insensitive unless the pattern contains an upper-case letter.
    """
    if not pattern or not text:
        return 0.0
    if pattern == pattern.lower():
        text = text.lower()
    if not _in_order(pattern, text):
        return 0.0
    return 1.0 + SequenceMatcher(None, pattern, text).ratio()


def find_matching_task(pattern: str, tasks: Iterable[Task]) -> Optional[Task]:
    """Best-scoring task for pattern; the earliest task wins a tie."""
    best: Optional[Task] = None
    best_score = 0.0
    for task in tasks:
        score = fuzzy_score(task.value, pattern)
        if score > best_score:
            best, best_score = task, score
    return best
