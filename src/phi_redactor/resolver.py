"""Span resolver: greedy interval scheduling over all matchers' candidates."""

from __future__ import annotations
import logging
from typing import Iterable

from .types import Category, Span

logger = logging.getLogger(__name__)


def resolve_spans(candidates: Iterable[Span], skip: Iterable[Category] = ()) -> list[Span]:
    """Reduce candidates to a start-ordered, non-overlapping sequence.

    Skipped categories are dropped first, so they never block another
    category from claiming the same text.  The rest are ordered by start
    ascending, then length descending, then priority descending (category
    name as the last key keeps the order total), and swept left to right:
    a candidate survives only if it starts at or after the end of the last
    accepted span.
    """
    skip = frozenset(skip)
    kept = [s for s in candidates if s.category not in skip]
    kept.sort(key=lambda s: (s.start, -s.length, -s.priority, s.category.value))

    resolved: list[Span] = []
    end = 0
    for span in kept:
        if span.start >= end:
            resolved.append(span)
            end = span.end
    logger.debug("Resolved %d candidate(s) to %d span(s)", len(kept), len(resolved))
    return resolved
