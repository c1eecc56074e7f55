"""Redactor, the main API.  Normalize, match, resolve, substitute.

Usage:
    from phi_redactor import Redactor, RedactorConfig

    redactor = Redactor(RedactorConfig(names=("Meredith Grey",)))   # reusable
    result = redactor.redact("Seen by Meredith   Grey on 04/02/2024")
    print(result.redacted_text)   # "Seen by [PERSON] on [DATE]"
    print(dict(result.counts))    # {Category.PERSON: 1, Category.DATE: 1}
"""

from __future__ import annotations
import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .config import RedactorConfig
from .dictionaries import Dictionaries, build_dictionaries
from .errors import InputError, ResolutionError
from .normalizer import NormalizedText, normalize
from .patterns import MATCHERS, active_categories, scan
from .resolver import resolve_spans
from .types import Category, RedactionResult, Span

logger = logging.getLogger(__name__)


class Redactor:
    """Deterministic PHI redactor.

    Dictionaries are merged from the built-ins and ``config`` once, here;
    afterwards the instance is read-only and safe to share between threads.
    With ``max_workers > 1`` the category matchers of a single document run
    on a thread pool, joined before resolution.
    """

    def __init__(self, config: RedactorConfig | None = None, *, max_workers: int = 1) -> None:
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ValueError(f"max_workers must be a positive integer, got {max_workers!r}")
        self.config = config or RedactorConfig()
        self.dictionaries: Dictionaries = build_dictionaries(self.config)
        self.max_workers = max_workers

    def redact(self, text: str) -> RedactionResult:
        """Redact PHI from text.

        Returns a RedactionResult with the redacted text and per-category
        counts.  Raises InputError for anything but well-formed Unicode text.
        """
        _check_input(text)
        normalized = normalize(text)
        candidates = self.candidates(normalized.text)
        spans = resolve_spans(candidates, self.config.skip)
        result = apply_spans(normalized, spans, self.config.skip)
        logger.debug(
            "Redacted %d span(s) from %d chars: %s",
            result.total, len(text),
            {c.value: n for c, n in sorted(result.counts.items())},
        )
        return result

    def candidates(self, text: str) -> list[Span]:
        """Run every active matcher over normalized ``text``; overlaps included."""
        if self.max_workers == 1:
            return scan(text, self.dictionaries, self.config)

        categories = active_categories(self.config)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                pool.submit(MATCHERS[c], text, self.dictionaries, self.config)
                for c in categories
            ]
            # Join barrier: resolution needs the complete candidate set
            results = [f.result() for f in futures]
        return [span for found in results for span in found]

    def redact_many(self, texts: Iterable[str]) -> list[RedactionResult]:
        """Redact several independent documents with the same configuration."""
        return [self.redact(t) for t in texts]


def apply_spans(
    normalized: NormalizedText,
    spans: list[Span],
    skip: Iterable[Category] = (),
) -> RedactionResult:
    """Substitute resolved spans into the original text.

    Text outside the spans is copied verbatim from the original; each span
    becomes its category's placeholder.  Spans must be start-ordered,
    non-overlapping and free of skipped categories.
    """
    skip = frozenset(skip)
    original = normalized.original
    parts: list[str] = []
    counts: Counter = Counter()
    cursor = 0
    prev_end = 0

    for span in spans:
        if span.category in skip:
            raise ResolutionError(f"span at {span.start} has skipped category {span.category.value}")
        if span.start < prev_end:
            raise ResolutionError(f"span at {span.start} overlaps or precedes previous span")
        prev_end = span.end

        start, end = normalized.to_original(span.start, span.end)
        # Two normalized spans may share one original character (e.g. a ligature).
        start = max(start, cursor)
        parts.append(original[cursor:start])
        parts.append(span.category.placeholder)
        counts[span.category] += 1
        cursor = max(end, cursor)

    parts.append(original[cursor:])
    return RedactionResult(redacted_text="".join(parts), counts=counts)


def redact(text: str, config: RedactorConfig | None = None) -> RedactionResult:
    """One-shot convenience wrapper around ``Redactor(config).redact(text)``."""
    return Redactor(config).redact(text)


def _check_input(text: object) -> None:
    if not isinstance(text, str):
        raise InputError(f"expected text as str, got {type(text).__name__}")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InputError(f"input contains invalid code point at offset {e.start}") from e
