"""Tests for span resolution."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from phi_redactor import Category, resolve_spans
from phi_redactor.types import PRIORITY, Span


def cats(spans):
    return [(s.start, s.end, s.category) for s in spans]


def test_empty():
    assert resolve_spans([]) == []


def test_disjoint_spans_sorted():
    spans = [Span.of(10, 15, Category.ZIP), Span.of(0, 5, Category.DATE)]
    assert cats(resolve_spans(spans)) == [(0, 5, Category.DATE), (10, 15, Category.ZIP)]


def test_earliest_start_wins():
    spans = [Span.of(2, 20, Category.FACILITY), Span.of(0, 5, Category.PERSON)]
    assert cats(resolve_spans(spans)) == [(0, 5, Category.PERSON)]


def test_longest_wins_at_same_start():
    spans = [Span.of(0, 10, Category.MRN), Span.of(0, 14, Category.PHONE)]
    assert cats(resolve_spans(spans)) == [(0, 14, Category.PHONE)]


def test_priority_breaks_ties():
    spans = [Span.of(0, 10, Category.MRN), Span.of(0, 10, Category.PHONE)]
    assert cats(resolve_spans(spans)) == [(0, 10, Category.PHONE)]
    spans = [Span.of(0, 5, Category.ZIP), Span.of(0, 5, Category.MRN)]
    assert cats(resolve_spans(spans)) == [(0, 5, Category.MRN)]


def test_explicit_priority_overrides_default():
    spans = [Span(0, 5, Category.ZIP, 999), Span.of(0, 5, Category.MRN)]
    assert cats(resolve_spans(spans)) == [(0, 5, Category.ZIP)]


def test_adjacent_spans_both_kept():
    spans = [Span.of(0, 5, Category.DATE), Span.of(5, 9, Category.ZIP)]
    assert len(resolve_spans(spans)) == 2


def test_skipped_category_does_not_block():
    spans = [Span.of(0, 20, Category.ADDRESS), Span.of(4, 10, Category.PERSON)]
    assert cats(resolve_spans(spans, skip={Category.ADDRESS})) == [(4, 10, Category.PERSON)]
    assert resolve_spans(spans, skip={Category.ADDRESS, Category.PERSON}) == []


def test_order_of_candidates_irrelevant():
    spans = [
        Span.of(0, 10, Category.MRN), Span.of(0, 10, Category.PHONE),
        Span.of(3, 8, Category.ZIP), Span.of(12, 20, Category.DATE),
        Span.of(12, 20, Category.REL_DATE),
    ]
    assert resolve_spans(spans) == resolve_spans(list(reversed(spans)))


def test_result_is_ordered_and_non_overlapping():
    spans = [Span.of(s, s + n, c) for s, n, c in [
        (0, 4, Category.PERSON), (2, 6, Category.DATE), (5, 3, Category.ZIP),
        (7, 10, Category.FACILITY), (9, 2, Category.MRN), (20, 5, Category.EMAIL),
    ]]
    resolved = resolve_spans(spans)
    for a, b in zip(resolved, resolved[1:]):
        assert a.end <= b.start


def test_every_category_has_a_priority():
    assert set(PRIORITY) == set(Category)


def test_span_bounds_validated():
    with pytest.raises(ValueError):
        Span.of(5, 5, Category.DATE)
    with pytest.raises(ValueError):
        Span.of(-1, 3, Category.DATE)
