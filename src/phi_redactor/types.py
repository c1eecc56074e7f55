"""Core types."""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    """PHI categories.  The value doubles as the placeholder label."""
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    DATE = "DATE"
    REL_DATE = "REL_DATE"
    MRN = "MRN"
    SSN = "SSN"
    ZIP = "ZIP"
    ADDRESS = "ADDRESS"
    FACILITY = "FACILITY"
    COORD = "COORD"
    URL = "URL"
    PERSON = "PERSON"
    # Safe Harbor only
    INSURANCE = "INSURANCE"
    LICENSE = "LICENSE"
    VEHICLE = "VEHICLE"
    DEVICE = "DEVICE"
    IP = "IP"

    @property
    def placeholder(self) -> str:
        return PLACEHOLDERS[self]


PLACEHOLDERS: dict[Category, str] = {c: f"[{c.value}]" for c in Category}

SAFE_HARBOR_CATEGORIES: frozenset[Category] = frozenset({
    Category.INSURANCE,
    Category.LICENSE,
    Category.VEHICLE,
    Category.DEVICE,
    Category.IP,
})

# Tie-break weight when two candidates start at the same offset with the
# same length.  Structured/numeric > heuristic-specific > generic.
PRIORITY: dict[Category, int] = {
    Category.EMAIL: 100,
    Category.URL: 95,
    Category.IP: 92,
    Category.SSN: 90,
    Category.COORD: 88,
    Category.INSURANCE: 87,
    Category.LICENSE: 86,
    Category.DEVICE: 85,
    Category.VEHICLE: 84,
    Category.PHONE: 83,
    Category.MRN: 80,
    Category.DATE: 75,
    Category.ZIP: 70,
    Category.REL_DATE: 60,
    Category.PERSON: 50,
    Category.FACILITY: 45,
    Category.ADDRESS: 40,
}


@dataclass(frozen=True, slots=True)
class Span:
    """A candidate or resolved match, in normalized-text offsets (half-open)."""
    start: int
    end: int
    category: Category
    priority: int

    def __post_init__(self) -> None:
        if not 0 <= self.start < self.end:
            raise ValueError(f"invalid span bounds: {self.start}-{self.end}")

    @classmethod
    def of(cls, start: int, end: int, category: Category) -> Span:
        """Build a span carrying the category's default priority."""
        return cls(start, end, category, PRIORITY[category])

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(slots=True)
class RedactionResult:
    """Result of redacting a document."""
    redacted_text: str
    counts: Counter = field(default_factory=Counter)   # Category → substitutions

    @property
    def total(self) -> int:
        return sum(self.counts.values())
