"""Text normalization with an offset map back to the original text.

Matchers run over the normalized text; the Redactor substitutes in the
original.  Every normalized character remembers the original range
``[start, end)`` it came from, so a normalized span maps back with
``NormalizedText.to_original``.

Stages, in order:

1. NFKC per grapheme cluster (base char + combining marks), then folding of
   curly quotes, primes, dashes and bullets.
2. Runs of horizontal whitespace collapse to one space.  Newlines are kept.
3. Spelled-out email obfuscation (``jane dot doe at example dot com``) is
   rewritten to ``jane.doe@example.com``.

``normalize(normalize(t).text).text == normalize(t).text`` for every input.
"""

from __future__ import annotations
import unicodedata
from dataclasses import dataclass

import regex

_PUNCT_FOLD = str.maketrans({
    "‘": "'", "’": "'", "‛": "'", "′": "'",
    "“": '"', "”": '"', "″": '"',
    "–": "-", "—": "-", "−": "-",
    "•": " ", "·": " ", "‧": " ", "⁃": " ", "・": " ",
})

_HSPACE_RE = regex.compile(r"[^\S\r\n]+")

# Email obfuscation.  A separator is either literal or spelled/bracketed.
_DOT = r"(?:\.|\s*[\[({]\s*(?i:dot)\s*[\])}]\s*|\s+(?i:dot)\s+)"
_AT = r"(?:\s*@\s*|\s*[\[({]\s*(?i:at)\s*[\])}]\s*|\s+(?i:at)\s+)"
_WORD = r"[\w%+\-]+"
_OBFUSCATED_EMAIL_RE = regex.compile(
    rf"""
    (?<![\w.@%+\-])
    {_WORD}(?:{_DOT}{_WORD})*
    {_AT}
    (?:[A-Za-z0-9\-]+{_DOT})+[A-Za-z]{{2,}}
    (?![\w@\-]|{_DOT}[A-Za-z0-9]|{_AT}[A-Za-z0-9])
    """,
    regex.VERBOSE,
)
_SEPARATOR_RE = regex.compile(rf"(?P<at>{_AT})|(?P<dot>{_DOT})")


@dataclass(frozen=True)
class NormalizedText:
    """Normalized text plus the original range behind each character."""
    original: str
    text: str
    starts: tuple[int, ...]
    ends: tuple[int, ...]

    def to_original(self, start: int, end: int) -> tuple[int, int]:
        """Map a normalized half-open span to original offsets."""
        return self.starts[start], self.ends[end - 1]


class _Builder:
    """Accumulates output characters with their source ranges."""

    __slots__ = ("chars", "starts", "ends")

    def __init__(self) -> None:
        self.chars: list[str] = []
        self.starts: list[int] = []
        self.ends: list[int] = []

    def emit(self, s: str, start: int, end: int) -> None:
        for ch in s:
            self.chars.append(ch)
            self.starts.append(start)
            self.ends.append(end)

    def copy(self, text: str, starts, ends, i: int, j: int) -> None:
        self.chars.extend(text[i:j])
        self.starts.extend(starts[i:j])
        self.ends.extend(ends[i:j])

    def result(self) -> tuple[str, list[int], list[int]]:
        return "".join(self.chars), self.starts, self.ends


def normalize(text: str) -> NormalizedText:
    """Normalize ``text`` for matching, keeping the offset map."""
    out, starts, ends = _fold_unicode(text)
    out, starts, ends = _collapse_whitespace(out, starts, ends)
    out, starts, ends = _resolve_email_obfuscation(out, starts, ends)
    return NormalizedText(text, out, tuple(starts), tuple(ends))


def normalize_key(value: str) -> str:
    """Canonical form of a dictionary entry: folded, single-spaced, trimmed."""
    folded, _, _ = _fold_unicode(value)
    return regex.sub(r"\s+", " ", folded).strip()


def _fold_unicode(text: str) -> tuple[str, list[int], list[int]]:
    b = _Builder()
    i = 0
    n = len(text)
    while i < n:
        j = i + 1
        while j < n and unicodedata.combining(text[j]):
            j += 1
        cluster = unicodedata.normalize("NFKC", text[i:j]).translate(_PUNCT_FOLD)
        b.emit(cluster, i, j)
        i = j
    return b.result()


def _collapse_whitespace(text: str, starts, ends) -> tuple[str, list[int], list[int]]:
    b = _Builder()
    cursor = 0
    for m in _HSPACE_RE.finditer(text):
        b.copy(text, starts, ends, cursor, m.start())
        b.emit(" ", starts[m.start()], ends[m.end() - 1])
        cursor = m.end()
    b.copy(text, starts, ends, cursor, len(text))
    return b.result()


def _resolve_email_obfuscation(text: str, starts, ends) -> tuple[str, list[int], list[int]]:
    b = _Builder()
    cursor = 0
    for m in _OBFUSCATED_EMAIL_RE.finditer(text):
        seps = list(_SEPARATOR_RE.finditer(text, m.start(), m.end()))
        if not _is_obfuscated(seps):
            continue
        b.copy(text, starts, ends, cursor, m.start())
        pos = m.start()
        for sep in seps:
            b.copy(text, starts, ends, pos, sep.start())
            b.emit("@" if sep.group("at") else ".", starts[sep.start()], ends[sep.end() - 1])
            pos = sep.end()
        b.copy(text, starts, ends, pos, m.end())
        cursor = m.end()
    b.copy(text, starts, ends, cursor, len(text))
    return b.result()


def _is_obfuscated(seps) -> bool:
    # "john at gmail.com" counts: the pattern already demands a dotted domain
    # with an alphabetic TLD on the right.
    return any(sep.group() not in (".", "@") for sep in seps)
