"""Category matchers: one pure function per PHI category.

Every matcher has the same contract::

    matcher(text, dictionaries, config) -> list[Span]

``text`` is normalized text (see ``normalizer``).  Matchers share no state and
may run in any order or in parallel.  They never raise on a ``str`` input;
no match is an empty list.  Overlaps, both within and across categories,
are left for the resolver.
"""

from __future__ import annotations
import logging
from functools import lru_cache
from typing import Callable

import regex

from .config import RedactorConfig
from .dictionaries import Dictionaries
from .types import Category, SAFE_HARBOR_CATEGORIES, Span

logger = logging.getLogger(__name__)

# Patterns built from per-Redactor dictionaries are compiled once per distinct source.
_compile = lru_cache(maxsize=64)(regex.compile)

Matcher = Callable[[str, Dictionaries, RedactorConfig], list[Span]]

# Capitalized word: "Harmon", "O'Connor", "John's", "Smith-Jones", "NGUYEN"
_CAP = r"\p{Lu}[\p{L}\p{M}'\-]*[\p{L}\p{M}]"

# --- Structured ---

_EMAIL_RE = regex.compile(r"(?<![\w.%+\-])[\w.%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")

_URL_RE = regex.compile(r"(?i)\b(?:https?://|ftp://|www\.)[^\s<>\"'\[\]]+")
_URL_TRAILING = ".,;:!?)'\""

_PHONE_RE = regex.compile(
    r"""
    (?<![\w+.])
    (?:\+?1[-.\s]?)?
    (?:\(\d{3}\)|\d{3})[-.\s]?
    \d{3}[-.\s]?\d{4}
    (?:\s*(?i:x|ext\.?|extension)\s*\d{1,6})?
    (?!\w)
    """,
    regex.VERBOSE,
)

_SSN_RE = regex.compile(r"(?<![\w-])(?:\d{3}-\d{2}-\d{4}|(?i:xxx)-(?i:xx)-\d{4})(?![\w-])")
_SSN_LABELED_RE = regex.compile(
    r"(?i:\b(?:SSN|Social\s+Security(?:\s+(?:Number|No\.?|\#))?))\s*[:\#]?\s*(?P<value>\d{9})(?!\w)"
)

_ZIP_RE = regex.compile(r"(?<![\w.,-])\d{5}(?:-\d{4})?(?![\w-]|[.,]\d)")

_DIGITS_RE = regex.compile(r"(?<![\w.,-])\d+(?![\w]|[.,]\d)")
_MRN_LABELED_RE = regex.compile(
    r"""
    (?i:\b(?:MRN|Acct|Account|Patient\s*ID|Chart|Medical\s+Record(?:\s+(?:Number|No\.?|\#))?))
    \s*[:\#]?\s*-?\s*
    (?P<value>[A-Za-z0-9][A-Za-z0-9-]*[A-Za-z0-9])\b
    """,
    regex.VERBOSE,
)

_COORD_RE = regex.compile(
    r"""
    (?<![\w.])
    -?\d{1,3}\.\d+\s*°?\s*[NSns]\b[,\s]*
    -?\d{1,3}\.\d+\s*°?\s*[EWew]\b
    """,
    regex.VERBOSE,
)
_COORD_LABELED_RE = regex.compile(
    r"(?i:\b(?:lat(?:itude)?(?:\s*/\s*long?(?:itude)?)?|coords?|coordinates|gps))\s*[:=]?\s*"
    r"(?P<value>-?\d{1,3}\.\d{3,}\s*,\s*-?\d{1,3}\.\d{3,})(?![\d.])"
)

# --- Dates ---

_MONTH = (
    r"(?i:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?"
)
_DATE_RE = regex.compile(
    rf"""
    (?<![\w/.-])
    (?:
        \d{{1,2}}[/.-]\d{{1,2}}[/.-](?:\d{{4}}|\d{{2}})
      | \d{{4}}-\d{{1,2}}-\d{{1,2}}
      | \d{{4}}/\d{{1,2}}/\d{{1,2}}
      | {_MONTH}\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}
      | \d{{1,2}}(?:st|nd|rd|th)?\s+(?:of\s+)?{_MONTH},?\s+\d{{4}}
      | {_MONTH}\s+\d{{4}}
    )
    (?![\w/-]|\.\d)
    """,
    regex.VERBOSE,
)

_WEEKDAY = r"(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)"
_NUMBER_WORD = r"(?:\d+|a|an|one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|a\s+few|few|several|couple\s+of|a\s+couple\s+of)"
_UNIT = r"(?:days?|weeks?|months?|years?|hours?|hrs?)"
_REL_DATE_RE = regex.compile(
    rf"""
    \b(?:
        (?:the\s+day\s+(?:before|after)\s+)?yesterday
      | (?:the\s+day\s+after\s+)?tomorrow
      | (?:last|next|past)\s+(?:night|week(?:end)?|month|year|{_WEEKDAY})
      | {_NUMBER_WORD}\s+{_UNIT}\s+(?:ago|prior|earlier|later|from\s+now)
      | in\s+{_NUMBER_WORD}\s+{_UNIT}
      | this\s+(?:morning|afternoon|evening|week|month)
    )\b
    """,
    regex.VERBOSE | regex.IGNORECASE,
)

# --- Places ---

_STREET_TYPE = (
    r"(?:St\.?|Street|Ave\.?|Avenue|Rd\.?|Road|Dr\.?|Drive|Blvd\.?|Boulevard|Ln\.?|Lane|"
    r"Ct\.?|Court|Pl\.?|Place|Ter\.?|Terrace|Way|Pkwy\.?|Parkway|Hwy\.?|Highway|Cir\.?|Circle)"
)
_ADDRESS_RE = regex.compile(
    rf"""
    (?<![\w.])\d{{1,6}}\s+
    (?:[\p{{Lu}}\d][\w.'-]*\s+){{1,5}}?
    (?i:{_STREET_TYPE})(?!\w)
    (?:,?\s*(?i:Apt\.?|Apartment|Unit|Suite|Ste\.?|\#)\s*[\w-]+)?
    """,
    regex.VERBOSE,
)
_PO_BOX_RE = regex.compile(r"(?i)\bP\.?\s*O\.?\s*Box\s+\d+\b")

_FACILITY_PREFIX = r"(?i:St\.|Saint|Mt\.|Mount|Univ\.|University\s+of)"
_FACILITY_PREFIX_SUFFIXED = r"(?i:Memorial|Children's|General|County|Community|Regional|Mercy)"
_FACILITY_SUFFIX = r"(?i:Hospital|Med(?:ical)?\s*Center|Clinic|Health(?:care)?|Infirmary|Hospice)"
_FACILITY_NAMED_RE = regex.compile(
    rf"(?<!\w){_FACILITY_PREFIX}\s+{_CAP}(?:\s+{_CAP}){{0,4}}(?:\s+{_FACILITY_SUFFIX})?(?!\w)"
)
_FACILITY_SUFFIXED_RE = regex.compile(
    rf"(?<!\w)(?:{_CAP}\s+){{0,3}}{_FACILITY_PREFIX_SUFFIXED}\s+(?:{_CAP}\s+){{0,3}}{_FACILITY_SUFFIX}(?!\w)"
)

# --- Safe Harbor ---

_LABEL_VALUE = r"\s*[:\#]?\s*(?P<value>[A-Za-z0-9][A-Za-z0-9-]{3,}[A-Za-z0-9])(?!\w)"
_INSURANCE_RE = regex.compile(
    r"(?i:\b(?:member|policy|insurance|subscriber|group|plan|medicaid|medicare|beneficiary|"
    r"health\s+plan)(?:\s+(?:id|no\.?|number|\#))?)" + _LABEL_VALUE
)
_LICENSE_RE = regex.compile(
    r"(?i:\b(?:driver'?s?\s+licen[sc]e|licen[sc]e|DL|DLN|DEA|NPI|lic\.?)(?:\s+(?:id|no\.?|number|\#))?)"
    + _LABEL_VALUE
)
_DEVICE_RE = regex.compile(
    r"(?i:\b(?:serial(?:\s+(?:number|no\.?|\#))?|S/N|SN|UDI|device\s+(?:id|serial)|"
    r"(?:pacemaker|implant|pump)\s+(?:id|serial)))" + _LABEL_VALUE
)
_VIN_RE = regex.compile(
    r"(?i)\b(?=[A-HJ-NPR-Z0-9]{0,16}\d)(?=[A-HJ-NPR-Z0-9]{0,16}[A-HJ-NPR-Z])[A-HJ-NPR-Z0-9]{17}\b"
)
_IPV4_RE = regex.compile(
    r"(?<![\w.])(?:(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)\.){3}(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)(?![\w]|\.\d)"
)
_IPV6_RE = regex.compile(r"(?<![\w:])(?:[0-9A-Fa-f]{1,4}:){7}[0-9A-Fa-f]{1,4}(?![\w:])")


def _spans(pattern: regex.Pattern, text: str, category: Category, group: int | str = 0) -> list[Span]:
    # Every start position: a candidate the resolver drops must not hide the next one.
    return [
        Span.of(m.start(group), m.end(group), category)
        for m in pattern.finditer(text, overlapped=True)
    ]


def _has_digit(value: str) -> bool:
    return any(c.isdigit() for c in value)


# ----------------------------------------------------------------------
# Structured categories
# ----------------------------------------------------------------------

def match_email(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    return _spans(_EMAIL_RE, text, Category.EMAIL)


def match_url(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    spans = []
    for m in _URL_RE.finditer(text, overlapped=True):
        end = m.end()
        while end > m.start() and text[end - 1] in _URL_TRAILING:
            end -= 1
        if end - m.start() > len("www."):
            spans.append(Span.of(m.start(), end, Category.URL))
    return spans


def match_phone(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    return _spans(_PHONE_RE, text, Category.PHONE)


def match_ssn(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    return _spans(_SSN_RE, text, Category.SSN) + _spans(_SSN_LABELED_RE, text, Category.SSN, "value")


def match_zip(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    return _spans(_ZIP_RE, text, Category.ZIP)


def match_mrn(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    """Bare digit runs and labeled identifiers within the configured length bounds."""
    lo, hi = config.mrn_min_length, config.mrn_max_length
    spans = [
        Span.of(m.start(), m.end(), Category.MRN)
        for m in _DIGITS_RE.finditer(text, overlapped=True)
        if lo <= len(m.group()) <= hi
    ]
    for m in _MRN_LABELED_RE.finditer(text, overlapped=True):
        value = m.group("value")
        if _has_digit(value) and lo <= len(value.replace("-", "")) <= hi:
            spans.append(Span.of(m.start("value"), m.end("value"), Category.MRN))
    return spans


def match_coord(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    return _spans(_COORD_RE, text, Category.COORD) + _spans(_COORD_LABELED_RE, text, Category.COORD, "value")


def match_date(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    return _spans(_DATE_RE, text, Category.DATE)


def match_rel_date(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    """Relative-date phrases not already covered by an absolute date."""
    dates = match_date(text, dictionaries, config)
    return [
        s for s in _spans(_REL_DATE_RE, text, Category.REL_DATE)
        if not any(d.start < s.end and s.start < d.end for d in dates)
    ]


# ----------------------------------------------------------------------
# Places
# ----------------------------------------------------------------------

def match_address(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    return _spans(_ADDRESS_RE, text, Category.ADDRESS) + _spans(_PO_BOX_RE, text, Category.ADDRESS)


def match_facility(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    """Saint/Mount/University names, suffixed institution names and dictionary terms.

    Dictionary terms (built-in and ``config.keywords``) extend leftwards over
    up to three capitalized words: "Springfield General Hospital".
    """
    spans = _spans(_FACILITY_NAMED_RE, text, Category.FACILITY)
    spans += _spans(_FACILITY_SUFFIXED_RE, text, Category.FACILITY)
    if dictionaries.facility_pattern:
        term_re = _compile(
            rf"(?<!\w)(?:{_CAP}\s+){{0,3}}{dictionaries.facility_pattern}(?!\w)"
        )
        spans += _spans(term_re, text, Category.FACILITY)
    return spans


# ----------------------------------------------------------------------
# Person names
# ----------------------------------------------------------------------

_PAIR_RE = regex.compile(
    rf"(?<![\p{{L}}\p{{M}}'\-])(?P<first>{_CAP})\s+(?P<last>{_CAP})(?:\s+(?P<third>{_CAP}))?(?![\p{{L}}\p{{M}}])"
)


def match_person(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    """Honorific + capitalized name, first/last pairs, and configured names."""
    spans = []

    # (a) "Dr. Harmon", "Rev. O'Connor", "Sister Mary Clare"
    titled_re = _compile(
        rf"(?<!\w){dictionaries.honorific_pattern}\b\.?\s+(?P<first>{_CAP})(?:\s+(?P<last>{_CAP}))?(?![\p{{L}}\p{{M}}])"
    )
    for m in titled_re.finditer(text, overlapped=True):
        if dictionaries.is_non_name(m.group("first")) or dictionaries.is_stopword(m.group("first")):
            continue
        end = m.end("first")
        if m.group("last") and not dictionaries.is_non_name(m.group("last")):
            end = m.end("last")
        spans.append(Span.of(m.start(), end, Category.PERSON))

    # (b) known first name + capitalized word, or capitalized word + known surname
    for m in _PAIR_RE.finditer(text, overlapped=True):
        first, last, third = m.group("first"), m.group("last"), m.group("third")
        if dictionaries.is_non_name(first) or dictionaries.is_non_name(last):
            continue
        if dictionaries.is_stopword(f"{first} {last}") or dictionaries.is_stopword(first) \
                or dictionaries.is_stopword(last):
            continue
        if dictionaries.is_first_name(first) or dictionaries.is_surname(last):
            end = m.end("last")
            if third and not dictionaries.is_non_name(third) and not dictionaries.is_stopword(third):
                end = m.end("third")
            spans.append(Span.of(m.start(), end, Category.PERSON))

    # (c) configured names, case-insensitive and whitespace-flexible
    if dictionaries.user_name_re is not None:
        spans += _spans(dictionaries.user_name_re, text, Category.PERSON)

    return spans


# ----------------------------------------------------------------------
# Safe Harbor identifiers
# ----------------------------------------------------------------------

def _labeled(pattern: regex.Pattern, text: str, category: Category) -> list[Span]:
    return [
        Span.of(m.start("value"), m.end("value"), category)
        for m in pattern.finditer(text, overlapped=True)
        if _has_digit(m.group("value"))
    ]


def match_insurance(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    if not config.safe_harbor:
        return []
    return _labeled(_INSURANCE_RE, text, Category.INSURANCE)


def match_license(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    if not config.safe_harbor:
        return []
    return _labeled(_LICENSE_RE, text, Category.LICENSE)


def match_vehicle(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    if not config.safe_harbor:
        return []
    return _spans(_VIN_RE, text, Category.VEHICLE)


def match_device(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    if not config.safe_harbor:
        return []
    return _labeled(_DEVICE_RE, text, Category.DEVICE)


def match_ip(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    if not config.safe_harbor:
        return []
    return _spans(_IPV4_RE, text, Category.IP) + _spans(_IPV6_RE, text, Category.IP)


MATCHERS: dict[Category, Matcher] = {
    Category.EMAIL: match_email,
    Category.PHONE: match_phone,
    Category.DATE: match_date,
    Category.REL_DATE: match_rel_date,
    Category.MRN: match_mrn,
    Category.SSN: match_ssn,
    Category.ZIP: match_zip,
    Category.ADDRESS: match_address,
    Category.FACILITY: match_facility,
    Category.COORD: match_coord,
    Category.URL: match_url,
    Category.PERSON: match_person,
    Category.INSURANCE: match_insurance,
    Category.LICENSE: match_license,
    Category.VEHICLE: match_vehicle,
    Category.DEVICE: match_device,
    Category.IP: match_ip,
}


def active_categories(config: RedactorConfig) -> list[Category]:
    """Categories whose matchers contribute spans under ``config``."""
    return [
        c for c in MATCHERS
        if c not in config.skip and (config.safe_harbor or c not in SAFE_HARBOR_CATEGORIES)
    ]


def scan(text: str, dictionaries: Dictionaries, config: RedactorConfig) -> list[Span]:
    """Run every active matcher sequentially and return the union of candidates."""
    candidates: list[Span] = []
    for category in active_categories(config):
        found = MATCHERS[category](text, dictionaries, config)
        logger.debug("%s: %d candidate(s)", category.value, len(found))
        candidates.extend(found)
    return candidates
