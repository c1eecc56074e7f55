"""Dictionary provider: built-in name/facility vocabularies merged with config.

Entries are stored case-folded and single-spaced (see ``normalize_key``);
phrase patterns match any run of whitespace where an entry has one space.
Built once per Redactor and never mutated.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

import regex

from .config import RedactorConfig
from .normalizer import normalize_key

SURNAMES = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin", "Lee", "Perez", "Thompson",
    "White", "Harris", "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson", "Walker",
    "Young", "Allen", "King", "Wright", "Scott", "Torres", "Nguyen", "Hill", "Flores",
    "Green", "Adams", "Nelson", "Baker", "Hall", "Rivera", "Campbell", "Mitchell",
    "Carter", "Roberts", "Gomez", "Phillips", "Turner", "Parker", "Evans", "Edwards",
    "Collins", "Stewart", "Morris", "Murphy", "Cook", "Rogers", "Morgan",
    "Patel", "Singh", "Khan", "Ali", "Mohammed", "Mohammad", "Abdullah", "Hussain",
    "Kim", "Park", "Chen", "Wang", "Zhang", "Lin", "Tran", "Ng", "Chaudhry", "Ahmad",
    "Iqbal", "Rahman",
)

FIRST_NAMES = (
    "James", "Mary", "Robert", "Patricia", "John", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
    "Thomas", "Sarah", "Charles", "Karen", "Christopher", "Nancy", "Daniel", "Lisa",
    "Matthew", "Betty", "Anthony", "Margaret", "Mark", "Sandra", "Donald", "Ashley",
    "Steven", "Kimberly", "Paul", "Emily", "Andrew", "Donna", "Joshua", "Michelle",
    "Kenneth", "Dorothy", "Kevin", "Carol", "Brian", "Amanda", "George", "Melissa",
    "Timothy", "Deborah", "Ronald", "Stephanie", "Edward", "Rebecca", "Jason", "Sharon",
    "Jeffrey", "Laura", "Ryan", "Cynthia", "Jacob", "Kathleen", "Gary", "Amy",
    "Nicholas", "Shirley", "Eric", "Angela", "Jonathan", "Helen", "Stephen", "Anna",
    "Larry", "Brenda", "Justin", "Pamela", "Scott", "Nicole", "Brandon", "Samantha",
    "Frank", "Katherine", "Benjamin", "Emma", "Gregory", "Ruth", "Samuel", "Christine",
    "Patrick", "Catherine", "Alexander", "Debra", "Jack", "Rachel", "Dennis", "Carolyn",
    "Jerry", "Janet", "Tyler", "Maria", "Mohammed", "Muhammad", "Ahmed", "Ahmad",
    "Omar", "Hassan", "Hussein", "Abdullah", "Fatima", "Aisha", "Amelia", "Priya",
    "Anjali", "Sofia", "Noor", "Amina", "Li", "Wei", "Min", "Hao", "Jin", "Sang",
    "Hye", "Yuki", "Mei", "Ravi", "Imran", "Farah", "Leila", "Zara",
)

HONORIFICS = (
    "Dr", "Drs", "Prof", "Mr", "Mrs", "Ms", "Mx", "Capt", "Captain", "Lt",
    "Lieutenant", "Sgt", "Sergeant", "Officer", "Judge", "Sir", "Dame", "Madam",
    "Rev", "Reverend", "Father", "Fr", "Sister", "Brother", "Pastor", "Chaplain",
    "Rabbi", "Imam",
)

FACILITY_TERMS = (
    "General Hospital", "Medical Center", "Children's Hospital", "Urgent Care",
    "Cardiology Clinic", "Dialysis Center", "Health System", "Cancer Institute",
    "Family Practice", "Primary Care", "Internal Medicine",
)

# Clinical abbreviations that look like capitalized names.
NAME_STOPLIST = (
    "CKD", "ESBL", "ICU", "BKA", "IDDM", "MRSA", "ASTHMA", "DIALYSIS", "MEROPENEM",
    "SEPSIS", "HYPERTENSION", "DIABETES", "E COLI", "HGB", "HCT", "POC", "IV",
)

# Capitalized words that never form part of a person name.
NON_NAME_WORDS = (
    "Patient", "Pt", "Doctor", "Nurse", "Hospital", "Clinic", "Center", "Medical",
    "Health", "Care", "Street", "Avenue", "Road", "Drive", "Lane", "Boulevard",
    "Court", "Place", "Way", "Suite", "Unit", "Room", "Ward", "Department",
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
    "January", "February", "March", "April", "June", "July", "August", "September",
    "October", "November", "December", "The", "This", "That", "He", "She", "They",
    "His", "Her", "Their", "We", "Our", "I", "And", "Or", "But", "With", "By",
    "From", "To", "In", "On", "At", "For", "Of", "Seen", "Met", "Called", "Per",
    "History", "Plan", "Assessment", "Diagnosis", "Complaint", "Follow", "Discharge",
)


@dataclass(frozen=True)
class Dictionaries:
    """Read-only lookup context shared by every matcher."""
    surnames: frozenset[str]
    first_names: frozenset[str]
    stoplist: frozenset[str]
    non_name_words: frozenset[str]
    honorific_pattern: str
    facility_pattern: str                # built-in terms + user keywords
    user_name_re: regex.Pattern | None

    def is_first_name(self, word: str) -> bool:
        return _fold_word(word) in self.first_names

    def is_surname(self, word: str) -> bool:
        return _fold_word(word) in self.surnames

    def is_non_name(self, word: str) -> bool:
        return _fold_word(word) in self.non_name_words

    def is_stopword(self, candidate: str) -> bool:
        cleaned = "".join(c for c in candidate if c.isalnum() or c == " ")
        return normalize_key(cleaned).casefold() in self.stoplist


def build_dictionaries(config: RedactorConfig) -> Dictionaries:
    """Merge built-in vocabularies with ``config.names`` / ``config.keywords``."""
    user_names = _fold_set(config.names)
    user_keywords = _fold_set(config.keywords)
    facility_terms = _fold_set(FACILITY_TERMS)
    return Dictionaries(
        surnames=_fold_set(SURNAMES),
        first_names=_fold_set(FIRST_NAMES),
        stoplist=_fold_set(NAME_STOPLIST),
        non_name_words=_fold_set(NON_NAME_WORDS),
        honorific_pattern=phrase_alternation(_fold_set(HONORIFICS)),
        facility_pattern=phrase_alternation(facility_terms | user_keywords),
        user_name_re=_compile_phrases(user_names),
    )


def phrase_alternation(entries: Iterable[str]) -> str:
    """Regex alternation of whitespace-flexible, apostrophe-tolerant phrases.

    Longest entries come first so the alternation prefers the longest phrase.
    Matching is case-insensitive via a scoped ``(?i:...)`` group.
    """
    parts = []
    for entry in sorted(set(entries), key=lambda e: (-len(e), e)):
        escaped = regex.escape(entry)
        escaped = escaped.replace(r"\'", "'").replace("'", "['’]")
        escaped = escaped.replace(r"\ ", r"\s+").replace(" ", r"\s+")
        parts.append(escaped)
    if not parts:
        return ""
    return "(?i:" + "|".join(parts) + ")"


def _compile_phrases(entries: frozenset[str]) -> regex.Pattern | None:
    alternation = phrase_alternation(entries)
    if not alternation:
        return None
    return regex.compile(rf"(?<!\w){alternation}(?!\w)")


def _fold_set(values: Iterable[str]) -> frozenset[str]:
    out = set()
    for v in values:
        key = normalize_key(v).casefold()
        if key:
            out.add(key)
    return frozenset(out)


def _fold_word(word: str) -> str:
    w = word.casefold()
    if w.endswith("'s"):
        w = w[:-2]
    return w
