"""Tests for the category matchers."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from dataclasses import fields

from phi_redactor import Category, RedactorConfig
from phi_redactor.dictionaries import Dictionaries, build_dictionaries
from phi_redactor.patterns import MATCHERS, active_categories, match_date, match_phone, scan
from phi_redactor.types import SAFE_HARBOR_CATEGORIES


DEFAULT = RedactorConfig()
SAFE_HARBOR = RedactorConfig(safe_harbor=True)


def found(category, text, config=DEFAULT):
    """Outermost matched substrings for one category, in start order.

    Matchers report a candidate at every start position; candidates nested
    inside a longer one of the same category are left out here.
    """
    bounds = {(s.start, s.end) for s in MATCHERS[category](text, build_dictionaries(config), config)}
    outer = [
        (a, b) for a, b in bounds
        if not any(c <= a and b <= d and (c, d) != (a, b) for c, d in bounds)
    ]
    return [text[a:b] for a, b in sorted(outer)]


# ── Structured ──────────────────────────────────────────────────────

def test_email():
    assert found(Category.EMAIL, "Contact alice@example.com please") == ["alice@example.com"]
    assert found(Category.EMAIL, "Sentence ends with bob@x.org.") == ["bob@x.org"]


def test_url():
    assert found(Category.URL, "See https://portal.example.org/a?b=1, then") == [
        "https://portal.example.org/a?b=1"
    ]
    assert found(Category.URL, "visit www.example.com.") == ["www.example.com"]
    assert found(Category.URL, "just www. alone") == []


def test_phone_formats():
    assert found(Category.PHONE, "Call me at +1 234-567-8910") == ["+1 234-567-8910"]
    assert found(Category.PHONE, "(555) 867-5309 x123 today") == ["(555) 867-5309 x123"]
    assert found(Category.PHONE, "fax 555.867.5309") == ["555.867.5309"]
    assert found(Category.PHONE, "run 12345678901234") == []


def test_phone_never_starts_inside_a_decimal():
    assert found(Category.PHONE, "Room 4.1 555-123-4567") == ["555-123-4567"]
    assert found(Category.PHONE, "from 10.0.0.1 555-123-4567") == ["555-123-4567"]


def test_ssn():
    assert found(Category.SSN, "SSN: 123-45-6789") == ["123-45-6789"]
    assert found(Category.SSN, "masked xxx-xx-1234") == ["xxx-xx-1234"]
    assert found(Category.SSN, "Social Security Number 123456789") == ["123456789"]


def test_zip():
    assert found(Category.ZIP, "Springfield, IL 62704-1234.") == ["62704-1234"]
    assert found(Category.ZIP, "value 3.14159 units") == []


def test_mrn_default_bounds():
    assert found(Category.MRN, "id 12345 and 1234567") == ["1234567"]
    assert found(Category.MRN, "MRN: A1234567") == ["A1234567"]
    assert found(Category.MRN, "Chart reviewed today") == []


def test_mrn_configured_bounds():
    config = RedactorConfig(mrn_min_length=5, mrn_max_length=12)
    assert found(Category.MRN, "code 1234", config) == []
    assert found(Category.MRN, "code 123456", config) == ["123456"]
    assert found(Category.MRN, "code 1234567890123", config) == []


def test_coordinates():
    assert found(Category.COORD, "at 41.8781° N, 87.6298° W") == ["41.8781° N, 87.6298° W"]
    assert found(Category.COORD, "GPS: 41.878, -87.629 logged") == ["41.878, -87.629"]


# ── Dates ───────────────────────────────────────────────────────────

def test_numeric_and_month_dates():
    text = "Seen 04/02/2024, 2024-04-02, March 3, 2024, 3 March 2024 and Jan 2023."
    assert found(Category.DATE, text) == [
        "04/02/2024", "2024-04-02", "March 3, 2024", "3 March 2024", "Jan 2023",
    ]


def test_date_ignores_fractions_and_ssn():
    assert found(Category.DATE, "take 1/2 tab, SSN 123-45-6789") == []


def test_relative_dates():
    text = "Started 3 days ago, worse yesterday, better last Tuesday, recheck in two weeks."
    assert found(Category.REL_DATE, text) == [
        "3 days ago", "yesterday", "last Tuesday", "in two weeks",
    ]


def test_relative_date_this_phrases():
    text = "Seen this morning, again this evening; labs due this week."
    assert found(Category.REL_DATE, text) == ["this morning", "this evening", "this week"]
    assert found(Category.REL_DATE, "this patient") == []


def test_relative_date_not_matched_inside_date():
    assert found(Category.REL_DATE, "last seen March 3, 2024") == []
    assert found(Category.REL_DATE, "seen today") == []


# ── Places ──────────────────────────────────────────────────────────

def test_address():
    assert found(Category.ADDRESS, "Lives at 742 Evergreen Terrace Apt 4 now") == [
        "742 Evergreen Terrace Apt 4"
    ]
    assert found(Category.ADDRESS, "Mail to P.O. Box 123") == ["P.O. Box 123"]
    assert found(Category.ADDRESS, "2 visits with Dr Smith") == []


def test_address_never_starts_inside_a_decimal():
    text = "GPS 41.8781 N, 87.6298 E 128 Elmwood Drive"
    assert found(Category.ADDRESS, text) == ["128 Elmwood Drive"]


def test_facility_named_and_dictionary():
    named = found(Category.FACILITY, "from St. John's Medical Center.")
    assert named[0] == "St. John's Medical Center"
    assert "Springfield General Hospital" in found(
        Category.FACILITY, "at Springfield General Hospital today"
    )


def test_facility_user_keyword_whitespace_flexible():
    config = RedactorConfig(keywords=("Grey Sloan Memorial",))
    assert found(Category.FACILITY, "taken to grey sloan \n memorial today", config) == [
        "grey sloan \n memorial"
    ]


# ── Person ──────────────────────────────────────────────────────────

def test_person_honorific():
    assert found(Category.PERSON, "Dr. Harmon visited") == ["Dr. Harmon"]
    assert "Sister Mary Clare" in found(Category.PERSON, "Seen by Sister Mary Clare")


def test_person_first_last_pairs():
    assert "David Harmon" in found(Category.PERSON, "David Harmon discussed the plan.")
    assert "Alex Nguyen" in found(Category.PERSON, "Spoke with Alex Nguyen.")


def test_person_rejects_non_names():
    assert found(Category.PERSON, "Patient Jones arrived") == []
    assert found(Category.PERSON, "Visited 128 Elmwood Drive") == []
    assert found(Category.PERSON, "Cultures grew MRSA Sepsis") == []


def test_person_configured_names():
    config = RedactorConfig(names=("Meredith Grey",))
    assert found(Category.PERSON, "Seen by MEREDITH   grey today", config) == ["MEREDITH   grey"]


# ── Safe Harbor ─────────────────────────────────────────────────────

def test_safe_harbor_matchers_disabled_by_default():
    text = "Member # 8392-77-551 VIN 1HGCM82633A004352 from 192.168.1.100"
    for category in SAFE_HARBOR_CATEGORIES:
        assert found(category, text) == []


def test_insurance():
    assert found(Category.INSURANCE, "Member # 8392-77-551 with", SAFE_HARBOR) == ["8392-77-551"]
    assert found(Category.INSURANCE, "Policy ID: ZX-99812.", SAFE_HARBOR) == ["ZX-99812"]
    assert found(Category.INSURANCE, "member since forever", SAFE_HARBOR) == []


def test_license():
    assert found(Category.LICENSE, "DL: D1234567", SAFE_HARBOR) == ["D1234567"]
    assert found(Category.LICENSE, "DEA # AB1234563", SAFE_HARBOR) == ["AB1234563"]


def test_vehicle():
    assert found(Category.VEHICLE, "VIN 1HGCM82633A004352", SAFE_HARBOR) == ["1HGCM82633A004352"]
    # I, O and Q never appear in a VIN
    assert found(Category.VEHICLE, "VIN 1HGCM82633A00435O", SAFE_HARBOR) == []
    assert found(Category.VEHICLE, "VIN 1HGCM82633A0043521", SAFE_HARBOR) == []


def test_device():
    assert found(Category.DEVICE, "Pacemaker serial: PM-44821X", SAFE_HARBOR) == ["PM-44821X"]
    assert found(Category.DEVICE, "S/N 99A8812", SAFE_HARBOR) == ["99A8812"]


def test_ip():
    assert found(Category.IP, "from 192.168.1.100 and fe80:0:0:0:202:b3ff:fe1e:8329", SAFE_HARBOR) == [
        "192.168.1.100", "fe80:0:0:0:202:b3ff:fe1e:8329",
    ]
    assert found(Category.IP, "version 300.1.1.1", SAFE_HARBOR) == []


# ── Registry ────────────────────────────────────────────────────────

def test_every_category_has_a_matcher():
    assert set(MATCHERS) == set(Category)


def test_active_categories_honor_skip_and_safe_harbor():
    active = active_categories(RedactorConfig(skip={Category.EMAIL}))
    assert Category.EMAIL not in active
    assert not SAFE_HARBOR_CATEGORIES & set(active)
    assert SAFE_HARBOR_CATEGORIES <= set(active_categories(SAFE_HARBOR))


def test_matchers_never_fail_on_odd_input():
    odd = ["", " ", "\n\n", "[EMAIL]", "@@@", "dot at dot", "ﬁ ＡＢＣ ١٢٣٤٥٦", "Dr.", "x" * 2000]
    dictionaries = build_dictionaries(SAFE_HARBOR)
    for text in odd:
        for matcher in MATCHERS.values():
            assert isinstance(matcher(text, dictionaries, SAFE_HARBOR), list)


def test_candidates_reported_at_every_start():
    # The shorter match must survive in case the resolver drops the longer one
    dictionaries = build_dictionaries(DEFAULT)
    phones = match_phone("+1 234-567-8910", dictionaries, DEFAULT)
    assert {(s.start, s.end) for s in phones} == {(0, 15), (3, 15)}
    dates = match_date("3 March 2024", dictionaries, DEFAULT)
    assert {(s.start, s.end) for s in dates} == {(0, 12), (2, 12)}


def test_dictionaries_hold_only_lookup_state():
    assert {f.name for f in fields(Dictionaries)} == {
        "surnames", "first_names", "stoplist", "non_name_words",
        "honorific_pattern", "facility_pattern", "user_name_re",
    }


def test_scan_unions_candidates():
    text = "Call 5558675309"
    spans = scan(text, build_dictionaries(DEFAULT), DEFAULT)
    assert {s.category for s in spans} == {Category.PHONE, Category.MRN}
