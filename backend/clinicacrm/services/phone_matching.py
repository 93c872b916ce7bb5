"""
Phone number matching for call-center screen-pops.

Stored phone numbers are free-form ("+39 06 2222 4444", "06-2222-4444",
"0039622224444"...). Lookups run in two phases:

1. A broad database filter built from ``suffix_pattern`` and
   ``variations`` narrows the case table to candidates.
2. ``find_first_match`` re-checks every candidate with the strict
   ``match`` comparison and keeps the first hit, so ordering the
   candidates newest-first makes the most recent case win.

Everything here is pure: no I/O, no shared state.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Set, TypeVar


_NON_DIALABLE = re.compile(r"[^0-9+]")
_NON_DIGIT = re.compile(r"[^0-9]")

T = TypeVar("T")


@dataclass(frozen=True)
class CountryCallingCode:
    """
    One entry of the calling code table.

    ``min_national_length``/``max_national_length`` bound the digit count
    of the national number. They decide whether a number written without
    ``+`` really starts with this calling code.
    """
    code: str
    min_national_length: int
    max_national_length: int

    def fits(self, national: str) -> bool:
        return self.min_national_length <= len(national) <= self.max_national_length


# Italy: 6-11 national digits (landlines keep the leading 0). Spain: 9.
DEFAULT_COUNTRY_CODES: tuple = (
    CountryCallingCode("39", 6, 11),
    CountryCallingCode("34", 9, 9),
)


def country_codes_from_table(table: Iterable[tuple]) -> tuple:
    """Build calling code entries from (code, min_length, max_length) tuples."""
    return tuple(CountryCallingCode(code, low, high) for code, low, high in table)


# =============================================================================
# Normalization
# =============================================================================

def normalize(raw: Optional[str]) -> str:
    """
    Strip a phone number down to ASCII digits and a single leading ``+``.

    Examples:
        "+39 06 2222 4444" -> "+390622224444"
        "(06) 2222-4444"   -> "0622224444"
        None / ""          -> ""
    """
    if not raw:
        return ""

    kept = _NON_DIALABLE.sub("", raw)
    digits = kept.replace("+", "")
    if kept.startswith("+"):
        return f"+{digits}"
    return digits


def digits_only(raw: Optional[str]) -> str:
    """ASCII digits of a phone number, without any ``+``."""
    if not raw:
        return ""
    return _NON_DIGIT.sub("", raw)


def last_digits(raw: Optional[str], count: int = 7) -> str:
    """Trailing ``count`` digits used by the broad candidate filter."""
    if count <= 0:
        return ""
    return digits_only(raw)[-count:]


def suffix_pattern(raw: Optional[str], count: int = 7) -> str:
    """
    SQL LIKE pattern for stored numbers ending with the same digits.

    Wildcards between digits let the pattern ignore any separators, so
    "2222 4444" and "2222-4444" both match "%2%2%2%4%4%4%4".
    Returns "" when the number has no digits.
    """
    tail = last_digits(raw, count)
    if not tail:
        return ""
    return "%" + "%".join(tail)


# =============================================================================
# Variations
# =============================================================================

def variations(raw: Optional[str], country_codes: Sequence[CountryCallingCode] = DEFAULT_COUNTRY_CODES) -> Set[str]:
    """
    Build the set of forms considered equivalent to ``raw``.

    Contains the normalized form, the same form with the leading ``+``
    toggled and, for every calling code the number starts with, the bare
    national number plus ``code+national`` with and without ``+``. A
    number written without ``+`` also gets the code prepended for every
    entry whose national length it fits, so "392 1234567" is read both as
    a national mobile and as "+39 21234567".
    """
    if not raw:
        return set()

    normalized = normalize(raw)
    if not any(ch.isdigit() for ch in normalized):
        return {normalized}

    result = {normalized}
    has_plus = normalized.startswith("+")
    digits = normalized[1:] if has_plus else normalized
    result.add(digits if has_plus else f"+{digits}")

    for entry in country_codes:
        if not digits.startswith(entry.code):
            continue
        national = digits[len(entry.code):]
        if not national:
            continue
        # Without "+", "39..." may just be a national number.
        if not has_plus and not entry.fits(national):
            continue
        result.add(national)
        result.add(f"{entry.code}{national}")
        result.add(f"+{entry.code}{national}")

    # Bare numbers are also read as national, even "392..." ones.
    if not has_plus:
        for entry in country_codes:
            if entry.fits(digits):
                result.add(f"{entry.code}{digits}")
                result.add(f"+{entry.code}{digits}")

    return result


# =============================================================================
# Strict matching
# =============================================================================

def match(a: Optional[str], b: Optional[str]) -> bool:
    """
    Strict comparison: both numbers normalize to the same string.

    Numbers without any digit never match; an empty phone field is not a
    line.
    """
    left = normalize(a)
    if not any(ch.isdigit() for ch in left):
        return False
    return left == normalize(b)


def find_first_match(
    phone: str,
    candidates: Iterable[T],
    fields: Sequence[str] = ("phone", "home_phone", "cell_phone"),
) -> Optional[T]:
    """
    Return the first candidate with a phone field strictly matching ``phone``.

    Candidates are expected in priority order (newest first for lookups).
    """
    for candidate in candidates:
        for field in fields:
            stored = getattr(candidate, field, None)
            if stored and match(phone, stored):
                return candidate
    return None


def to_e164(raw: Optional[str], default_code: str = "39") -> str:
    """
    Best-effort E.164 form for the outbound dialer.

    Numbers already carrying ``+`` are kept, ``00`` international prefixes
    become ``+``, anything else is assumed national to ``default_code``.
    Returns "" when the number has no digits.
    """
    normalized = normalize(raw)
    if not any(ch.isdigit() for ch in normalized):
        return ""
    if normalized.startswith("+"):
        return normalized
    if normalized.startswith("00"):
        return f"+{normalized[2:]}"
    return f"+{default_code}{normalized}"
