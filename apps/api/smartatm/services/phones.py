"""Phone number normalization helpers."""
from __future__ import annotations

import re
from typing import Iterable

_NON_DIGITS = re.compile(r"\D")

FUZZY_MIN_DIGITS = 6
SUFFIX_LENGTHS: tuple[int, ...] = (8, 7, 6)


def normalize_phone(raw: str | None) -> str:
    """Strip every non-digit character; ``None`` becomes an empty string."""

    if not raw:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def phones_match(left: str | None, right: str | None) -> bool:
    """Compare two numbers on their normalized form."""

    normalized = normalize_phone(left)
    return bool(normalized) and normalized == normalize_phone(right)


def phone_candidates(raw: str | None) -> list[str]:
    """Values a stored ``to_number`` may hold for the given input: raw and digits-only."""

    if not raw:
        return []
    candidates = [raw.strip()]
    digits = normalize_phone(raw)
    if digits and digits not in candidates:
        candidates.append(digits)
    return [value for value in candidates if value]


def unique_normalized(values: Iterable[str | None]) -> set[str]:
    """Return the distinct non-empty normalized forms of ``values``."""

    return {digits for digits in (normalize_phone(value) for value in values) if digits}


def lead_lookup_patterns(raw: str | None) -> list[tuple[str, str]]:
    """Fallback patterns used to find the lead behind a call number.

    Returns ``(kind, digits)`` pairs in the order they should be tried, where
    kind is ``"exact"`` for an equality match and ``"suffix"`` for an
    ``ILIKE '%digits'`` match. The raw exact match is not included.
    """

    digits = normalize_phone(raw)
    if len(digits) < FUZZY_MIN_DIGITS:
        return []

    patterns: list[tuple[str, str]] = [("suffix", digits[-10:])]
    if digits.startswith("1") and len(digits) > 10:
        without_country = digits[1:]
        patterns.append(("exact", without_country))
        patterns.append(("suffix", without_country[-10:]))
    for length in SUFFIX_LENGTHS:
        if len(digits) >= length:
            patterns.append(("suffix", digits[-length:]))

    seen: set[tuple[str, str]] = set()
    ordered: list[tuple[str, str]] = []
    for pattern in patterns:
        if pattern not in seen:
            seen.add(pattern)
            ordered.append(pattern)
    return ordered
