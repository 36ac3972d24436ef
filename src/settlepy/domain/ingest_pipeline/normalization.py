"""Cell-level normalization helpers.

``normalize_date`` raises :class:`FormatError`; the other helpers never raise
and fall back to a default instead.
"""

from __future__ import annotations

import re
from datetime import date
from typing import TYPE_CHECKING

from settlepy.domain.errors import FormatError
from settlepy.domain.references import normalize_key

if TYPE_CHECKING:
    from collections.abc import Mapping

_YMD_SHAPES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"),
    re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"),
    re.compile(r"^(\d{4})\.(\d{1,2})\.(\d{1,2})$"),
)
_US_LONG = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_US_SHORT = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$")

_AMOUNT_NOISE = re.compile(r"[^\d.\-]")

# two-digit years above this pivot belong to the 1900s
_CENTURY_PIVOT = 50


def normalize_date(value: str | None) -> str | None:
    """Return ``value`` as ISO ``YYYY-MM-DD`` (``None`` for a blank cell).

    Accepted shapes: ``YYYY-MM-DD``, ``YYYY/MM/DD``, ``YYYY.MM.DD``,
    ``MM/DD/YYYY`` and ``MM/DD/YY``. The parsed parts must form a real
    calendar date; ``2023-02-29`` is rejected rather than rolled over.
    """

    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    parts: tuple[str, str, str] | None = None
    for shape in _YMD_SHAPES:
        found = shape.match(text)
        if found:
            parts = (found.group(1), found.group(2), found.group(3))
            break
    else:
        found = _US_LONG.match(text)
        if found:
            parts = (found.group(3), found.group(1), found.group(2))
        else:
            found = _US_SHORT.match(text)
            if found:
                short_year = int(found.group(3))
                century = 1900 if short_year > _CENTURY_PIVOT else 2000
                parts = (str(century + short_year), found.group(1), found.group(2))

    if parts is None:
        raise FormatError(text)

    year, month, day = (int(part) for part in parts)
    try:
        parsed = date(year, month, day)
    except ValueError as exc:
        raise FormatError(text, "invalid calendar date") from exc
    return parsed.isoformat()


def normalize_amount(value: object) -> float:
    """Strip everything but digits, ``.`` and ``-`` and parse; ``0.0`` on failure."""

    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return 0.0
    cleaned = _AMOUNT_NOISE.sub("", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def optional_amount(value: object) -> float | None:
    """Like :func:`normalize_amount` but keeps blank cells as ``None``."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return normalize_amount(value)


def normalize_boolean(value: object, table: Mapping[str, bool]) -> bool:
    """Look ``value`` up in ``table``; unknown and empty tokens are ``False``."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return table.get(normalize_key(str(value)), False)


def normalize_choice[TChoice](
    value: object, table: Mapping[str, TChoice], default: TChoice
) -> tuple[TChoice, bool]:
    """Return ``(choice, recognised)``; unrecognised tokens yield ``default``.

    A blank cell counts as recognised so it is not reported.
    """

    if value is None:
        return default, True
    text = str(value).strip()
    if not text:
        return default, True
    choice = table.get(normalize_key(text))
    if choice is None:
        return default, False
    return choice, True


def clean_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
