"""Resolve AI-produced date strings to calendar dates.

The contract analyzer is asked for ``YYYY-MM-DD`` but falls back to
descriptive text for recurring or relative terms ("Net 30", "the 1st of
every month"). Those are deliberately not resolved: only strings naming one
specific day produce a date, everything else yields ``None``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII)
_ISO_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}", re.ASCII)
_ORDINAL_RE = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)\b", re.IGNORECASE)

# Descriptive formats, tried in order. Numeric dates are read month-first.
DESCRIPTIVE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d %B, %Y",
    "%A, %B %d, %Y",
    "%a, %b %d, %Y",
    "%A %B %d, %Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
)


def _from_iso(value: str) -> Optional[date]:
    match = ISO_DATE_RE.match(value)
    year, month, day = (int(part) for part in match.groups())
    try:
        # Midday UTC keeps the calendar day stable whatever the caller's zone
        instant = datetime(year, month, day, 12, tzinfo=timezone.utc)
    except ValueError:
        return None
    return instant.date()


def _from_iso_datetime(value: str) -> Optional[date]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc)
        except OverflowError:
            return None
    return parsed.date()


def _from_descriptive(value: str) -> Optional[date]:
    text = _ORDINAL_RE.sub(r"\1", value)
    text = re.sub(r"\s+", " ", text).rstrip(".")
    text = re.sub(r"\b(Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)\.", r"\1", text)
    text = text.replace("Sept ", "Sep ")
    for fmt in DESCRIPTIVE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def resolve_date(value: Optional[str]) -> Optional[date]:
    """Return the single calendar day ``value`` names, or ``None``.

    Strict ``YYYY-MM-DD`` wins first; an impossible day such as
    ``2024-02-30`` fails outright rather than being reinterpreted. Otherwise
    ISO date-times (normalized to their UTC day) and a fixed list of
    descriptive formats are tried. Never raises.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    # strptime and int() both accept non-ASCII digits
    if not text.isascii():
        return None

    if ISO_DATE_RE.match(text):
        return _from_iso(text)

    if _ISO_DATETIME_RE.match(text):
        return _from_iso_datetime(text)

    return _from_descriptive(text)


__all__ = ["resolve_date"]
