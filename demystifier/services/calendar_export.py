"""iCalendar export of contract reminders.

Obligations and key dates become all-day VEVENTs. Items whose date cannot
be resolved to a specific day are dropped; when nothing is left the export
yields ``None`` so callers can show a notice instead of an empty file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional
from uuid import uuid4

from demystifier.core.config import settings
from demystifier.schemas.domain import ContractAnalysisResult
from demystifier.services.date_resolver import resolve_date

logger = logging.getLogger(__name__)

CRLF = "\r\n"
CALENDAR_MEDIA_TYPE = "text/calendar; charset=utf-8"
NOTHING_TO_EXPORT_MESSAGE = "No valid, specific dates could be found to export to the calendar."


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    """Export candidate; ``date_string`` is the raw text from the analyzer."""

    summary: str
    description: str
    date_string: str


@dataclass(frozen=True, slots=True)
class CalendarFile:
    """A rendered calendar ready to be offered as a download."""

    filename: str
    content: str
    media_type: str = CALENDAR_MEDIA_TYPE


def escape_text(value: str) -> str:
    """Escape a TEXT property value (backslash, comma, semicolon, newline)."""
    value = value.replace("\\", "\\\\")
    value = value.replace(",", "\\,").replace(";", "\\;")
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    return value.replace("\n", "\\n")


def _format_date(day: date) -> str:
    return day.strftime("%Y%m%d")


def _format_stamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _new_uid(domain: str) -> str:
    return f"{uuid4()}@{domain}"


def events_from_analysis(analysis: ContractAnalysisResult) -> list[CalendarEvent]:
    """Map obligations, then key dates, to export candidates."""
    events = [
        CalendarEvent(
            summary=f"DO: {item.must_do} (for {item.who})",
            description=f'Penalty: {item.penalty}\nSource: "{item.source_span}"',
            date_string=item.by_when,
        )
        for item in analysis.obligations
    ]
    events.extend(
        CalendarEvent(
            summary=f"DEADLINE: {item.event_type}",
            description=f'Details: {item.details}\nSource: "{item.source_span}"',
            date_string=item.date,
        )
        for item in analysis.key_dates
    )
    return events


def render_calendar(
    events: Iterable[CalendarEvent],
    *,
    now: Optional[datetime] = None,
    product: Optional[str] = None,
    uid_domain: Optional[str] = None,
) -> Optional[str]:
    """Render resolvable events as a VCALENDAR document.

    Returns ``None`` when no event has a resolvable date.
    """
    candidates = list(events)
    resolved = [(event, resolve_date(event.date_string)) for event in candidates]
    # date.max has no following day to end on
    resolved = [(event, day) for event, day in resolved if day is not None and day < date.max]

    dropped = len(candidates) - len(resolved)
    if dropped:
        logger.debug("Dropped %d of %d event(s) without a specific date", dropped, len(candidates))
    if not resolved:
        return None

    stamp = _format_stamp(now or datetime.now(timezone.utc))
    domain = uid_domain or settings.CALENDAR_UID_DOMAIN

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{product or settings.CALENDAR_PRODUCT}//Contract Reminders v1.0//EN",
        "CALSCALE:GREGORIAN",
    ]
    for event, day in resolved:
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{_new_uid(domain)}",
                f"DTSTAMP:{stamp}",
                f"DTSTART;VALUE=DATE:{_format_date(day)}",
                # All-day events end on the following day
                f"DTEND;VALUE=DATE:{_format_date(day + timedelta(days=1))}",
                f"SUMMARY:{escape_text(event.summary)}",
                f"DESCRIPTION:{escape_text(event.description)}",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    return CRLF.join(lines)


def calendar_filename(file_name: str) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', file_name)}_reminders.ics"


def export_reminders(
    file_name: str,
    analysis: ContractAnalysisResult,
    *,
    now: Optional[datetime] = None,
) -> Optional[CalendarFile]:
    """Build the downloadable reminders calendar for one document."""
    content = render_calendar(events_from_analysis(analysis), now=now)
    if content is None:
        logger.info("Nothing to export for %s", file_name)
        return None
    return CalendarFile(filename=calendar_filename(file_name), content=content)


__all__ = [
    "CALENDAR_MEDIA_TYPE",
    "NOTHING_TO_EXPORT_MESSAGE",
    "CalendarEvent",
    "CalendarFile",
    "calendar_filename",
    "escape_text",
    "events_from_analysis",
    "export_reminders",
    "render_calendar",
]
