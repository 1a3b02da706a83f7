"""Business logic services."""

from demystifier.services.calendar_export import (
    CalendarEvent,
    CalendarFile,
    events_from_analysis,
    export_reminders,
    render_calendar,
)
from demystifier.services.date_resolver import resolve_date
from demystifier.services.dispatcher import AnalysisDispatcher, BatchOutcome, BatchPolicy
from demystifier.services.pdf_parser import (
    PDFError,
    PDFParseError,
    PDFValidationError,
    ParseResult,
    UnsupportedUploadError,
    extract_text_and_pages,
    extract_upload_text,
)
from demystifier.services.reminders import upcoming_reminders

__all__ = [
    "AnalysisDispatcher",
    "BatchOutcome",
    "BatchPolicy",
    "CalendarEvent",
    "CalendarFile",
    "PDFError",
    "PDFValidationError",
    "PDFParseError",
    "ParseResult",
    "UnsupportedUploadError",
    "events_from_analysis",
    "export_reminders",
    "extract_text_and_pages",
    "extract_upload_text",
    "render_calendar",
    "resolve_date",
    "upcoming_reminders",
]
