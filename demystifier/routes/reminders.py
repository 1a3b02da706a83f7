"""Contract reminder endpoints: reminder listing and calendar export."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from demystifier.core.config import settings
from demystifier.deps import get_store, require_document
from demystifier.schemas.api import CalendarExportNotice, RemindersResponse
from demystifier.services.calendar_export import NOTHING_TO_EXPORT_MESSAGE, export_reminders
from demystifier.services.reminders import upcoming_reminders
from demystifier.store import ContractStatus, Document, DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["reminders"])


def _require_contract_analysis(store: DocumentStore, document_id: str) -> Document:
    doc = require_document(store, document_id)
    if doc.contract_status is not ContractStatus.complete or doc.contract_analysis is None:
        raise HTTPException(
            status_code=409,
            detail=f"Contract analysis is {doc.contract_status.value}, reminders are not ready",
        )
    return doc


@router.get("/{document_id}/reminders", response_model=RemindersResponse)
async def get_reminders(
    document_id: str,
    upcoming: bool = Query(False, description="Only items due within the reminder window"),
    within_days: Optional[int] = Query(None, ge=0, description="Window size in days"),
    store: DocumentStore = Depends(get_store),
):
    """List obligations, key dates and payment terms for a document."""
    doc = _require_contract_analysis(store, document_id)

    reminders = doc.contract_analysis
    if upcoming:
        reminders = upcoming_reminders(
            reminders,
            today=date.today(),
            within_days=settings.REMINDER_WINDOW_DAYS if within_days is None else within_days,
        )

    return RemindersResponse(
        document_id=doc.id,
        file_name=doc.file_name,
        upcoming_only=upcoming,
        reminders=reminders,
    )


@router.get(
    "/{document_id}/reminders.ics",
    response_model=CalendarExportNotice,
    responses={200: {"content": {"text/calendar": {}}}},
)
async def export_calendar(document_id: str, store: DocumentStore = Depends(get_store)):
    """Download obligations and key dates as an iCalendar file."""
    doc = _require_contract_analysis(store, document_id)

    calendar = export_reminders(doc.file_name, doc.contract_analysis)
    if calendar is None:
        return CalendarExportNotice(message=NOTHING_TO_EXPORT_MESSAGE)

    return Response(
        content=calendar.content,
        media_type=calendar.media_type,
        headers={"Content-Disposition": f'attachment; filename="{calendar.filename}"'},
    )
