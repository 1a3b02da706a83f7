"""Reminder views over a contract analysis."""

from __future__ import annotations

from datetime import date, timedelta

from demystifier.schemas.domain import ContractAnalysisResult
from demystifier.services.date_resolver import resolve_date


def upcoming_reminders(
    analysis: ContractAnalysisResult,
    *,
    today: date,
    within_days: int,
) -> ContractAnalysisResult:
    """Keep obligations and key dates due on or before ``today + within_days``.

    Overdue items stay in the view. Items without a specific date are
    dropped; payment terms are passed through untouched.
    """
    try:
        horizon = today + timedelta(days=within_days)
    except OverflowError:
        horizon = date.max

    def due(value: str) -> bool:
        day = resolve_date(value)
        return day is not None and day <= horizon

    return ContractAnalysisResult(
        obligations=[item for item in analysis.obligations if due(item.by_when)],
        key_dates=[item for item in analysis.key_dates if due(item.date)],
        payment_terms=list(analysis.payment_terms),
    )


__all__ = ["upcoming_reminders"]
