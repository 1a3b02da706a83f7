"""In-memory document records and their lifecycle states."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from demystifier.schemas.domain import ContractAnalysisResult, SimplifiedAnalysis


class AnalysisStatus(str, enum.Enum):
    pending = "pending"
    analyzing = "analyzing"
    complete = "complete"
    error = "error"


class ContractStatus(str, enum.Enum):
    none = "none"
    pending = "pending"
    complete = "complete"
    error = "error"


@dataclass(frozen=True, slots=True)
class DocumentUpload:
    """A file accepted for analysis, before it is assigned an id."""

    file_name: str
    content: str


@dataclass(frozen=True, slots=True)
class Document:
    """Immutable snapshot of an uploaded document.

    The store replaces the whole record on every transition, so a reader
    never sees a result without its matching status.
    """

    id: str
    file_name: str
    original_content: str
    analysis_status: AnalysisStatus = AnalysisStatus.pending
    analysis: Optional[SimplifiedAnalysis] = None
    contract_status: ContractStatus = ContractStatus.none
    contract_analysis: Optional[ContractAnalysisResult] = None
