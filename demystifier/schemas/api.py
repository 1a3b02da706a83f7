"""API request and response models for document endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

from demystifier.schemas.domain import ContractAnalysisResult, SimplifiedAnalysis
from demystifier.store.models import AnalysisStatus, ContractStatus, Document


class DocumentResponse(BaseModel):
    """Document with both analysis lifecycles."""

    id: str
    file_name: str
    analysis_status: AnalysisStatus
    analysis: Optional[SimplifiedAnalysis] = None
    contract_status: ContractStatus
    contract_analysis: Optional[ContractAnalysisResult] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentResponse":
        return cls.model_validate(doc)


class DocumentDetailResponse(DocumentResponse):
    """Single document including its extracted text."""

    original_content: str


class DocumentListResponse(BaseModel):
    items: list[DocumentResponse]
    total: int


class AnalyzeRequest(BaseModel):
    """Batch analysis request. Omitted ids mean every pending document."""

    document_ids: Optional[list[str]] = Field(None, description="Documents to analyze")


class BatchAnalysisResponse(BaseModel):
    accepted: list[str]
    skipped: list[str] = Field(default_factory=list)
    completed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    message: Optional[str] = None
    documents: list[DocumentResponse]


class RemindersResponse(BaseModel):
    document_id: str
    file_name: str
    upcoming_only: bool
    reminders: ContractAnalysisResult


class CalendarExportNotice(BaseModel):
    """Returned instead of a file when no reminder has a specific date."""

    exported: bool = False
    message: str
