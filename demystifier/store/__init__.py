"""In-memory document store."""

from demystifier.store.models import (
    AnalysisStatus,
    ContractStatus,
    Document,
    DocumentUpload,
)
from demystifier.store.repository import DocumentStore

__all__ = [
    "AnalysisStatus",
    "ContractStatus",
    "Document",
    "DocumentStore",
    "DocumentUpload",
]
