"""Document store: the single owner of all document records."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional
from uuid import uuid4

from demystifier.schemas.domain import ContractAnalysisResult, SimplifiedAnalysis
from demystifier.store.models import (
    AnalysisStatus,
    ContractStatus,
    Document,
    DocumentUpload,
)

logger = logging.getLogger(__name__)


class DocumentStore:
    """Holds documents in insertion order and exposes their status transitions.

    Every mutation is a synchronous method that swaps one record for a new
    one, so on a single event loop no caller can observe a half-applied
    update. Unknown ids are ignored by all transition methods.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._issued_ids: set[str] = set()

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def _new_id(self) -> str:
        document_id = str(uuid4())
        while document_id in self._issued_ids:
            document_id = str(uuid4())
        self._issued_ids.add(document_id)
        return document_id

    # -----
    # Reads
    # -----
    def get(self, document_id: str) -> Optional[Document]:
        return self._documents.get(document_id)

    def list_documents(self) -> list[Document]:
        return list(self._documents.values())

    def ids_with_analysis_status(self, status: AnalysisStatus) -> list[str]:
        return [doc.id for doc in self._documents.values() if doc.analysis_status == status]

    # ---------
    # Mutations
    # ---------
    def add_documents(self, entries: Iterable[DocumentUpload]) -> list[Document]:
        """Create one pending document per entry, appended in call order."""
        created: list[Document] = []
        for entry in entries:
            doc = Document(
                id=self._new_id(),
                file_name=entry.file_name,
                original_content=entry.content,
            )
            self._documents[doc.id] = doc
            created.append(doc)
        logger.info("Added %d document(s), store now holds %d", len(created), len(self._documents))
        return created

    def remove_documents(self, document_ids: Iterable[str]) -> list[str]:
        """Drop documents; their ids are never issued again."""
        removed = [doc_id for doc_id in dict.fromkeys(document_ids) if self._documents.pop(doc_id, None)]
        if removed:
            logger.info("Removed %d document(s)", len(removed))
        return removed

    def clear(self) -> None:
        self._documents.clear()

    def set_analysis_status(self, document_ids: Iterable[str], status: AnalysisStatus) -> None:
        """Move the general analysis of each known id to ``status``.

        Completion carries a result and must go through ``set_analysis_result``.
        """
        status = AnalysisStatus(status)
        if status is AnalysisStatus.complete:
            raise ValueError("use set_analysis_result to complete an analysis")
        for doc_id in set(document_ids):
            doc = self._documents.get(doc_id)
            if doc is not None:
                self._documents[doc_id] = replace(doc, analysis_status=status, analysis=None)

    def set_analysis_result(self, document_id: str, result: SimplifiedAnalysis) -> None:
        doc = self._documents.get(document_id)
        if doc is not None:
            self._documents[document_id] = replace(
                doc, analysis=result, analysis_status=AnalysisStatus.complete
            )

    def set_contract_status(self, document_id: str, status: ContractStatus) -> None:
        """Move the contract analysis of a known id to ``status``.

        Completion carries a result and must go through ``set_contract_result``.
        """
        status = ContractStatus(status)
        if status is ContractStatus.complete:
            raise ValueError("use set_contract_result to complete a contract analysis")
        doc = self._documents.get(document_id)
        if doc is not None:
            self._documents[document_id] = replace(
                doc, contract_status=status, contract_analysis=None
            )

    def set_contract_result(self, document_id: str, result: ContractAnalysisResult) -> None:
        doc = self._documents.get(document_id)
        if doc is not None:
            self._documents[document_id] = replace(
                doc, contract_analysis=result, contract_status=ContractStatus.complete
            )
