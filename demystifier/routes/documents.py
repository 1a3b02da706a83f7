"""Document upload and analysis endpoints."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile

from demystifier.core.config import settings
from demystifier.deps import get_dispatcher, get_store, require_document
from demystifier.schemas.api import (
    AnalyzeRequest,
    BatchAnalysisResponse,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentResponse,
)
from demystifier.services.dispatcher import AnalysisDispatcher
from demystifier.services.pdf_parser import PDFParseError, PDFValidationError, UnsupportedUploadError, extract_upload_text
from demystifier.store import AnalysisStatus, DocumentStore, DocumentUpload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])

BATCH_FAILED_MESSAGE = "One or more documents failed to be analyzed."


@router.post("", response_model=DocumentListResponse, status_code=201)
async def upload_documents(
    files: list[UploadFile] = File(...),
    store: DocumentStore = Depends(get_store),
):
    """Upload .txt or .pdf files. Nothing is stored unless every file is readable."""
    max_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024
    uploads: list[DocumentUpload] = []

    for file in files:
        file_name = file.filename or "unnamed"
        content = await file.read()
        if len(content) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"{file_name} exceeds {settings.MAX_FILE_SIZE_MB}MB limit",
            )

        try:
            text = extract_upload_text(
                file_name,
                file.content_type,
                content,
                max_pages=settings.PDF_MAX_PAGES,
                max_size_mb=settings.MAX_FILE_SIZE_MB,
            )
        except (UnsupportedUploadError, PDFValidationError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PDFParseError:
            raise HTTPException(status_code=422, detail=f"Could not process {file_name}.")

        uploads.append(DocumentUpload(file_name=file_name, content=text))

    created = store.add_documents(uploads)
    return DocumentListResponse(
        items=[DocumentResponse.from_document(doc) for doc in created],
        total=len(created),
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents(store: DocumentStore = Depends(get_store)):
    """List documents in upload order."""
    docs = store.list_documents()
    return DocumentListResponse(
        items=[DocumentResponse.from_document(doc) for doc in docs],
        total=len(docs),
    )


@router.post("/analyze", response_model=BatchAnalysisResponse)
async def analyze_documents(
    response: Response,
    payload: AnalyzeRequest | None = None,
    wait: bool = Query(False, description="Wait for every analysis to finish"),
    store: DocumentStore = Depends(get_store),
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
):
    """Run plain-language analysis for a batch of documents."""
    if payload is None or payload.document_ids is None:
        document_ids = store.ids_with_analysis_status(AnalysisStatus.pending)
    else:
        document_ids = payload.document_ids

    if wait:
        outcome = await dispatcher.analyze_batch(document_ids)
        accepted = outcome.completed + outcome.failed + outcome.discarded
        result = BatchAnalysisResponse(
            accepted=accepted,
            skipped=outcome.skipped,
            completed=outcome.completed,
            failed=outcome.failed,
            message=None if outcome.ok else BATCH_FAILED_MESSAGE,
            documents=[],
        )
    else:
        accepted = dispatcher.start_batch(document_ids)
        result = BatchAnalysisResponse(
            accepted=accepted,
            skipped=[doc_id for doc_id in dict.fromkeys(document_ids) if doc_id not in accepted],
            documents=[],
        )
        response.status_code = 202

    result.documents = [
        DocumentResponse.from_document(doc)
        for doc_id in accepted
        if (doc := store.get(doc_id)) is not None
    ]
    logger.info("Analysis requested for %d document(s), wait=%s", len(accepted), wait)
    return result


@router.get("/{document_id}", response_model=DocumentDetailResponse)
async def get_document(document_id: str, store: DocumentStore = Depends(get_store)):
    """Get one document with its extracted text."""
    return DocumentDetailResponse.from_document(require_document(store, document_id))


@router.delete("/{document_id}", status_code=204)
async def delete_document(document_id: str, store: DocumentStore = Depends(get_store)):
    """Remove a document. Its id is never reused."""
    require_document(store, document_id)
    store.remove_documents([document_id])
    return Response(status_code=204)


@router.post("/{document_id}/contract-analysis", response_model=DocumentResponse)
async def analyze_contract(
    document_id: str,
    response: Response,
    wait: bool = Query(False, description="Wait for the analysis to finish"),
    store: DocumentStore = Depends(get_store),
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
):
    """Extract obligations, key dates and payment terms for reminders."""
    require_document(store, document_id)

    if wait:
        await dispatcher.analyze_for_reminders(document_id)
    else:
        dispatcher.start_reminders(document_id)
        response.status_code = 202

    return DocumentResponse.from_document(require_document(store, document_id))
