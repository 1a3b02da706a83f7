"""Shared dependencies for FastAPI routes."""

from __future__ import annotations

from fastapi import HTTPException, Request

from demystifier.services.dispatcher import AnalysisDispatcher
from demystifier.store import Document, DocumentStore


def get_store(request: Request) -> DocumentStore:
    """Document store created in the application lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Document store unavailable")
    return store


def get_dispatcher(request: Request) -> AnalysisDispatcher:
    """Analysis dispatcher created in the application lifespan."""
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Analysis service unavailable")
    return dispatcher


def require_document(store: DocumentStore, document_id: str) -> Document:
    doc = store.get(document_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return doc


__all__ = ["get_dispatcher", "get_store", "require_document"]
