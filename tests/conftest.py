"""Pytest configuration and fixtures."""

import os

# No backoff between analyzer retries; set BEFORE any app imports
os.environ["LLM_RETRY_WAIT_S"] = "0"

from unittest.mock import AsyncMock

import pytest

from demystifier.store import DocumentStore, DocumentUpload
from factories import make_analysis, make_contract_analysis


@pytest.fixture
def store():
    """An empty in-memory document store."""
    return DocumentStore()


@pytest.fixture
def populated_store(store):
    """Store holding three pending documents."""
    store.add_documents(
        [
            DocumentUpload(file_name="lease.txt", content="Lease text"),
            DocumentUpload(file_name="nda.txt", content="NDA text"),
            DocumentUpload(file_name="sow.txt", content="SOW text"),
        ]
    )
    return store


@pytest.fixture
def general_analyzer():
    """Async general-analysis collaborator that always succeeds."""
    return AsyncMock(side_effect=lambda text: make_analysis(f"Summary of {text}"))


@pytest.fixture
def contract_analyzer():
    """Async contract-analysis collaborator that always succeeds."""
    return AsyncMock(return_value=make_contract_analysis())
