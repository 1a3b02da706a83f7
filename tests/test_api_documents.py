"""Tests for document, analysis and reminder API endpoints."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from demystifier.main import app
from demystifier.routes.documents import BATCH_FAILED_MESSAGE
from demystifier.services.calendar_export import NOTHING_TO_EXPORT_MESSAGE
from demystifier.services.dispatcher import AnalysisDispatcher
from factories import make_analysis, make_contract_analysis, make_key_date, make_obligation

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


async def never_finishes(text):
    await asyncio.Event().wait()


def use_dispatcher(general, contract):
    """Swap the app's dispatcher for one driving the given collaborators."""
    app.state.dispatcher = AnalysisDispatcher(
        app.state.store, analyze_general=general, analyze_contract=contract
    )


def upload(client, *files):
    return client.post(
        "/api/documents",
        files=[("files", (name, content, content_type)) for name, content, content_type in files],
    )


def upload_text(client, name="lease.txt", content=b"The Client shall pay rent."):
    response = upload(client, (name, content, "text/plain"))
    assert response.status_code == 201
    return response.json()["items"][0]["id"]


@pytest.fixture
def client(general_analyzer, contract_analyzer):
    with TestClient(app, raise_server_exceptions=False) as client:
        use_dispatcher(general_analyzer, contract_analyzer)
        yield client


class TestUpload:
    """Tests for POST /api/documents."""

    def test_upload_text_files(self, client):
        response = upload(
            client,
            ("lease.txt", b"Lease text", "text/plain"),
            ("nda.txt", b"NDA text", "text/plain"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["total"] == 2
        assert [item["file_name"] for item in data["items"]] == ["lease.txt", "nda.txt"]
        for item in data["items"]:
            assert item["analysis_status"] == "pending"
            assert item["analysis"] is None
            assert item["contract_status"] == "none"

        detail = client.get(f"/api/documents/{data['items'][1]['id']}").json()
        assert detail["original_content"] == "NDA text"

    def test_unsupported_type_rejected(self, client):
        response = upload(client, ("lease.docx", b"PK\x03\x04", DOCX_TYPE))

        assert response.status_code == 400
        assert response.json()["detail"] == "File type for lease.docx is not supported. Please use .txt or .pdf."

    def test_one_bad_file_stores_nothing(self, client):
        response = upload(
            client,
            ("lease.txt", b"Lease text", "text/plain"),
            ("photo.png", b"\x89PNG", "image/png"),
        )

        assert response.status_code == 400
        assert client.get("/api/documents").json()["total"] == 0

    def test_non_pdf_bytes_rejected(self, client):
        response = upload(client, ("fake.pdf", b"not a pdf", "application/pdf"))

        assert response.status_code == 400
        assert "missing PDF header" in response.json()["detail"]

    def test_corrupt_pdf_unprocessable(self, client):
        response = upload(client, ("broken.pdf", b"%PDF-1.4", "application/pdf"))

        assert response.status_code == 422
        assert response.json()["detail"] == "Could not process broken.pdf."


class TestReadAndDelete:
    """Tests for listing, fetching and removing documents."""

    def test_list_in_upload_order(self, client):
        first = upload_text(client, "a.txt")
        second = upload_text(client, "b.txt")

        data = client.get("/api/documents").json()
        assert [item["id"] for item in data["items"]] == [first, second]
        assert "original_content" not in data["items"][0]

    def test_get_unknown_document(self, client):
        response = client.get("/api/documents/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Document not found"

    def test_delete_document(self, client):
        doc_id = upload_text(client)

        assert client.delete(f"/api/documents/{doc_id}").status_code == 204
        assert client.get(f"/api/documents/{doc_id}").status_code == 404
        assert client.delete(f"/api/documents/{doc_id}").status_code == 404


class TestBatchAnalysis:
    """Tests for POST /api/documents/analyze."""

    def test_wait_for_batch(self, client, general_analyzer):
        first = upload_text(client, "a.txt", b"Alpha")
        second = upload_text(client, "b.txt", b"Beta")

        response = client.post(
            "/api/documents/analyze?wait=true", json={"document_ids": [first, second, "missing"]}
        )

        assert response.status_code == 200
        data = response.json()
        assert sorted(data["completed"]) == sorted([first, second])
        assert data["skipped"] == ["missing"]
        assert data["message"] is None
        assert general_analyzer.await_count == 2

        doc = client.get(f"/api/documents/{first}").json()
        assert doc["analysis_status"] == "complete"
        assert doc["analysis"]["summary"] == "Summary of Alpha"

    def test_failed_document_reported(self, client, contract_analyzer):
        async def analyzer(text):
            if text == "Beta":
                raise RuntimeError("model unavailable")
            return make_analysis()

        use_dispatcher(analyzer, contract_analyzer)
        first = upload_text(client, "a.txt", b"Alpha")
        second = upload_text(client, "b.txt", b"Beta")

        data = client.post(
            "/api/documents/analyze?wait=true", json={"document_ids": [first, second]}
        ).json()

        assert data["failed"] == [second]
        assert data["completed"] == [first]
        assert data["message"] == BATCH_FAILED_MESSAGE
        statuses = {doc["id"]: doc["analysis_status"] for doc in data["documents"]}
        assert statuses == {first: "complete", second: "error"}

    def test_omitted_ids_analyze_pending_documents(self, client, general_analyzer):
        done = upload_text(client, "a.txt", b"Alpha")
        client.post("/api/documents/analyze?wait=true", json={"document_ids": [done]})
        pending = upload_text(client, "b.txt", b"Beta")

        data = client.post("/api/documents/analyze?wait=true").json()

        assert data["accepted"] == [pending]
        general_analyzer.assert_awaited_with("Beta")

    def test_background_batch_accepted(self, client, contract_analyzer):
        use_dispatcher(never_finishes, contract_analyzer)
        doc_id = upload_text(client)

        response = client.post("/api/documents/analyze", json={"document_ids": [doc_id, "missing"]})

        assert response.status_code == 202
        data = response.json()
        assert data["accepted"] == [doc_id]
        assert data["skipped"] == ["missing"]
        assert data["documents"][0]["analysis_status"] == "analyzing"
        assert client.get(f"/api/documents/{doc_id}").json()["analysis_status"] == "analyzing"


class TestContractAnalysis:
    """Tests for POST /api/documents/{id}/contract-analysis."""

    def test_wait_for_contract_analysis(self, client, contract_analyzer):
        doc_id = upload_text(client)

        response = client.post(f"/api/documents/{doc_id}/contract-analysis?wait=true")

        assert response.status_code == 200
        data = response.json()
        assert data["contract_status"] == "complete"
        assert data["contract_analysis"]["obligations"][0]["who"] == "The Client"
        # General analysis untouched
        assert data["analysis_status"] == "pending"
        contract_analyzer.assert_awaited_once_with("The Client shall pay rent.")

    def test_failure_sets_error(self, client, general_analyzer):
        use_dispatcher(general_analyzer, AsyncMock(side_effect=RuntimeError("boom")))
        doc_id = upload_text(client)

        data = client.post(f"/api/documents/{doc_id}/contract-analysis?wait=true").json()

        assert data["contract_status"] == "error"
        assert data["contract_analysis"] is None

    def test_background_contract_analysis(self, client, general_analyzer):
        use_dispatcher(general_analyzer, never_finishes)
        doc_id = upload_text(client)

        response = client.post(f"/api/documents/{doc_id}/contract-analysis")

        assert response.status_code == 202
        assert response.json()["contract_status"] == "pending"

    def test_unknown_document(self, client):
        assert client.post("/api/documents/missing/contract-analysis").status_code == 404


class TestReminders:
    """Tests for reminder listing and calendar export."""

    def test_not_ready_before_contract_analysis(self, client):
        doc_id = upload_text(client)

        response = client.get(f"/api/documents/{doc_id}/reminders")
        assert response.status_code == 409
        assert client.get(f"/api/documents/{doc_id}/reminders.ics").status_code == 409

    def test_list_reminders(self, client):
        doc_id = upload_text(client)
        client.post(f"/api/documents/{doc_id}/contract-analysis?wait=true")

        data = client.get(f"/api/documents/{doc_id}/reminders").json()

        assert data["document_id"] == doc_id
        assert data["upcoming_only"] is False
        reminders = data["reminders"]
        assert len(reminders["obligations"]) == 1
        assert reminders["key_dates"][0]["event_type"] == "Contract Expiry"
        assert reminders["payment_terms"][0]["due_date"] == "Net 30"

    def test_upcoming_reminders(self, client, general_analyzer):
        analysis = make_contract_analysis(
            obligations=[make_obligation(by_when="2025-06-15"), make_obligation(by_when="2999-01-01")],
            key_dates=[make_key_date(date="upon renewal")],
        )
        use_dispatcher(general_analyzer, AsyncMock(return_value=analysis))
        doc_id = upload_text(client)
        client.post(f"/api/documents/{doc_id}/contract-analysis?wait=true")

        data = client.get(f"/api/documents/{doc_id}/reminders?upcoming=true&within_days=10").json()

        assert data["upcoming_only"] is True
        assert [item["by_when"] for item in data["reminders"]["obligations"]] == ["2025-06-15"]
        assert data["reminders"]["key_dates"] == []
        assert len(data["reminders"]["payment_terms"]) == 1

    def test_negative_window_rejected(self, client):
        doc_id = upload_text(client)
        assert client.get(f"/api/documents/{doc_id}/reminders?within_days=-1").status_code == 422

    def test_download_calendar(self, client):
        doc_id = upload_text(client, "My Lease.txt")
        client.post(f"/api/documents/{doc_id}/contract-analysis?wait=true")

        response = client.get(f"/api/documents/{doc_id}/reminders.ics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/calendar")
        assert response.headers["content-disposition"] == 'attachment; filename="My_Lease_txt_reminders.ics"'
        assert response.text.count("BEGIN:VEVENT") == 2
        assert "DTSTART;VALUE=DATE:20250615\r\n" in response.text

    def test_open_ended_key_date_skipped(self, client, general_analyzer):
        analysis = make_contract_analysis(key_dates=[make_key_date(date="9999-12-31")])
        use_dispatcher(general_analyzer, AsyncMock(return_value=analysis))
        doc_id = upload_text(client)
        client.post(f"/api/documents/{doc_id}/contract-analysis?wait=true")

        response = client.get(f"/api/documents/{doc_id}/reminders.ics")

        assert response.status_code == 200
        assert response.text.count("BEGIN:VEVENT") == 1
        assert "DTSTART;VALUE=DATE:20250615\r\n" in response.text

    def test_nothing_to_export(self, client, general_analyzer):
        analysis = make_contract_analysis(
            obligations=[make_obligation(by_when="Net 30")],
            key_dates=[make_key_date(date="upon renewal")],
        )
        use_dispatcher(general_analyzer, AsyncMock(return_value=analysis))
        doc_id = upload_text(client)
        client.post(f"/api/documents/{doc_id}/contract-analysis?wait=true")

        response = client.get(f"/api/documents/{doc_id}/reminders.ics")

        assert response.status_code == 200
        assert response.json() == {"exported": False, "message": NOTHING_TO_EXPORT_MESSAGE}
