#!/usr/bin/env python3
"""
End-to-end demo script for the Legal Demystifier API.

Prerequisites:
    1. API running: uvicorn demystifier.main:app
    2. OPENAI_API_KEY set in .env

Usage:
    python scripts/e2e_demo.py --file path/to/contract.pdf

    # Save the reminders calendar somewhere else:
    python scripts/e2e_demo.py --file contract.txt --out reminders.ics

    # Output raw JSON:
    python scripts/e2e_demo.py --file contract.txt --json
"""

import argparse
import json
import sys
import time
from pathlib import Path

import httpx

# Configuration
API_BASE = "http://localhost:8000"
POLL_INTERVAL = 3  # seconds
MAX_WAIT = 180  # seconds

CONTENT_TYPES = {".pdf": "application/pdf", ".txt": "text/plain"}


def check_health(client: httpx.Client) -> bool:
    """Check if API is healthy."""
    try:
        resp = client.get(f"{API_BASE}/health")
        return resp.status_code == 200
    except httpx.RequestError:
        return False


def check_readiness(client: httpx.Client) -> dict:
    """Check readiness of all dependencies."""
    try:
        resp = client.get(f"{API_BASE}/health/ready")
        return resp.json()
    except httpx.RequestError as e:
        return {"error": str(e)}


def upload_document(client: httpx.Client, file_path: Path) -> dict:
    """Upload one .txt or .pdf document."""
    content_type = CONTENT_TYPES.get(file_path.suffix.lower())
    if content_type is None:
        raise ValueError(f"Unsupported file type: {file_path.suffix}")
    with open(file_path, "rb") as f:
        files = [("files", (file_path.name, f, content_type))]
        resp = client.post(f"{API_BASE}/api/documents", files=files)
        resp.raise_for_status()
        return resp.json()["items"][0]


def get_document(client: httpx.Client, document_id: str) -> dict:
    resp = client.get(f"{API_BASE}/api/documents/{document_id}")
    resp.raise_for_status()
    return resp.json()


def poll_until(client: httpx.Client, document_id: str, field: str, done: set[str], max_wait: int = MAX_WAIT) -> dict:
    """Poll a document until ``field`` reaches one of the ``done`` states."""
    start = time.time()
    while time.time() - start < max_wait:
        doc = get_document(client, document_id)
        status = doc[field]
        if status in done:
            return doc

        elapsed = int(time.time() - start)
        print(f"  Status: {status} ({elapsed}s elapsed)", end="\r")
        time.sleep(POLL_INTERVAL)

    return {field: "timeout"}


def print_analysis(doc: dict) -> None:
    """Pretty print the plain-language analysis."""
    analysis = doc.get("analysis") or {}

    print("\n" + "=" * 60)
    print("PLAIN-LANGUAGE ANALYSIS")
    print("=" * 60)
    print(f"\nSummary: {analysis.get('summary', 'N/A')}")

    if analysis.get("jargon"):
        print("\n--- Jargon ---")
        for item in analysis["jargon"]:
            print(f"  {item['term']}: {item['definition']}")

    for key in ("potential_risks", "actionable_next_steps"):
        if analysis.get(key):
            print(f"\n--- {key.replace('_', ' ').title()} ---")
            for line in analysis[key]:
                print(f"  - {line}")


def print_reminders(reminders: dict) -> None:
    """Pretty print obligations, key dates and payment terms."""
    print("\n" + "=" * 60)
    print("CONTRACT REMINDERS")
    print("=" * 60)

    print("\n--- Obligations ---")
    for item in reminders.get("obligations", []):
        print(f"  [{item['by_when']}] {item['who']}: {item['must_do']}")

    print("\n--- Key Dates ---")
    for item in reminders.get("key_dates", []):
        print(f"  [{item['date']}] {item['event_type']}: {item['details']}")

    print("\n--- Payment Terms ---")
    for item in reminders.get("payment_terms", []):
        print(f"  {item['amount']} to {item['recipient']} ({item['frequency']}, due {item['due_date']})")


def main():
    parser = argparse.ArgumentParser(description="E2E demo for Legal Demystifier")
    parser.add_argument("--file", "-f", type=Path, required=True, help="Path to .txt or .pdf file")
    parser.add_argument("--out", "-o", type=Path, help="Where to write the .ics file")
    parser.add_argument("--json", action="store_true", help="Output raw JSON")
    args = parser.parse_args()

    if not args.file.exists():
        print(f"Error: file not found: {args.file}")
        sys.exit(1)

    print("=" * 60)
    print("LEGAL DEMYSTIFIER - E2E DEMO")
    print("=" * 60)

    with httpx.Client(timeout=30.0) as client:
        print("\n[1/6] Checking API health...")
        if not check_health(client):
            print("  Error: API is not responding. Start it with uvicorn first.")
            sys.exit(1)
        print("  API is healthy")

        print("\n[2/6] Checking service readiness...")
        readiness = check_readiness(client)
        if "error" in readiness:
            print(f"  Error: {readiness['error']}")
            sys.exit(1)
        for service, status in readiness.get("checks", {}).items():
            print(f"  {service}: {status}")
        if readiness.get("status") != "ok":
            print("  Error: Not all services are ready")
            sys.exit(1)

        print(f"\n[3/6] Uploading: {args.file.name}")
        try:
            doc = upload_document(client, args.file)
        except (httpx.HTTPStatusError, ValueError) as e:
            detail = e.response.text if isinstance(e, httpx.HTTPStatusError) else str(e)
            print(f"  Error uploading: {detail}")
            sys.exit(1)
        document_id = doc["id"]
        print(f"  Document ID: {document_id}")

        print(f"\n[4/6] Running plain-language analysis (max {MAX_WAIT}s)...")
        client.post(f"{API_BASE}/api/documents/analyze", json={"document_ids": [document_id]}).raise_for_status()
        doc = poll_until(client, document_id, "analysis_status", {"complete", "error"})
        if doc["analysis_status"] != "complete":
            print(f"  Analysis did not complete: {doc['analysis_status']}")
            sys.exit(1)
        print("  Analysis completed!              ")

        print(f"\n[5/6] Running contract analysis (max {MAX_WAIT}s)...")
        client.post(f"{API_BASE}/api/documents/{document_id}/contract-analysis").raise_for_status()
        contract_doc = poll_until(client, document_id, "contract_status", {"complete", "error"})
        if contract_doc["contract_status"] != "complete":
            print(f"  Contract analysis did not complete: {contract_doc['contract_status']}")
            sys.exit(1)
        reminders = client.get(f"{API_BASE}/api/documents/{document_id}/reminders").json()["reminders"]
        print("  Contract analysis completed!              ")

        print("\n[6/6] Exporting calendar...")
        resp = client.get(f"{API_BASE}/api/documents/{document_id}/reminders.ics")
        resp.raise_for_status()
        if resp.headers.get("content-type", "").startswith("text/calendar"):
            out = args.out or Path(f"{document_id}_reminders.ics")
            out.write_bytes(resp.content)
            print(f"  Saved {resp.text.count('BEGIN:VEVENT')} event(s) to {out}")
        else:
            print(f"  {resp.json()['message']}")

    if args.json:
        print(json.dumps({"document": doc, "reminders": reminders}, indent=2, default=str))
    else:
        print_analysis(doc)
        print_reminders(reminders)

    sys.exit(0)


if __name__ == "__main__":
    main()
