"""Analysis dispatcher.

Fans analysis requests out to the external analyzers, one concurrent call
per document, and writes each outcome back through the document store.

Flow for a batch:
- every known id is moved to ``analyzing`` before any call is made
- each call lands independently: success completes that document only
- failures become ``error`` statuses and are never re-raised

Every request for an id takes a ticket. An outcome is applied only while
its ticket is still the latest for that id, so a slow call from an older
request can never overwrite the result of a newer one.
"""

from __future__ import annotations

import asyncio
import enum
import itertools
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional

from demystifier.schemas.domain import ContractAnalysisResult, SimplifiedAnalysis
from demystifier.store import AnalysisStatus, ContractStatus, DocumentStore

logger = logging.getLogger(__name__)

GeneralAnalyzer = Callable[[str], Awaitable[SimplifiedAnalysis]]
ContractAnalyzer = Callable[[str], Awaitable[ContractAnalysisResult]]


class BatchPolicy(str, enum.Enum):
    """How one failing document affects the rest of its batch."""

    isolate = "isolate"
    fail_together = "fail_together"


@dataclass
class BatchOutcome:
    """Per-document results of one batch request."""

    completed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    discarded: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class AnalysisDispatcher:
    """Coordinates general and contract analysis for documents in a store."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        analyze_general: GeneralAnalyzer,
        analyze_contract: ContractAnalyzer,
        policy: BatchPolicy | str = BatchPolicy.isolate,
    ):
        self._store = store
        self._analyze_general = analyze_general
        self._analyze_contract = analyze_contract
        self.policy = BatchPolicy(policy)

        self._counter = itertools.count(1)
        self._general_tickets: dict[str, int] = {}
        self._contract_tickets: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()

    # -------
    # Tickets
    # -------
    def _issue(self, tickets: dict[str, int], document_id: str) -> int:
        ticket = next(self._counter)
        tickets[document_id] = ticket
        return ticket

    @staticmethod
    def _is_current(tickets: dict[str, int], document_id: str, ticket: int) -> bool:
        return tickets.get(document_id) == ticket

    @staticmethod
    def _retire(tickets: dict[str, int], document_id: str, ticket: int) -> None:
        if tickets.get(document_id) == ticket:
            del tickets[document_id]

    def _settle(self, tickets: dict[str, int], document_id: str, ticket: int) -> bool:
        """Retire ``ticket``; True if its outcome may still be written to the store."""
        applies = self._is_current(tickets, document_id, ticket) and document_id in self._store
        self._retire(tickets, document_id, ticket)
        return applies

    # ----------------
    # General analysis
    # ----------------
    def _begin_batch(self, document_ids: Iterable[str]) -> tuple[dict[str, int], list[str]]:
        accepted: list[str] = []
        skipped: list[str] = []
        for doc_id in dict.fromkeys(document_ids):
            (accepted if doc_id in self._store else skipped).append(doc_id)

        self._store.set_analysis_status(accepted, AnalysisStatus.analyzing)
        tickets = {doc_id: self._issue(self._general_tickets, doc_id) for doc_id in accepted}

        if skipped:
            logger.info("Skipping %d unknown document id(s)", len(skipped))
        return tickets, skipped

    async def _run_batch(self, tickets: dict[str, int], skipped: list[str]) -> BatchOutcome:
        outcome = BatchOutcome(skipped=list(skipped))
        settled: set[str] = set()

        def fail(doc_id: str, ticket: int) -> None:
            settled.add(doc_id)
            if self._settle(self._general_tickets, doc_id, ticket):
                self._store.set_analysis_status([doc_id], AnalysisStatus.error)
                outcome.failed.append(doc_id)
            else:
                outcome.discarded.append(doc_id)

        async def run_one(doc_id: str, ticket: int) -> None:
            doc = self._store.get(doc_id)
            if doc is None:
                # Removed after the batch was accepted
                settled.add(doc_id)
                self._retire(self._general_tickets, doc_id, ticket)
                outcome.skipped.append(doc_id)
                return

            try:
                result = await self._analyze_general(doc.original_content)
            except Exception as exc:
                if doc_id in settled:
                    # Already failed together with the rest of the batch
                    return
                logger.warning("Analysis failed for document %s: %s", doc_id, exc)
                fail(doc_id, ticket)
                if self.policy is BatchPolicy.fail_together:
                    for other_id, other_ticket in tickets.items():
                        if other_id not in settled:
                            fail(other_id, other_ticket)
                return

            if doc_id in settled:
                outcome.discarded.append(doc_id)
                return
            settled.add(doc_id)
            if self._settle(self._general_tickets, doc_id, ticket):
                self._store.set_analysis_result(doc_id, result)
                outcome.completed.append(doc_id)
            else:
                logger.info("Discarding stale analysis result for document %s", doc_id)
                outcome.discarded.append(doc_id)

        await asyncio.gather(*(run_one(doc_id, ticket) for doc_id, ticket in tickets.items()))

        logger.info(
            "Batch finished: %d completed, %d failed, %d skipped, %d discarded",
            len(outcome.completed),
            len(outcome.failed),
            len(outcome.skipped),
            len(outcome.discarded),
        )
        return outcome

    async def analyze_batch(self, document_ids: Iterable[str]) -> BatchOutcome:
        """Analyze documents concurrently and wait for every call to settle."""
        tickets, skipped = self._begin_batch(document_ids)
        return await self._run_batch(tickets, skipped)

    def start_batch(self, document_ids: Iterable[str]) -> list[str]:
        """Mark documents ``analyzing`` now and analyze them in the background.

        Returns the accepted ids. Must be called from a running event loop.
        """
        tickets, skipped = self._begin_batch(document_ids)
        if tickets:
            self._spawn(self._run_batch(tickets, skipped))
        return list(tickets)

    # -----------------
    # Contract analysis
    # -----------------
    def _begin_reminders(self, document_id: str) -> Optional[int]:
        if document_id not in self._store:
            logger.info("Skipping contract analysis for unknown document %s", document_id)
            return None
        self._store.set_contract_status(document_id, ContractStatus.pending)
        return self._issue(self._contract_tickets, document_id)

    async def _run_reminders(self, document_id: str, ticket: int) -> bool:
        doc = self._store.get(document_id)
        if doc is None:
            self._retire(self._contract_tickets, document_id, ticket)
            return False

        try:
            result = await self._analyze_contract(doc.original_content)
        except Exception as exc:
            logger.warning("Contract analysis failed for document %s: %s", document_id, exc)
            if self._settle(self._contract_tickets, document_id, ticket):
                self._store.set_contract_status(document_id, ContractStatus.error)
            return False

        if not self._settle(self._contract_tickets, document_id, ticket):
            logger.info("Discarding stale contract analysis for document %s", document_id)
            return False
        self._store.set_contract_result(document_id, result)
        logger.info(
            "Contract analysis complete for document %s: %d obligations, %d key dates",
            document_id,
            len(result.obligations),
            len(result.key_dates),
        )
        return True

    async def analyze_for_reminders(self, document_id: str) -> bool:
        """Run contract analysis for one document; True if its result was stored."""
        ticket = self._begin_reminders(document_id)
        if ticket is None:
            return False
        return await self._run_reminders(document_id, ticket)

    def start_reminders(self, document_id: str) -> bool:
        """Mark the contract analysis ``pending`` now and run it in the background."""
        ticket = self._begin_reminders(document_id)
        if ticket is None:
            return False
        self._spawn(self._run_reminders(document_id, ticket))
        return True

    # ----------------
    # Background tasks
    # ----------------
    def _spawn(self, coro: Awaitable) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all background analyses to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel background analyses that are still running."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Cancelled %d in-flight analysis task(s)", len(tasks))


__all__ = ["AnalysisDispatcher", "BatchOutcome", "BatchPolicy"]
