import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Mapping, Optional, Tuple
from loguru import logger
from docfetch.cache.db import CacheStore
from docfetch.core.config import settings
from docfetch.fetch.base import BaseFetcher, FetchFailure
from docfetch.fetch.utils import now_timestamp_str


class RefreshInProgressError(Exception):
    """Raised when a pass is requested while another one is still running"""


class RefreshOutcome(str, Enum):
    ALL_SUCCEEDED = "all_succeeded"
    ALL_FAILED = "all_failed"
    MIXED = "mixed"
    NOTHING_TO_DO = "nothing_to_do"


@dataclass
class RefreshReport:
    success_count: int = 0
    failure_count: int = 0
    failures: List[Tuple[int, FetchFailure]] = field(default_factory=list)

    @property
    def outcome(self) -> RefreshOutcome:
        if self.success_count == 0 and self.failure_count == 0:
            return RefreshOutcome.NOTHING_TO_DO
        if self.failure_count == 0:
            return RefreshOutcome.ALL_SUCCEEDED
        if self.success_count == 0:
            return RefreshOutcome.ALL_FAILED
        return RefreshOutcome.MIXED

    def failure_lines(self) -> List[str]:
        return [f"Doc #{doc_id}: {failure.message}" for doc_id, failure in self.failures]

    def summary_lines(self) -> List[str]:
        """Operator-facing summary, one message per line"""
        if self.outcome is RefreshOutcome.NOTHING_TO_DO:
            return ["No documents are registered."]

        lines = []
        if self.success_count > 0:
            lines.append(f"{self.success_count} Google Doc(s) successfully fetched and saved!")
        if self.failure_count > 0:
            lines.append(
                f"{self.failure_count} Google Doc(s) could not be fetched. "
                "Using the previous import for these documents."
            )
            lines.extend(self.failure_lines())
        if self.outcome is RefreshOutcome.ALL_FAILED:
            lines.append("All fetch attempts failed. Previous imports are being used.")
        return lines


class RefreshOrchestrator:
    """
    Runs one pass over every registered document.

    Entries are fetched sequentially in ascending id order. A successful
    fetch replaces the stored content and timestamp; a failed one leaves
    them exactly as they were. Content is only written while the registry
    still maps the id to the fetched URL, so an entry removed or changed
    mid-pass is not brought back. Only one pass may run at a time.
    """

    def __init__(
        self,
        store: CacheStore,
        fetcher: BaseFetcher,
        pause_seconds: float = None,
        clock: Callable[[], str] = now_timestamp_str,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.fetcher = fetcher
        self.pause_seconds = settings.FETCH_PAUSE_SECONDS if pause_seconds is None else pause_seconds
        self._clock = clock
        self._sleep = sleep
        self._pass_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._pass_lock.locked()

    def refresh_all(self, entries: Optional[Mapping[int, str]] = None) -> RefreshReport:
        if not self._pass_lock.acquire(blocking=False):
            raise RefreshInProgressError("A refresh pass is already running")
        try:
            if entries is None:
                entries = self.store.get_urls()
            return self._run_pass(entries)
        finally:
            self._pass_lock.release()

    def _run_pass(self, entries: Mapping[int, str]) -> RefreshReport:
        report = RefreshReport()
        logger.info("Refresh pass started for {} document(s)", len(entries))

        for position, doc_id in enumerate(sorted(entries)):
            if position > 0 and self.pause_seconds > 0:
                self._sleep(self.pause_seconds)

            url = entries[doc_id]
            outcome = self._fetch_one(doc_id, url)

            if outcome.ok:
                if self._save_if_still_registered(doc_id, url, outcome.content):
                    report.success_count += 1
            else:
                report.failure_count += 1
                report.failures.append((doc_id, outcome))
                logger.warning(
                    "Document #{} not refreshed ({}): {}",
                    doc_id, outcome.reason.value, outcome.message,
                )

        logger.info(
            "Refresh pass finished: {} succeeded, {} failed ({})",
            report.success_count, report.failure_count, report.outcome.value,
        )
        return report

    def _save_if_still_registered(self, doc_id: int, url: str, content: str) -> bool:
        """Write only while the id still maps to the URL that was fetched"""
        with self.store.lock:
            if self.store.get_urls().get(doc_id) != url:
                logger.info(
                    "Discarding fetched content for document #{}: removed or re-pointed during the pass",
                    doc_id,
                )
                return False
            self.store.save_fetch_result(doc_id, content, self._clock())
        logger.debug("Stored {} characters for document #{}", len(content), doc_id)
        return True

    def _fetch_one(self, doc_id: int, url: str):
        try:
            return self.fetcher.fetch(url)
        except Exception as e:
            logger.exception("Unexpected error fetching document #{}", doc_id)
            return FetchFailure.transport_error(str(e) or e.__class__.__name__)
