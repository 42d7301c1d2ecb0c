# orientation/pipeline/dispatcher.py
# ============================================================
# Work Dispatcher — Bounded Parallel Fan-out / Fan-in
# ============================================================
# Classifies every page of a document on a pool of worker
# threads and hands the verdicts back in page order.
#
# One dispatch cycle:
#   1. Queue one WorkItem per page, tagged with its 1-based position
#   2. workers = min(parallelism, pages)
#   3. Each worker pops items until the queue is empty, classifies
#      the page and inserts (page number, verdict) into a ResultMap
#   4. Join all workers
#   5. Read the ResultMap in order 1..N
#
# The queue and result map live only inside one `dispatch` call,
# so concurrent dispatches on the same dispatcher never share state.
#
# The first worker error sets a stop event: the other workers
# finish their current page and exit, then the error is raised.
# ============================================================

import os
import queue
import threading
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional

from config.settings import settings
from orientation.classifier.classifier import OrientationClassifier
from orientation.classifier.verdicts import Verdict
from orientation.document.processor import PageImage
from orientation.errors import (
    DispatchCancelled,
    InternalInvariantViolation,
    InvalidInput,
    OrientationError,
    RecognizerFailure,
)
from orientation.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkItem:
    """A page queued for classification, tagged with its document position."""
    page_number: int
    page: PageImage


class ResultMap:
    """
    Thread-safe page number → verdict mapping, insert-once per key.

    Workers never see the same page number twice, so a duplicate
    insert means the queue handed one item out twice.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._verdicts: dict[int, Verdict] = {}

    def insert(self, page_number: int, verdict: Verdict) -> None:
        with self._lock:
            if page_number in self._verdicts:
                raise InternalInvariantViolation(
                    "Duplicate result for page; work queue delivered an item twice",
                    stage="dispatch",
                    page_number=page_number,
                )
            self._verdicts[page_number] = verdict

    def __len__(self) -> int:
        with self._lock:
            return len(self._verdicts)

    def ordered(self, page_count: int) -> list[Verdict]:
        """Return verdicts for pages 1..page_count, failing on any gap."""
        with self._lock:
            missing = [n for n in range(1, page_count + 1) if n not in self._verdicts]
            if missing:
                raise InternalInvariantViolation(
                    f"No result for page(s) {missing}",
                    stage="dispatch",
                    page_number=missing[0],
                )
            return [self._verdicts[n] for n in range(1, page_count + 1)]


def hardware_parallelism() -> int:
    return os.cpu_count() or 1


def resolve_worker_count(page_count: int, parallelism: int) -> int:
    """Never more workers than pages, never zero for a non-empty document."""
    if page_count <= 0:
        return 0
    return max(1, min(parallelism, page_count))


class WorkDispatcher:
    """
    Applies an OrientationClassifier to all pages of a document in parallel.

    Example:
        >>> dispatcher = WorkDispatcher(OrientationClassifier(TesseractRecognizer()))
        >>> dispatcher.dispatch(pages)
        [<Verdict.CORRECT: 'correct'>, <Verdict.UPSIDE_DOWN: 'upside_down'>]
    """

    def __init__(self, classifier: OrientationClassifier, max_workers: Optional[int] = None):
        """
        Args:
            classifier: Classifier shared by all workers.
            max_workers: Parallelism cap. Default: settings.max_workers,
                then the number of CPUs.
        """
        self.classifier = classifier
        self.max_workers = max_workers or settings.max_workers or hardware_parallelism()

    def _work(
        self,
        work_queue: "queue.SimpleQueue[WorkItem]",
        results: ResultMap,
        stop: threading.Event,
        cancel_event: Optional[threading.Event],
    ) -> int:
        """Worker loop. Returns the number of pages this worker classified."""
        done = 0
        while not stop.is_set() and not (cancel_event is not None and cancel_event.is_set()):
            try:
                item = work_queue.get_nowait()
            except queue.Empty:
                break

            try:
                verdict = self.classifier.classify(item.page.image)
                results.insert(item.page_number, verdict)
            except OrientationError as exc:
                stop.set()
                raise exc.with_page(item.page_number)
            except Exception as exc:
                stop.set()
                raise RecognizerFailure(
                    f"Classifier raised {type(exc).__name__}: {exc}",
                    stage="dispatch",
                    page_number=item.page_number,
                ) from exc

            done += 1
            logger.debug(f"Page {item.page_number}: {verdict.value}")
        return done

    def dispatch(
        self,
        pages: Sequence[PageImage],
        cancel_event: Optional[threading.Event] = None,
    ) -> list[Verdict]:
        """
        Classify every page and return the verdicts in page order.

        Args:
            pages: Pages in document order. Their position in the
                sequence, not `page_num`, determines the output slot.
            cancel_event: Optional token; once set, workers stop taking
                new pages and the dispatch raises DispatchCancelled.

        Returns:
            One verdict per page; output[i] belongs to pages[i].

        Raises:
            InvalidInput: If there are no pages.
            OrientationError: The first error any worker hit, with its
                page number attached. No partial result is returned.
        """
        if not pages:
            raise InvalidInput("Cannot dispatch a document with zero pages", stage="dispatch")

        work_queue: "queue.SimpleQueue[WorkItem]" = queue.SimpleQueue()
        for position, page in enumerate(pages, start=1):
            if page is None:
                raise InvalidInput("Page is not set", stage="dispatch", page_number=position)
            work_queue.put(WorkItem(page_number=position, page=page))

        page_count = len(pages)
        worker_count = resolve_worker_count(page_count, self.max_workers)
        results = ResultMap()
        stop = threading.Event()
        first_error: Optional[BaseException] = None
        start = time.perf_counter()

        logger.info(
            f"Dispatching [bold]{page_count}[/bold] pages over "
            f"[bold]{worker_count}[/bold] worker(s)"
        )

        with ThreadPoolExecutor(
            max_workers=worker_count,
            thread_name_prefix="orientation-worker",
        ) as executor:
            futures = [
                executor.submit(self._work, work_queue, results, stop, cancel_event)
                for _ in range(worker_count)
            ]
            for future in as_completed(futures):
                error = future.exception()
                if error is not None and first_error is None:
                    first_error = error

        if first_error is not None:
            logger.error(f"Dispatch aborted after {len(results)}/{page_count} pages: {first_error}")
            raise first_error

        if cancel_event is not None and cancel_event.is_set() and len(results) < page_count:
            raise DispatchCancelled(
                f"Dispatch cancelled after {len(results)}/{page_count} pages",
                stage="dispatch",
            )

        verdicts = results.ordered(page_count)
        logger.info(
            f"Dispatch complete — {page_count} pages in "
            f"{(time.perf_counter() - start) * 1000:.0f}ms"
        )
        return verdicts
