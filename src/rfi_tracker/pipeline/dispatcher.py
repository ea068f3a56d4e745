"""Asynchronous query dispatch with sequence-numbered tickets.

Archive work (aggregation, point extraction) runs on worker threads; the
results come back on a completion queue that the interaction thread drains.
Nothing is cancelled in flight. Each request carries a QueryTicket and the
controller discards any completion that is not the latest for its channel.

Two implementations share one interface:

- QueryDispatcher: pool of threading.Thread workers fed by a request queue
- InlineDispatcher: runs the query at submit time (headless runs, tests)
"""

from dataclasses import dataclass
import logging
import queue
import threading
import time
from typing import Any, Callable, Optional

__all__ = ['QueryTicket', 'Completion', 'QueryDispatcher', 'InlineDispatcher', 'create_dispatcher']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryTicket:
    """Identifies one request: its channel and its sequence number."""
    channel: str
    seq: int


@dataclass(frozen=True)
class Completion:
    """Outcome of one request. Exactly one of result/error is meaningful."""
    ticket: QueryTicket
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _execute(ticket: QueryTicket, fn: Callable, args: tuple) -> Completion:
    try:
        return Completion(ticket=ticket, result=fn(*args))
    except Exception as e:
        logger.debug("Query %s#%d failed: %s", ticket.channel, ticket.seq, e)
        return Completion(ticket=ticket, error=e)


class _QueryWorker(threading.Thread):
    """Consumes requests until stopped; never lets an exception escape."""

    def __init__(self, requests: queue.Queue, completions: queue.Queue,
                 poll_timeout: float, name: str):
        super().__init__(daemon=True, name=name)
        self.requests = requests
        self.completions = completions
        self.poll_timeout = poll_timeout
        self._stop_event = threading.Event()

    def stop(self):
        self._stop_event.set()

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        logger.debug("%s started", self.name)
        while not self.stopped():
            try:
                ticket, fn, args = self.requests.get(timeout=self.poll_timeout)
            except queue.Empty:
                continue

            try:
                self.completions.put(_execute(ticket, fn, args))
            finally:
                self.requests.task_done()
        logger.debug("%s stopped", self.name)


class QueryDispatcher:
    """Thread pool for archive queries.

    Parameters
    ----------
    workers : int
        Number of worker threads.
    max_queue_size : int
        Request queue bound; ``submit`` blocks when it is full.
    poll_timeout : float
        Seconds a worker waits on an empty queue before checking for stop.

    Notes
    -----
    Completions may arrive in any order. Callers must compare ticket sequence
    numbers themselves (see ``ViewStateController.process_completions``).

    Examples
    --------
    >>> dispatcher = QueryDispatcher(workers=2)
    >>> dispatcher.start()
    >>> dispatcher.submit(QueryTicket("layers", 1), aggregator.aggregate_all, collection, anchor)
    >>> completion = dispatcher.poll(timeout=5)
    >>> dispatcher.stop()
    """

    def __init__(self, workers: int = 2, max_queue_size: int = 100, poll_timeout: float = 0.5):
        self.n_workers = workers
        self.poll_timeout = poll_timeout
        self.requests = queue.Queue(maxsize=max_queue_size)
        self.completions = queue.Queue()
        self._workers: list[_QueryWorker] = []
        self._lock = threading.Lock()
        self._pending = 0

    @property
    def pending(self) -> int:
        """Requests submitted but not yet handed back through ``poll``."""
        with self._lock:
            return self._pending

    def is_running(self) -> bool:
        return any(worker.is_alive() for worker in self._workers)

    def start(self):
        if self.is_running():
            return
        self._workers = [
            _QueryWorker(self.requests, self.completions, self.poll_timeout, f"QueryWorker-{i}")
            for i in range(self.n_workers)
        ]
        for worker in self._workers:
            worker.start()
        logger.info("Query dispatcher started with %d workers", self.n_workers)

    def submit(self, ticket: QueryTicket, fn: Callable, *args) -> QueryTicket:
        if not self.is_running():
            raise RuntimeError("Dispatcher is not running; call start() first")
        with self._lock:
            self._pending += 1
        self.requests.put((ticket, fn, args))
        logger.debug("Submitted %s#%d", ticket.channel, ticket.seq)
        return ticket

    def poll(self, timeout: float = 0.0) -> Optional[Completion]:
        """Next completion, waiting up to ``timeout`` seconds (0 = no wait)."""
        try:
            if timeout > 0:
                completion = self.completions.get(timeout=timeout)
            else:
                completion = self.completions.get_nowait()
        except queue.Empty:
            return None
        with self._lock:
            self._pending -= 1
        return completion

    def stop(self, timeout: float = 5.0):
        """Stop workers. Safe to call multiple times."""
        if not self._workers:
            return
        for worker in self._workers:
            worker.stop()
        deadline = time.monotonic() + timeout
        for worker in self._workers:
            worker.join(timeout=max(0.0, deadline - time.monotonic()))
            if worker.is_alive():
                logger.warning("%s did not stop cleanly", worker.name)
        self._workers = []
        logger.info("Query dispatcher stopped")


class InlineDispatcher:
    """Dispatcher that resolves each request synchronously at submit time.

    Completions are still queued and delivered through ``poll`` so the
    controller code path is identical to the threaded one.
    """

    def __init__(self):
        self._completions: list[Completion] = []

    @property
    def pending(self) -> int:
        return len(self._completions)

    def is_running(self) -> bool:
        return True

    def start(self):
        pass

    def submit(self, ticket: QueryTicket, fn: Callable, *args) -> QueryTicket:
        self._completions.append(_execute(ticket, fn, args))
        return ticket

    def poll(self, timeout: float = 0.0) -> Optional[Completion]:
        if not self._completions:
            return None
        return self._completions.pop(0)

    def stop(self, timeout: float = 5.0):
        self._completions.clear()


def create_dispatcher(config):
    """Build the dispatcher named by ``config.dispatcher.mode``."""
    cfg = config.dispatcher
    if cfg.mode == "inline":
        return InlineDispatcher()
    return QueryDispatcher(
        workers=cfg.workers, max_queue_size=cfg.max_queue_size, poll_timeout=cfg.poll_timeout_sec
    )
