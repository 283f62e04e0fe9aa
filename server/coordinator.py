"""
Rebuild coordination.

- One build per locale at a time on a thread pool; locales build in parallel.
- Single flight: a request while a build is queued is dropped as a
  duplicate; a request while building leaves one follow-up run pending.
- Failures retry with capped exponential backoff; after max_attempts the
  locale is marked stale and the last published Index keeps serving.
- A RebuildScheduler thread can request all locales on an interval.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from .index import BuildReport, LocaleState, RebuildStatus
from .registry import IndexRegistry

logger = logging.getLogger(__name__)

SCHEDULED = "scheduled"
DEDUPLICATED = "deduplicated"
COALESCED = "coalesced"
REJECTED = "rejected"


class RebuildRequest(NamedTuple):
    locale_id: str
    outcome: str

    @property
    def accepted(self) -> bool:
        return self.outcome != REJECTED


class JobStatusReporter:
    """Receives build outcomes (job layer, admin surfaces)."""

    def build_started(self, locale_id: str, attempt: int) -> None:
        pass

    def build_succeeded(self, report: BuildReport) -> None:
        pass

    def build_failed(self, locale_id: str, error: BaseException, attempts: int) -> None:
        pass


class LoggingReporter(JobStatusReporter):
    def build_started(self, locale_id: str, attempt: int) -> None:
        logger.info("Locale %s: rebuild started (attempt %d)", locale_id, attempt)

    def build_succeeded(self, report: BuildReport) -> None:
        logger.info(
            "Locale %s: rebuild succeeded, version %d, %d/%d records indexed",
            report.locale_id, report.version, report.indexed_records, report.total_records,
        )

    def build_failed(self, locale_id: str, error: BaseException, attempts: int) -> None:
        logger.error("Locale %s: rebuild failed after %d attempts: %s", locale_id, attempts, error)


class _LocaleSlot:
    __slots__ = ("state", "queued", "running", "pending", "last_error", "attempts", "report", "last_built_at")

    def __init__(self) -> None:
        self.state = LocaleState.IDLE
        self.queued = False
        self.running = False
        self.pending = False
        self.last_error: Optional[str] = None
        self.attempts = 0
        self.report: Optional[BuildReport] = None
        self.last_built_at: Optional[float] = None


class RebuildCoordinator:
    """
    Runs build_fn(locale_id) -> BuildReport in the background.
    build_fn fetches records, builds and publishes; any exception is a failed attempt.
    """

    def __init__(
        self,
        build_fn: Callable[[str], BuildReport],
        registry: IndexRegistry,
        reporter: Optional[JobStatusReporter] = None,
        max_attempts: int = 3,
        backoff_base: float = 0.5,
        backoff_max: float = 30.0,
        workers: int = 2,
        locales: Optional[Callable[[], Iterable[str]]] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._build_fn = build_fn
        self.registry = registry
        self.reporter = reporter or LoggingReporter()
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self._locales = locales or registry.locales
        self._slots: Dict[str, _LocaleSlot] = {}
        self._cond = threading.Condition()
        self._active = 0
        self._stop = threading.Event()
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rebuild")

    def backoff_delay(self, attempt: int) -> float:
        """Delay after failed attempt number `attempt` (1-based)."""
        return min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)

    def request_rebuild(self, locale_id: str) -> RebuildRequest:
        with self._cond:
            if self._stop.is_set():
                return RebuildRequest(locale_id, REJECTED)
            slot = self._slots.setdefault(locale_id, _LocaleSlot())
            if slot.queued:
                return RebuildRequest(locale_id, DEDUPLICATED)
            if slot.running:
                slot.pending = True
                return RebuildRequest(locale_id, COALESCED)
            slot.queued = True
            self._active += 1
        try:
            self._executor.submit(self._run, locale_id)
        except RuntimeError:
            # executor shut down between the check above and submit
            with self._cond:
                slot.queued = False
                self._active -= 1
                self._cond.notify_all()
            return RebuildRequest(locale_id, REJECTED)
        logger.debug("Locale %s: rebuild scheduled", locale_id)
        return RebuildRequest(locale_id, SCHEDULED)

    def request_rebuild_all(self, locale_ids: Optional[Iterable[str]] = None) -> List[RebuildRequest]:
        """Request every given locale; by default every known locale."""
        ids = list(locale_ids) if locale_ids is not None else list(self._locales())
        return [self.request_rebuild(locale_id) for locale_id in ids]

    def status(self, locale_id: str) -> RebuildStatus:
        index = self.registry.current(locale_id)
        version = index.version if index is not None else None
        with self._cond:
            slot = self._slots.get(locale_id)
            if slot is None:
                built_at = index.built_at if index is not None else None
                return RebuildStatus(locale_id, version, LocaleState.IDLE, last_built_at=built_at)
            report = slot.report
            return RebuildStatus(
                locale_id=locale_id,
                version=version,
                state=slot.state,
                last_error=slot.last_error,
                degraded=report.degraded if report else False,
                skipped_records=report.skipped_records if report else 0,
                attempts=slot.attempts,
                last_built_at=slot.last_built_at,
            )

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no rebuild is queued or running. False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._active == 0, timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting requests; in-progress builds finish, backoff waits end early."""
        self._stop.set()
        self._executor.shutdown(wait=wait)

    def _notify(self, call: Callable[[], None]) -> None:
        try:
            call()
        except Exception:
            logger.exception("Job status reporter raised")

    def _run(self, locale_id: str) -> None:
        with self._cond:
            slot = self._slots[locale_id]
            slot.queued = False
            slot.running = True
        finished = False
        try:
            while True:
                self._run_with_retries(locale_id, slot)
                # pending check and release share one critical section, so a
                # request either lands in pending or sees running=False
                with self._cond:
                    if slot.pending and not self._stop.is_set():
                        slot.pending = False
                        continue
                    slot.pending = False
                    self._release(slot)
                    finished = True
                    return
        finally:
            if not finished:
                with self._cond:
                    self._release(slot)

    def _release(self, slot: _LocaleSlot) -> None:
        # caller holds self._cond
        slot.running = False
        self._active -= 1
        self._cond.notify_all()

    def _run_with_retries(self, locale_id: str, slot: _LocaleSlot) -> None:
        with self._cond:
            slot.state = LocaleState.BUILDING
            slot.attempts = 0
        attempt = 0
        while True:
            attempt += 1
            with self._cond:
                slot.attempts = attempt
            self._notify(lambda: self.reporter.build_started(locale_id, attempt))
            try:
                report = self._build_fn(locale_id)
            except Exception as e:
                error = f"{type(e).__name__}: {e}"
                with self._cond:
                    slot.last_error = error
                if attempt >= self.max_attempts or self._stop.is_set():
                    self._mark_stale(locale_id, slot, e, attempt)
                    return
                delay = self.backoff_delay(attempt)
                logger.warning(
                    "Locale %s: rebuild attempt %d/%d failed (%s); retrying in %.2fs",
                    locale_id, attempt, self.max_attempts, error, delay,
                )
                if self._stop.wait(delay):
                    self._mark_stale(locale_id, slot, e, attempt)
                    return
                continue
            with self._cond:
                slot.state = LocaleState.IDLE
                slot.last_error = None
                slot.report = report
                slot.last_built_at = time.time()
            self._notify(lambda: self.reporter.build_succeeded(report))
            return

    def _mark_stale(self, locale_id: str, slot: _LocaleSlot, error: BaseException, attempts: int) -> None:
        with self._cond:
            slot.state = LocaleState.STALE
        index = self.registry.current(locale_id)
        logger.error(
            "Locale %s: marked stale after %d attempts; serving version %s",
            locale_id, attempts, index.version if index is not None else None,
        )
        self._notify(lambda: self.reporter.build_failed(locale_id, error, attempts))


class RebuildScheduler:
    """Daemon thread requesting a rebuild of all locales every `interval` seconds."""

    def __init__(self, coordinator: RebuildCoordinator, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.coordinator = coordinator
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name="rebuild-scheduler", daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            requests = self.coordinator.request_rebuild_all()
            logger.debug("Periodic rebuild: %s", [(r.locale_id, r.outcome) for r in requests])

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
