"""
Index service: the process-wide FoodIndexServer for the API.

- SqlRecordSource reads the foods table (one session per fetch, so a
  rebuild sees one consistent read).
- DatabaseJobReporter records every rebuild attempt in rebuild_jobs.
- get_index_server() creates the server lazily, restores snapshots and
  schedules builds for locales without one.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from server import BuildReport, FoodIndexServer, FoodRecord, LoggingReporter, RebuildScheduler, ScoringWeights
from server.errors import RecordSourceError
from sources import RecordSource

from .. import config
from ..database import SessionLocal
from ..models import Food, RebuildJob

logger = logging.getLogger(__name__)


class SqlRecordSource(RecordSource):
    """Food records from the foods table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    def fetch_food_records(self, locale_id: str) -> List[FoodRecord]:
        try:
            with self._session_factory() as db:
                rows = db.query(Food).filter(Food.locale_id == locale_id).order_by(Food.id).all()
                return [
                    FoodRecord(
                        food_id=row.food_id,
                        locale_id=row.locale_id,
                        description=row.description or "",
                        popularity_rank=row.popularity_rank or 0.0,
                        alt_names=tuple(json.loads(row.alt_names_json)) if row.alt_names_json else (),
                    )
                    for row in rows
                ]
        except (SQLAlchemyError, ValueError) as e:
            raise RecordSourceError(f"Cannot fetch foods for locale {locale_id!r}: {e}") from e

    def locales(self) -> List[str]:
        try:
            with self._session_factory() as db:
                return [r[0] for r in db.query(Food.locale_id).distinct().order_by(Food.locale_id)]
        except SQLAlchemyError as e:
            raise RecordSourceError(f"Cannot list locales: {e}") from e


class DatabaseJobReporter(LoggingReporter):
    """Logs like LoggingReporter and writes one rebuild_jobs row per event."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    def _record(self, **fields) -> None:
        with self._session_factory() as db:
            db.add(RebuildJob(**fields))
            db.commit()

    def build_started(self, locale_id: str, attempt: int) -> None:
        super().build_started(locale_id, attempt)
        self._record(locale_id=locale_id, status="started", attempt=attempt)

    def build_succeeded(self, report: BuildReport) -> None:
        super().build_succeeded(report)
        self._record(
            locale_id=report.locale_id,
            status="succeeded",
            version=report.version,
            indexed_records=report.indexed_records,
            skipped_records=report.skipped_records,
            degraded=report.degraded,
        )

    def build_failed(self, locale_id: str, error: BaseException, attempts: int) -> None:
        super().build_failed(locale_id, error, attempts)
        self._record(locale_id=locale_id, status="failed", attempt=attempts, error=str(error))


_lock = threading.Lock()
_server: Optional[FoodIndexServer] = None
_scheduler: Optional[RebuildScheduler] = None


def _locales_config_path() -> Optional[Path]:
    if config.LOCALES_CONFIG and Path(config.LOCALES_CONFIG).is_file():
        return Path(config.LOCALES_CONFIG)
    return None


def create_index_server(source: Optional[RecordSource] = None) -> FoodIndexServer:
    return FoodIndexServer(
        source or SqlRecordSource(),
        storage_dir=config.STORAGE_DIR,
        use_sqlite_snapshots=config.USE_SQLITE_SNAPSHOTS,
        locales_config_path=_locales_config_path(),
        weights=ScoringWeights(
            exact=config.WEIGHT_EXACT,
            synonym=config.WEIGHT_SYNONYM,
            phonetic=config.WEIGHT_PHONETIC,
            length_penalty=config.WEIGHT_LENGTH_PENALTY,
        ),
        degraded_threshold=config.DEGRADED_THRESHOLD,
        max_attempts=config.REBUILD_MAX_ATTEMPTS,
        backoff_base=config.REBUILD_BACKOFF_BASE,
        backoff_max=config.REBUILD_BACKOFF_MAX,
        workers=config.REBUILD_WORKERS,
        reporter=DatabaseJobReporter(),
    )


def get_index_server() -> FoodIndexServer:
    """Process-wide server; first call restores snapshots and schedules missing builds."""
    global _server, _scheduler
    with _lock:
        if _server is None:
            _server = create_index_server()
            missing = _server.warm_start()
            if missing:
                logger.info("No snapshot for %s; rebuild scheduled", ", ".join(missing))
            if config.REBUILD_INTERVAL > 0:
                _scheduler = RebuildScheduler(_server.coordinator, config.REBUILD_INTERVAL)
                _scheduler.start()
        return _server


def shutdown_index_server() -> None:
    global _server, _scheduler
    with _lock:
        if _scheduler is not None:
            _scheduler.stop()
            _scheduler = None
        if _server is not None:
            _server.close()
            _server = None
