"""
Food index server: the facade the HTTP backend, CLI and benchmark use.

- search() reads the current Index of a locale; it never waits for a build.
- Rebuilds go through the RebuildCoordinator (single flight, retries).
- Each published Index is persisted to the snapshot backend, if any, and
  snapshots are restored on warm start.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from dictionary import LocaleConfig, load_locale_configs

from .builder import IndexBuilder
from .coordinator import JobStatusReporter, RebuildCoordinator, RebuildRequest
from .errors import SnapshotError, UnknownLocaleError
from .index import BuildReport, Query, RebuildStatus, SearchResults
from .index_backend import JsonSnapshotBackend, SnapshotBackend, SqliteSnapshotBackend
from .matcher import Matcher, ScoringWeights
from .registry import IndexRegistry

if TYPE_CHECKING:
    from sources.base import RecordSource

logger = logging.getLogger(__name__)


class FoodIndexServer:
    """Per-locale food search over published indices, with background rebuilds."""

    def __init__(
        self,
        source: "RecordSource",
        storage_dir: Optional[Union[str, Path]] = None,
        use_sqlite_snapshots: bool = False,
        locale_configs: Optional[Dict[str, LocaleConfig]] = None,
        locales_config_path: Optional[Union[str, Path]] = None,
        weights: Optional[ScoringWeights] = None,
        degraded_threshold: float = 0.1,
        max_attempts: int = 3,
        backoff_base: float = 0.5,
        backoff_max: float = 30.0,
        workers: int = 2,
        reporter: Optional[JobStatusReporter] = None,
    ):
        self.source = source
        self._locales_config_path = Path(locales_config_path) if locales_config_path else None
        self._base_configs = locale_configs
        self.registry = IndexRegistry()
        self.builder = IndexBuilder(
            self.registry,
            load_locale_configs(self._locales_config_path, locale_configs),
            degraded_threshold=degraded_threshold,
        )
        self.matcher = Matcher(self.registry, weights)
        self._backend: Optional[SnapshotBackend] = None
        if storage_dir is not None:
            storage = Path(storage_dir)
            if use_sqlite_snapshots:
                self._backend = SqliteSnapshotBackend(storage / "snapshots.db")
            else:
                self._backend = JsonSnapshotBackend(storage / "snapshots")
        self.coordinator = RebuildCoordinator(
            self._rebuild_locale,
            self.registry,
            reporter=reporter,
            max_attempts=max_attempts,
            backoff_base=backoff_base,
            backoff_max=backoff_max,
            workers=workers,
            locales=self.locales,
        )

    def locales(self) -> List[str]:
        """Locale ids that have a configuration."""
        return sorted(self.builder.locale_configs)

    def _rebuild_locale(self, locale_id: str) -> BuildReport:
        """One rebuild attempt: reload config, fetch records, build, publish, persist."""
        if self._locales_config_path is not None:
            self.builder.locale_configs = load_locale_configs(self._locales_config_path, self._base_configs)
        config = self.builder.config_for(locale_id)
        records = self.source.fetch_food_records(locale_id)
        index, report = self.builder.build(locale_id, records, config)
        if self.registry.publish(index) and self._backend is not None:
            try:
                self._backend.save(index)
            except (OSError, SnapshotError):
                logger.exception("Locale %s: snapshot save failed for version %d", locale_id, index.version)
        return report

    def search(self, locale_id: str, text: str, limit: int = 20) -> SearchResults:
        return self.matcher.search(Query(text, locale_id), limit)

    def rebuild_status(self, locale_id: str) -> RebuildStatus:
        if locale_id not in self.builder.locale_configs and self.registry.current(locale_id) is None:
            raise UnknownLocaleError(locale_id)
        return self.coordinator.status(locale_id)

    def request_rebuild(self, locale_id: str) -> RebuildRequest:
        if locale_id not in self.builder.locale_configs:
            raise UnknownLocaleError(locale_id)
        return self.coordinator.request_rebuild(locale_id)

    def request_rebuild_all(self) -> List[RebuildRequest]:
        return self.coordinator.request_rebuild_all(self.locales())

    def rebuild_and_wait(self, locale_ids: Optional[List[str]] = None, timeout: Optional[float] = None) -> List[RebuildStatus]:
        """Request rebuilds and block until the coordinator is idle (CLI, tests)."""
        ids = locale_ids if locale_ids is not None else self.locales()
        for locale_id in ids:
            self.request_rebuild(locale_id)
        self.coordinator.wait_idle(timeout)
        return [self.coordinator.status(locale_id) for locale_id in ids]

    def load_snapshots(self) -> List[str]:
        """Publish every readable snapshot. Returns the restored locale ids."""
        if self._backend is None:
            return []
        restored = []
        for locale_id in self._backend.locales():
            try:
                index = self._backend.load(locale_id)
            except SnapshotError as e:
                logger.warning("Locale %s: snapshot not restored: %s", locale_id, e)
                continue
            if index is not None and self.registry.publish(index):
                restored.append(locale_id)
        if restored:
            logger.info("Restored snapshots: %s", ", ".join(restored))
        return restored

    def warm_start(self) -> List[str]:
        """Restore snapshots, then schedule builds for configured locales that have none."""
        restored = set(self.load_snapshots())
        missing = [l for l in self.locales() if l not in restored]
        for locale_id in missing:
            self.coordinator.request_rebuild(locale_id)
        return missing

    def close(self) -> None:
        """Stop the coordinator and release the snapshot store."""
        self.coordinator.shutdown(wait=True)
        if self._backend is not None:
            self._backend.close()
