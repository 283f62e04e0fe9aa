"""In-memory record source (tests, demo, benchmark)."""

import threading
from typing import Dict, Iterable, List

from server.index import FoodRecord

from .base import RecordSource


class InMemoryRecordSource(RecordSource):
    def __init__(self, records: Iterable[FoodRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, List[FoodRecord]] = {}
        self.add(records)

    def add(self, records: Iterable[FoodRecord]) -> None:
        with self._lock:
            for r in records:
                self._records.setdefault(r.locale_id, []).append(r)

    def replace(self, locale_id: str, records: Iterable[FoodRecord]) -> None:
        """Swap a locale's records (simulates a data change before a rebuild)."""
        with self._lock:
            self._records[locale_id] = list(records)

    def fetch_food_records(self, locale_id: str) -> List[FoodRecord]:
        with self._lock:
            return list(self._records.get(locale_id, ()))

    def locales(self) -> List[str]:
        with self._lock:
            return sorted(self._records)
