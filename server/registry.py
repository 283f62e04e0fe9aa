"""
Per-locale slot holding the current Index.

Readers take a reference with current() and keep using it for the whole
query; publish() replaces the reference under a lock. Versions are
allocated here and strictly increase per locale.
"""

import logging
import threading
from typing import Dict, List, Optional

from .index import Index

logger = logging.getLogger(__name__)


class IndexRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: Dict[str, Index] = {}
        self._versions: Dict[str, int] = {}

    def current(self, locale_id: str) -> Optional[Index]:
        return self._current.get(locale_id)

    def next_version(self, locale_id: str) -> int:
        with self._lock:
            version = self._versions.get(locale_id, 0) + 1
            self._versions[locale_id] = version
            return version

    def publish(self, index: Index) -> bool:
        """
        Make index current for its locale. Returns False (and keeps the
        current one) when index is not newer than what is already published.
        """
        with self._lock:
            current = self._current.get(index.locale_id)
            if current is not None and current.version >= index.version:
                logger.warning(
                    "Locale %s: refusing to publish version %d over %d",
                    index.locale_id, index.version, current.version,
                )
                return False
            self._current[index.locale_id] = index
            if self._versions.get(index.locale_id, 0) < index.version:
                self._versions[index.locale_id] = index.version
        logger.info("Locale %s: published version %d (%d entries)", index.locale_id, index.version, len(index))
        return True

    def locales(self) -> List[str]:
        with self._lock:
            return sorted(self._current)
