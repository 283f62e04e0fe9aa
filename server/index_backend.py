"""
Snapshot storage for published indices: JSON files and SQLite.

- A snapshot holds locale id, version, locale config and the analysed
  entries; postings are rebuilt from entries on load, encoders do not run.
- JSON: one file per locale, written to a temp file and renamed into place.
- SQLite: one row per locale plus one row per entry.
"""

import json
import logging
import os
import re
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from dictionary import Dictionary, LocaleConfig

from .errors import SnapshotError
from .index import Index, IndexEntry

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT = 1

_LOCALE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_locale_id(locale_id: str) -> str:
    if not _LOCALE_ID.match(locale_id or ""):
        raise SnapshotError(f"Invalid locale id for snapshot: {locale_id!r}")
    return locale_id


def entry_to_dict(entry: IndexEntry) -> Dict[str, Any]:
    return {
        "food_id": entry.food_id,
        "description": entry.description,
        "popularity_rank": entry.popularity_rank,
        "base_tokens": sorted(entry.base_tokens),
        "tokens": sorted(entry.tokens),
        "phonetic_codes": sorted(entry.phonetic_codes),
    }


def entry_from_dict(d: Dict[str, Any]) -> IndexEntry:
    return IndexEntry(
        food_id=d["food_id"],
        description=d["description"],
        popularity_rank=float(d.get("popularity_rank", 0.0)),
        base_tokens=frozenset(d["base_tokens"]),
        tokens=frozenset(d["tokens"]),
        phonetic_codes=frozenset(d["phonetic_codes"]),
    )


def index_to_snapshot(index: Index) -> Dict[str, Any]:
    return {
        "format": SNAPSHOT_FORMAT,
        "locale_id": index.locale_id,
        "version": index.version,
        "built_at": index.built_at,
        "config": index.config.model_dump(mode="json"),
        "entries": [entry_to_dict(index.entries[k]) for k in sorted(index.entries)],
    }


def index_from_snapshot(data: Dict[str, Any]) -> Index:
    """Reconstruct an Index. Raises SnapshotError on unknown format or missing fields."""
    if data.get("format") != SNAPSHOT_FORMAT:
        raise SnapshotError(f"Unsupported snapshot format: {data.get('format')!r}")
    try:
        config = LocaleConfig.model_validate(data["config"])
        entries = [entry_from_dict(e) for e in data["entries"]]
        return Index.from_entries(
            data["locale_id"],
            int(data["version"]),
            entries,
            Dictionary(config),
            data.get("built_at"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Malformed snapshot: {e}") from e


class SnapshotBackend:
    """Abstract store of one snapshot per locale."""

    def save(self, index: Index) -> None:
        """Persist index, replacing any earlier snapshot of its locale."""
        raise NotImplementedError

    def load(self, locale_id: str) -> Optional[Index]:
        """Return the stored Index for locale_id, or None."""
        raise NotImplementedError

    def locales(self) -> List[str]:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources."""
        pass


class JsonSnapshotBackend(SnapshotBackend):
    """One <locale>.json per locale under directory."""

    def __init__(self, directory: Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, locale_id: str) -> Path:
        return self._dir / f"{_check_locale_id(locale_id)}.json"

    def save(self, index: Index) -> None:
        path = self._path(index.locale_id)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(index_to_snapshot(index), f, ensure_ascii=False)
        os.replace(tmp, path)
        logger.debug("Saved snapshot %s v%d to %s", index.locale_id, index.version, path)

    def load(self, locale_id: str) -> Optional[Index]:
        path = self._path(locale_id)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
        return index_from_snapshot(data)

    def locales(self) -> List[str]:
        return sorted(p.stem for p in self._dir.glob("*.json"))


class SqliteSnapshotBackend(SnapshotBackend):
    """
    SQLite-backed snapshots: snapshots (one row per locale) and
    snapshot_entries (one row per entry). Saves replace a locale in one transaction.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS snapshots (locale_id TEXT PRIMARY KEY, format INTEGER NOT NULL, "
            "version INTEGER NOT NULL, built_at REAL, config_json TEXT NOT NULL)"
        )
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS snapshot_entries (locale_id TEXT NOT NULL, food_id TEXT NOT NULL, "
            "entry_json TEXT NOT NULL, PRIMARY KEY(locale_id, food_id))"
        )
        self._conn.commit()

    def save(self, index: Index) -> None:
        snapshot = index_to_snapshot(index)
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM snapshot_entries WHERE locale_id = ?", (index.locale_id,))
            self._conn.execute(
                "INSERT OR REPLACE INTO snapshots (locale_id, format, version, built_at, config_json) "
                "VALUES (?, ?, ?, ?, ?)",
                (index.locale_id, SNAPSHOT_FORMAT, index.version, index.built_at,
                 json.dumps(snapshot["config"], ensure_ascii=False)),
            )
            self._conn.executemany(
                "INSERT INTO snapshot_entries (locale_id, food_id, entry_json) VALUES (?, ?, ?)",
                [(index.locale_id, e["food_id"], json.dumps(e, ensure_ascii=False)) for e in snapshot["entries"]],
            )

    def load(self, locale_id: str) -> Optional[Index]:
        with self._lock:
            row = self._conn.execute(
                "SELECT format, version, built_at, config_json FROM snapshots WHERE locale_id = ?",
                (locale_id,),
            ).fetchone()
            if row is None:
                return None
            entries = [
                json.loads(r[0])
                for r in self._conn.execute(
                    "SELECT entry_json FROM snapshot_entries WHERE locale_id = ? ORDER BY food_id",
                    (locale_id,),
                )
            ]
        fmt, version, built_at, config_json = row
        return index_from_snapshot({
            "format": fmt,
            "locale_id": locale_id,
            "version": version,
            "built_at": built_at,
            "config": json.loads(config_json),
            "entries": entries,
        })

    def locales(self) -> List[str]:
        with self._lock:
            return [r[0] for r in self._conn.execute("SELECT locale_id FROM snapshots ORDER BY locale_id")]

    def close(self) -> None:
        self._conn.close()
