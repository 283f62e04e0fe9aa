"""
JSON file record source.

File layout: {"foods": [{"food_id", "locale_id", "description",
"popularity_rank", "alt_names"}, ...]} or a bare list. The file is re-read on
every fetch so each rebuild sees the current contents.
"""

import json
from pathlib import Path
from typing import List, Union

from server.errors import RecordSourceError
from server.index import FoodRecord

from .base import RecordSource, record_from_dict


class JsonRecordSource(RecordSource):
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _load(self) -> List[FoodRecord]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RecordSourceError(f"Cannot read food records from {self.path}: {e}") from e
        items = raw.get("foods", []) if isinstance(raw, dict) else raw
        if not isinstance(items, list):
            raise RecordSourceError(f"{self.path}: expected a list of foods")
        return [record_from_dict(item) for item in items if isinstance(item, dict)]

    def fetch_food_records(self, locale_id: str) -> List[FoodRecord]:
        return [r for r in self._load() if r.locale_id == locale_id]

    def locales(self) -> List[str]:
        return sorted({r.locale_id for r in self._load() if r.locale_id})
