"""
Record sources: where a rebuild gets its food records.

fetch_food_records(locale_id) returns a full, consistent snapshot of the
locale's records; an unreachable source raises RecordSourceError.
"""

from typing import List

from server.index import FoodRecord


class RecordSource:
    """Abstract supplier of FoodRecords per locale."""

    def fetch_food_records(self, locale_id: str) -> List[FoodRecord]:
        raise NotImplementedError

    def locales(self) -> List[str]:
        """Locales this source has records for."""
        raise NotImplementedError


def record_from_dict(item: dict, default_locale: str = "") -> FoodRecord:
    """
    Coerce a raw mapping into a FoodRecord. Missing fields become empty so
    the builder can count the record as malformed instead of failing.
    """
    alt = item.get("alt_names") or ()
    if isinstance(alt, str):
        alt = (alt,)
    rank = item.get("popularity_rank")
    try:
        rank = float(rank) if rank is not None else 0.0
    except (TypeError, ValueError):
        rank = 0.0
    return FoodRecord(
        food_id=str(item.get("food_id") or ""),
        locale_id=str(item.get("locale_id") or default_locale),
        description=str(item.get("description") or ""),
        popularity_rank=rank,
        alt_names=tuple(str(a) for a in alt if a),
    )
