"""
Index data types.

- FoodRecord: raw input from a record source.
- IndexEntry: one analysed record.
- Index: immutable per-locale structure (entries plus token and phonetic
  postings). Mappings are read-only views and posting sets are frozensets,
  so a published Index can be shared by any number of reader threads.
"""

import time
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple

from dictionary import Dictionary, LocaleConfig


class FoodRecord(NamedTuple):
    food_id: str
    locale_id: str
    description: str
    popularity_rank: float = 0.0
    alt_names: Tuple[str, ...] = ()


class IndexEntry(NamedTuple):
    food_id: str
    description: str
    popularity_rank: float
    base_tokens: FrozenSet[str]
    tokens: FrozenSet[str]
    phonetic_codes: FrozenSet[str]


class Query(NamedTuple):
    text: str
    locale_id: str


class MatchResult(NamedTuple):
    food_id: str
    score: float
    matched_tokens: Tuple[str, ...]
    description: str = ""


class SearchResults(NamedTuple):
    """Matches for one query; index_available=False means no index for the locale."""
    locale_id: str
    version: Optional[int]
    index_available: bool
    matches: List[MatchResult]


class BuildReport(NamedTuple):
    locale_id: str
    version: int
    total_records: int
    indexed_records: int
    skipped_records: int
    degraded: bool
    skip_reasons: Dict[str, int]


class LocaleState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    STALE = "stale"


class RebuildStatus(NamedTuple):
    locale_id: str
    version: Optional[int]
    state: LocaleState
    last_error: Optional[str] = None
    degraded: bool = False
    skipped_records: int = 0
    attempts: int = 0
    last_built_at: Optional[float] = None


Postings = Dict[str, Set[str]]


def add_postings(postings: Postings, keys: Iterable[str], food_id: str) -> None:
    for key in keys:
        postings.setdefault(key, set()).add(food_id)


def _freeze(postings: Postings) -> Mapping[str, FrozenSet[str]]:
    return MappingProxyType({k: frozenset(v) for k, v in postings.items()})


class Index:
    """
    Published, read-only index for one locale.

    Carries the Dictionary it was built with; queries must be analysed by
    the same pipeline.
    """

    __slots__ = ("locale_id", "version", "entries", "token_postings", "phonetic_postings", "dictionary", "built_at")

    def __init__(
        self,
        locale_id: str,
        version: int,
        entries: Mapping[str, IndexEntry],
        token_postings: Postings,
        phonetic_postings: Postings,
        dictionary: Dictionary,
        built_at: Optional[float] = None,
    ) -> None:
        self.locale_id = locale_id
        self.version = version
        self.entries: Mapping[str, IndexEntry] = MappingProxyType(dict(entries))
        self.token_postings = _freeze(token_postings)
        self.phonetic_postings = _freeze(phonetic_postings)
        self.dictionary = dictionary
        self.built_at = built_at if built_at is not None else time.time()

    @classmethod
    def from_entries(
        cls,
        locale_id: str,
        version: int,
        entries: Iterable[IndexEntry],
        dictionary: Dictionary,
        built_at: Optional[float] = None,
    ) -> "Index":
        """Rebuild postings from entries (snapshot restore; no encoder runs)."""
        by_id: Dict[str, IndexEntry] = {}
        tokens: Postings = {}
        codes: Postings = {}
        for entry in entries:
            by_id[entry.food_id] = entry
            add_postings(tokens, entry.tokens, entry.food_id)
            add_postings(codes, entry.phonetic_codes, entry.food_id)
        return cls(locale_id, version, by_id, tokens, codes, dictionary, built_at)

    @property
    def config(self) -> LocaleConfig:
        return self.dictionary.config

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Index(locale_id={self.locale_id!r}, version={self.version}, entries={len(self.entries)})"
