"""Food index: building, publishing, matching and rebuild coordination."""

from .builder import IndexBuilder
from .coordinator import JobStatusReporter, LoggingReporter, RebuildCoordinator, RebuildRequest, RebuildScheduler
from .errors import FoodIndexError, RecordSourceError, SnapshotError, UnknownLocaleError
from .index import (
    BuildReport,
    FoodRecord,
    Index,
    IndexEntry,
    LocaleState,
    MatchResult,
    Query,
    RebuildStatus,
    SearchResults,
)
from .matcher import Matcher, ScoringWeights, search_index
from .registry import IndexRegistry
from .server import FoodIndexServer

__all__ = [
    "IndexBuilder",
    "JobStatusReporter",
    "LoggingReporter",
    "RebuildCoordinator",
    "RebuildRequest",
    "RebuildScheduler",
    "FoodIndexError",
    "RecordSourceError",
    "SnapshotError",
    "UnknownLocaleError",
    "BuildReport",
    "FoodRecord",
    "Index",
    "IndexEntry",
    "LocaleState",
    "MatchResult",
    "Query",
    "RebuildStatus",
    "SearchResults",
    "Matcher",
    "ScoringWeights",
    "search_index",
    "IndexRegistry",
    "FoodIndexServer",
]
