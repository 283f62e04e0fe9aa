"""
Index construction.

- One pass over a locale's records; each record is analysed by the locale's
  Dictionary and merged into fresh posting maps.
- Malformed records are skipped and counted by reason, never raised.
- The finished Index gets the next version for the locale and is returned
  whole; nothing is published until the caller swaps it in.
"""

import logging
import math
from typing import Dict, Iterable, Optional, Tuple

from dictionary import DEFAULT_LOCALES, Dictionary, LocaleConfig

from .errors import UnknownLocaleError
from .index import BuildReport, FoodRecord, Index, IndexEntry, Postings, add_postings
from .registry import IndexRegistry

logger = logging.getLogger(__name__)

SKIP_MISSING_ID = "missing_id"
SKIP_LOCALE_MISMATCH = "locale_mismatch"
SKIP_EMPTY_DESCRIPTION = "empty_description"
SKIP_NO_TOKENS = "no_tokens"
SKIP_DUPLICATE_ID = "duplicate_id"
SKIP_MALFORMED = "malformed"


def _popularity(value) -> float:
    """popularity_rank as a finite float; None counts as 0."""
    rank = float(value or 0.0)
    if not math.isfinite(rank):
        raise ValueError(f"popularity_rank is not finite: {value!r}")
    return rank


class IndexBuilder:
    """Builds Index objects; versions come from the registry."""

    def __init__(
        self,
        registry: IndexRegistry,
        locale_configs: Optional[Dict[str, LocaleConfig]] = None,
        degraded_threshold: float = 0.1,
    ) -> None:
        self.registry = registry
        self.locale_configs = dict(DEFAULT_LOCALES if locale_configs is None else locale_configs)
        self.degraded_threshold = degraded_threshold

    def config_for(self, locale_id: str) -> LocaleConfig:
        config = self.locale_configs.get(locale_id)
        if config is None:
            raise UnknownLocaleError(locale_id)
        return config

    def build(
        self,
        locale_id: str,
        records: Iterable[FoodRecord],
        config: Optional[LocaleConfig] = None,
    ) -> Tuple[Index, BuildReport]:
        """
        Build a new Index for locale_id from records.
        Raises UnknownLocaleError / UnknownEncoderError on misconfiguration.
        """
        config = config if config is not None else self.config_for(locale_id)
        # Encoder is resolved here, once per build
        dictionary = Dictionary(config)

        entries: Dict[str, IndexEntry] = {}
        token_postings: Postings = {}
        phonetic_postings: Postings = {}
        skip_reasons: Dict[str, int] = {}
        total = 0

        def skip(reason: str, record: FoodRecord) -> None:
            skip_reasons[reason] = skip_reasons.get(reason, 0) + 1
            logger.debug("Locale %s: skipped record %r (%s)", locale_id, getattr(record, "food_id", None), reason)

        for record in records:
            total += 1
            if not record.food_id:
                skip(SKIP_MISSING_ID, record)
                continue
            if not isinstance(record.food_id, str):
                skip(SKIP_MALFORMED, record)
                continue
            if record.locale_id != locale_id:
                skip(SKIP_LOCALE_MISMATCH, record)
                continue
            description = record.description
            if description is None or (isinstance(description, str) and not description.strip()):
                skip(SKIP_EMPTY_DESCRIPTION, record)
                continue
            if not isinstance(description, str):
                skip(SKIP_MALFORMED, record)
                continue
            if record.food_id in entries:
                skip(SKIP_DUPLICATE_ID, record)
                continue
            try:
                popularity = _popularity(record.popularity_rank)
                analysis = dictionary.analyze_all((description,) + tuple(record.alt_names or ()))
            except (TypeError, ValueError, AttributeError):
                skip(SKIP_MALFORMED, record)
                continue
            if not analysis.base_tokens:
                skip(SKIP_NO_TOKENS, record)
                continue
            entries[record.food_id] = IndexEntry(
                food_id=record.food_id,
                description=description,
                popularity_rank=popularity,
                base_tokens=analysis.base_tokens,
                tokens=analysis.tokens,
                phonetic_codes=analysis.codes,
            )
            add_postings(token_postings, analysis.tokens, record.food_id)
            add_postings(phonetic_postings, analysis.codes, record.food_id)

        skipped = total - len(entries)
        degraded = total > 0 and skipped / total > self.degraded_threshold
        version = self.registry.next_version(locale_id)
        index = Index(locale_id, version, entries, token_postings, phonetic_postings, dictionary)
        report = BuildReport(
            locale_id=locale_id,
            version=version,
            total_records=total,
            indexed_records=len(entries),
            skipped_records=skipped,
            degraded=degraded,
            skip_reasons=skip_reasons,
        )
        if degraded:
            logger.warning(
                "Locale %s: degraded build v%d, skipped %d of %d records %s",
                locale_id, version, skipped, total, skip_reasons,
            )
        else:
            logger.info("Locale %s: built v%d, %d entries, %d skipped", locale_id, version, len(entries), skipped)
        return index, report

    def rebuild(
        self,
        locale_id: str,
        records: Iterable[FoodRecord],
        config: Optional[LocaleConfig] = None,
    ) -> Tuple[Index, BuildReport]:
        """Build and publish in one step."""
        index, report = self.build(locale_id, records, config)
        self.registry.publish(index)
        return index, report
