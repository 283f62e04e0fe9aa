"""
Query matching and ranking.

Each base query token counts once, in its best tier:
- exact: the token is one of the entry's own tokens;
- synonym: the token or one of its synonyms is among the entry's expanded tokens;
- phonetic: the token's codes overlap the entry's codes.
A length-mismatch penalty covers unmatched query tokens and unmatched entry
tokens. Ties go to the more popular entry (higher popularity_rank), then to
the lower food_id.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Set

from .index import Index, MatchResult, Query, SearchResults
from .registry import IndexRegistry

logger = logging.getLogger(__name__)


class ScoringWeights(NamedTuple):
    exact: float = 1.0
    synonym: float = 0.6
    phonetic: float = 0.3
    length_penalty: float = 0.1


DEFAULT_WEIGHTS = ScoringWeights()


def search_index(
    index: Index,
    text: str,
    limit: int = 20,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> List[MatchResult]:
    """Rank entries of one Index against text. Pure; never raises on bad input."""
    if limit <= 0 or not text:
        return []
    dictionary = index.dictionary
    query = dictionary.analyze(text)
    if not query.base_tokens:
        return []

    candidates: Set[str] = set()
    for token in query.tokens:
        candidates |= index.token_postings.get(token, frozenset())
    for code in query.codes:
        candidates |= index.phonetic_postings.get(code, frozenset())
    if not candidates:
        return []

    base = sorted(query.base_tokens)
    synonyms = {q: dictionary.synonyms_of(q) for q in base}
    codes = {q: frozenset(dictionary.encode(q)) for q in base}

    scored: List[MatchResult] = []
    ranks: Dict[str, float] = {}
    for food_id in candidates:
        entry = index.entries[food_id]
        exact = synonym = phonetic = 0
        matched: List[str] = []
        for q in base:
            if q in entry.base_tokens:
                exact += 1
            elif not synonyms[q].isdisjoint(entry.tokens):
                synonym += 1
            elif not codes[q].isdisjoint(entry.phonetic_codes):
                phonetic += 1
            else:
                continue
            matched.append(q)
        m = len(matched)
        if m == 0:
            continue
        mismatch = (len(base) - m) + max(len(entry.base_tokens) - m, 0)
        score = (
            weights.exact * exact
            + weights.synonym * synonym
            + weights.phonetic * phonetic
            - weights.length_penalty * mismatch
        )
        scored.append(MatchResult(food_id, round(score, 6), tuple(matched), entry.description))
        ranks[food_id] = entry.popularity_rank

    scored.sort(key=lambda r: (-r.score, -ranks[r.food_id], r.food_id))
    return scored[:limit]


class Matcher:
    """Searches whatever Index is current for the query's locale."""

    def __init__(self, registry: IndexRegistry, weights: Optional[ScoringWeights] = None) -> None:
        self.registry = registry
        self.weights = weights or DEFAULT_WEIGHTS

    def search(self, query: Query, limit: int = 20) -> SearchResults:
        # One reference for the whole query; a concurrent publish does not affect it
        index = self.registry.current(query.locale_id)
        if index is None:
            return SearchResults(query.locale_id, None, False, [])
        matches = search_index(index, query.text, limit, self.weights)
        logger.debug("Locale %s v%d: %r -> %d matches", query.locale_id, index.version, query.text, len(matches))
        return SearchResults(query.locale_id, index.version, True, matches)
