"""
Dictionary: raw text -> stemmed tokens -> synonym-expanded tokens -> phonetic codes.

Han-script locales split words into single characters after stemming, and
run-together typed pinyin into syllables, so both meet per-character entries.

The same Dictionary instance analyses records at build time and queries at
search time, so both sides go through one pipeline.
"""

import logging
from functools import lru_cache
from typing import FrozenSet, Iterable, List, NamedTuple, Optional, Set, Tuple

from phonetic import PhoneticEncoder, get_encoder
from phonetic.chinese import split_syllables

from .locales import LocaleConfig, Script
from .normalizer import fold, has_digit, split_words, strip_suffix
from .synonyms import SynonymTable

logger = logging.getLogger(__name__)


class Analysis(NamedTuple):
    """Result of analysing one text: base tokens, expanded tokens, codes."""
    base_tokens: FrozenSet[str]
    tokens: FrozenSet[str]
    codes: FrozenSet[str]


class Dictionary:
    """Locale-bound text analysis (normalize, expand, phonetics)."""

    def __init__(self, config: LocaleConfig, encoder: Optional[PhoneticEncoder] = None) -> None:
        self.config = config
        self.encoder = encoder if encoder is not None else get_encoder(config.phonetic_encoder)
        self._fold_diacritics = config.script == Script.LATIN
        self._split_han = config.script == Script.HAN
        self._suffixes: Tuple[str, ...] = tuple(
            fold(s, self._fold_diacritics) for s in config.stem_suffixes if s
        )
        self._ignore: FrozenSet[str] = frozenset(
            w for word in config.ignore_words for w in self._words(word)
        )
        self.synonyms = SynonymTable.from_groups(config.synonyms, self._synonym_token)
        self._encode = lru_cache(maxsize=65536)(self._encode_uncached)

    @property
    def locale_id(self) -> str:
        return self.config.locale_id

    def _words(self, text: str) -> List[str]:
        words: List[str] = []
        for word in split_words(fold(text, self._fold_diacritics)):
            word = strip_suffix(word, self._suffixes, self.config.min_stem_length)
            if self._split_han:
                for part in split_words(word, split_han=True):
                    words.extend(split_syllables(part))
            else:
                words.append(word)
        return words

    def _synonym_token(self, word: str) -> Optional[str]:
        words = self._words(word)
        if len(words) != 1:
            logger.warning(
                "Locale %s: synonym %r is not a single token, skipped", self.locale_id, word
            )
            return None
        return words[0]

    def _keep(self, token: str) -> bool:
        if token in self._ignore:
            return False
        return len(token) >= self.config.min_token_length or has_digit(token)

    def normalize(self, raw_text: str) -> Set[str]:
        """Canonical tokens of raw_text (no synonyms, no codes)."""
        if not raw_text:
            return set()
        return {w for w in self._words(raw_text) if self._keep(w)}

    def expand(self, tokens: Iterable[str]) -> Set[str]:
        """tokens plus every synonym of each token."""
        return self.synonyms.expand(tokens)

    def synonyms_of(self, token: str) -> FrozenSet[str]:
        return self.synonyms.group(token)

    def _encode_uncached(self, token: str) -> Tuple[str, ...]:
        return tuple(self.encoder.encode(token))

    def encode(self, token: str) -> Tuple[str, ...]:
        """Phonetic codes for one token (cached; encoders are pure)."""
        return self._encode(token)

    def phonetics(self, tokens: Iterable[str]) -> Set[str]:
        codes: Set[str] = set()
        for token in tokens:
            codes.update(self._encode(token))
        return codes

    def analyze(self, raw_text: str) -> Analysis:
        return self.analyze_all([raw_text])

    def analyze_all(self, texts: Iterable[str]) -> Analysis:
        """Analyse several texts (description and alternative names) as one."""
        base: Set[str] = set()
        for text in texts:
            base |= self.normalize(text)
        expanded = self.expand(base)
        return Analysis(frozenset(base), frozenset(expanded), frozenset(self.phonetics(expanded)))

    def __repr__(self) -> str:
        return f"Dictionary(locale_id={self.locale_id!r}, encoder={self.encoder!r})"
