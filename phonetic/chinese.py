"""
Chinese phonetic encoding via pypinyin.

- Han tokens yield every reading combination (heteronyms included) as
  toneless pinyin, tone-numbered pinyin and a fuzzy form.
- The fuzzy form merges retroflex/dental initials and the ng/n finals that
  many speakers do not distinguish: zh/ch/sh -> z/c/s, ng -> n.
- Latin tokens (pinyin typed on a Latin keyboard, optionally with a tone
  number) encode to their fuzzy form so they meet Han entries.
- split_syllables() breaks run-together typed pinyin into syllables, since
  Han text is indexed one character (one syllable) per token.
"""

import itertools
import re
import unicodedata
from functools import lru_cache
from typing import FrozenSet, Iterable, List, Optional

from pypinyin import Style, pinyin
from pypinyin.constants import PINYIN_DICT

from .base import PhoneticEncoder

_HAN_RANGES = (
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xF900, 0xFAFF),
    (0x20000, 0x2A6DF),
    (0x2A700, 0x2EBEF),
)

_TYPED_PINYIN = re.compile(r"^([a-zü]+)([1-5]?)$")

# Combining tone marks (macron, acute, caron, grave); the diaeresis of ü stays
_TONE_MARKS = frozenset("\u0300\u0301\u0304\u030c")
_MAX_SYLLABLE = 6


def is_han(ch: str) -> bool:
    cp = ord(ch)
    return any(lo <= cp <= hi for lo, hi in _HAN_RANGES)


def fuzzy(syllables: str) -> str:
    """Collapse easily confused initials and finals; strips tone digits."""
    out = re.sub(r"[1-5]", "", syllables)
    out = out.replace("zh", "z").replace("ch", "c").replace("sh", "s")
    return out.replace("ng", "n")


@lru_cache(maxsize=1)
def syllables() -> FrozenSet[str]:
    """Toneless pinyin syllables known to pypinyin (vowelless interjections excluded)."""
    out = set()
    for readings in PINYIN_DICT.values():
        for reading in readings.split(","):
            decomposed = unicodedata.normalize("NFD", reading)
            plain = unicodedata.normalize("NFC", "".join(ch for ch in decomposed if ch not in _TONE_MARKS))
            if plain.isalpha() and any(v in plain for v in "aeiouü"):
                out.add(plain)
    return frozenset(out)


def split_syllables(token: str) -> List[str]:
    """
    Split typed pinyin ("miantiao") into syllables (["mian", "tiao"]), using
    the fewest syllables and preferring longer ones first. Tokens that are not
    entirely pinyin come back whole.
    """
    if not re.fullmatch(r"[a-zü]+", token):
        return [token]
    known = syllables()
    n = len(token)
    # best[i]: fewest-syllable split of token[i:], or None
    best: List[Optional[List[str]]] = [None] * (n + 1)
    best[n] = []
    for i in range(n - 1, -1, -1):
        for j in range(min(n, i + _MAX_SYLLABLE), i, -1):
            rest = best[j]
            if rest is None or token[i:j] not in known:
                continue
            if best[i] is None or len(rest) + 1 < len(best[i]):
                best[i] = [token[i:j]] + rest
    return best[0] or [token]


class PinyinEncoder(PhoneticEncoder):
    """Syllable/tone decomposition for Han script."""

    identifier = "pinyin"

    # Cap on reading combinations per token; multi-character tokens with
    # several heteronyms grow multiplicatively.
    max_readings = 16

    def _combinations(self, readings: List[List[str]]) -> Iterable[str]:
        combos = itertools.product(*[r for r in readings if r])
        for combo in itertools.islice(combos, self.max_readings):
            yield "".join(combo)

    def encode(self, token: str) -> List[str]:
        if not token:
            return []
        token = token.lower()
        if all(is_han(ch) for ch in token):
            toneless = pinyin(token, style=Style.NORMAL, heteronym=True, errors="ignore")
            numbered = pinyin(token, style=Style.TONE3, heteronym=True, errors="ignore")
            codes = {}
            for plain in self._combinations(toneless):
                codes[plain] = None
                codes[fuzzy(plain)] = None
            for tone in self._combinations(numbered):
                codes[tone] = None
            return [c for c in codes if c]
        m = _TYPED_PINYIN.match(token)
        if not m:
            return []
        codes = {fuzzy(m.group(1)): None}
        if m.group(2):
            codes[token] = None
        return list(codes)
