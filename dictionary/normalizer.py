"""
Text normalization for index keys.

- NFKC, casefold; Latin-script locales also fold diacritics (unidecode).
- Words are maximal runs of letters, marks and numbers, so combining vowel
  signs (Tamil, Devanagari) stay inside their word.
- Han ideographs are split into one token per character when asked.
- strip_suffix() is the per-locale stemmer: one configured suffix per word.
"""

import unicodedata
from typing import List, Sequence

from unidecode import unidecode

from phonetic.chinese import is_han


def fold(text: str, fold_diacritics: bool = False) -> str:
    """Case and compatibility folding; optional transliteration to ASCII."""
    text = unicodedata.normalize("NFKC", text).casefold()
    if fold_diacritics:
        text = unidecode(text).lower()
    return unicodedata.normalize("NFKC", text)


def _is_word_char(ch: str) -> bool:
    return unicodedata.category(ch)[0] in "LMN"


def split_words(text: str, split_han: bool = False) -> List[str]:
    """Split folded text into words, in order of appearance."""
    words: List[str] = []
    current: List[str] = []
    for ch in text:
        if split_han and is_han(ch):
            if current:
                words.append("".join(current))
                current = []
            words.append(ch)
        elif _is_word_char(ch):
            current.append(ch)
        elif current:
            words.append("".join(current))
            current = []
    if current:
        words.append("".join(current))
    return words


def has_digit(token: str) -> bool:
    return any(ch.isdigit() for ch in token)


def strip_suffix(word: str, suffixes: Sequence[str], min_stem_length: int = 1) -> str:
    """
    Remove the first listed suffix that word ends with, if at least
    min_stem_length characters remain. At most one suffix is removed.
    """
    for suffix in suffixes:
        if word.endswith(suffix) and len(word) - len(suffix) >= min_stem_length:
            return word[: -len(suffix)]
    return word
