"""
Tamil phonetic encoding.

Tokens are transliterated letter by letter (independent vowels, consonants
with their inherent 'a', dependent vowel signs, pulli). A simplified form
shortens long vowels, collapses doubled letters and merges close sounds, so
spelling variants of the same word meet on the second code.
"""

import re
from typing import Dict, List

from .base import PhoneticEncoder

_VOWELS: Dict[str, str] = {
    "அ": "a",
    "ஆ": "aa",
    "இ": "i",
    "ஈ": "ii",
    "உ": "u",
    "ஊ": "uu",
    "எ": "e",
    "ஏ": "ee",
    "ஐ": "ai",
    "ஒ": "o",
    "ஓ": "oo",
    "ஔ": "au",
}

_CONSONANTS: Dict[str, str] = {
    "க": "k",
    "ங": "ng",
    "ச": "ch",
    "ஞ": "ny",
    "ட": "t",
    "ண": "n",
    "த": "th",
    "ந": "n",
    "ப": "p",
    "ம": "m",
    "ய": "y",
    "ர": "r",
    "ல": "l",
    "வ": "v",
    "ழ": "zh",
    "ள": "l",
    "ற": "r",
    "ன": "n",
    "ஜ": "j",
    "ஷ": "sh",
    "ஸ": "s",
    "ஹ": "h",
}

_PULLI = "்"

_VOWEL_SIGNS: Dict[str, str] = {
    "ா": "aa",
    "ி": "i",
    "ீ": "ii",
    "ு": "u",
    "ூ": "uu",
    "ெ": "e",
    "ே": "ee",
    "ை": "ai",
    "ொ": "o",
    "ோ": "oo",
    "ௌ": "au",
    _PULLI: "",
}

# க்ஷ is written as three code points
_KSHA = "க" + _PULLI + "ஷ"

_SIMPLIFY = (
    ("ch", "s"),
    ("sh", "s"),
    ("zh", "l"),
    ("ny", "n"),
    ("ng", "n"),
    ("th", "t"),
)
_DOUBLED = re.compile(r"([a-z])\1+")


def _is_tamil_letter(ch: str) -> bool:
    return ch in _VOWELS or ch in _CONSONANTS


def transliterate(text: str) -> str:
    """Letter-by-letter romanization; characters outside the tables pass through."""
    out = []
    i = 0
    n = len(text)
    while i < n:
        if text.startswith(_KSHA, i):
            consonant = "ksh"
            i += len(_KSHA)
        elif text[i] in _CONSONANTS:
            consonant = _CONSONANTS[text[i]]
            i += 1
        else:
            ch = text[i]
            out.append(_VOWELS.get(ch, _VOWEL_SIGNS.get(ch, ch)))
            i += 1
            continue
        out.append(consonant)
        if i < n and text[i] in _VOWEL_SIGNS:
            out.append(_VOWEL_SIGNS[text[i]])
            i += 1
        else:
            out.append("a")
    return "".join(out)


def simplify(phonetic: str) -> str:
    simplified = (
        phonetic.replace("aa", "a")
        .replace("ii", "i")
        .replace("uu", "u")
        .replace("ee", "e")
        .replace("oo", "o")
    )
    simplified = _DOUBLED.sub(r"\1", simplified)
    for src, dst in _SIMPLIFY:
        simplified = simplified.replace(src, dst)
    return simplified


class TamilPhoneticEncoder(PhoneticEncoder):
    """Transliteration-based encoder for Tamil script."""

    identifier = "tamil"

    def encode(self, token: str) -> List[str]:
        token = token.strip().lower() if token else ""
        if not token or not any(_is_tamil_letter(ch) for ch in token):
            return []
        phonetic = transliterate(token)
        simplified = simplify(phonetic)
        if simplified != phonetic:
            return [phonetic, simplified]
        return [phonetic]
