"""
French phonetic encoding (Soundex2).

Soundex2 adapts Soundex to French spelling: hard G/C become K, vowels
collapse to A, silent H/Y and silent final letters (A, D, T, S) are dropped.
"pain"/"pains" and "patate"/"patates" share a code.
"""

from typing import List, Tuple

from .base import PhoneticEncoder

_PRIMARY: Tuple[Tuple[str, str], ...] = (
    ("GUI", "KI"),
    ("GUE", "KE"),
    ("GA", "KA"),
    ("GO", "KO"),
    ("GU", "K"),
    ("CA", "KA"),
    ("CO", "KO"),
    ("CU", "KU"),
    ("Q", "K"),
    ("CC", "K"),
    ("CK", "K"),
)

_SECONDARY: Tuple[Tuple[str, str], ...] = (
    ("ASA", "AZA"),
    ("KN", "NN"),
    ("PF", "FF"),
    ("PH", "FF"),
    ("SCH", "SSS"),
)

_VOWELS = "EIOU"


def soundex2(word: str, length: int = 4) -> str:
    """Soundex2 code for an ASCII alphabetic word, or "" when not encodable."""
    if not word or not word.isascii() or not word.isalpha():
        return ""
    w = word.upper()
    for src, dst in _PRIMARY:
        w = w.replace(src, dst)
    w = w[0] + "".join("A" if c in _VOWELS else c for c in w[1:])
    if w.startswith("MAC"):
        w = "MCC" + w[3:]
    for src, dst in _SECONDARY:
        w = w.replace(src, dst)

    out = w[0]
    for i in range(1, len(w)):
        c, prev = w[i], w[i - 1]
        if c == "H" and prev not in "CS":
            continue
        if c == "Y" and prev != "A":
            continue
        out += c
    if len(out) > 1 and out[-1] in "ADTS":
        out = out[:-1]
    out = out[0] + out[1:].replace("A", "")

    collapsed = out[0]
    for c in out[1:]:
        if c != collapsed[-1]:
            collapsed += c
    return collapsed[:length]


class Soundex2Encoder(PhoneticEncoder):
    """Consonant-class reduction tuned for French tokens."""

    identifier = "soundex2"

    def encode(self, token: str) -> List[str]:
        code = soundex2(token)
        return [code] if code else []
