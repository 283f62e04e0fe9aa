"""
English phonetic encoding (Soundex).

- 4-character code: first letter + 3 digits from consonant classes.
- Vowels, H, W and Y are dropped; adjacent duplicates collapse, so
  "aple" and "apple" both encode to A140.
"""

from typing import List

from .base import PhoneticEncoder

# Soundex digit mapping: A=0, B=1, C=2, ... (index by ord(c)-ord('A'))
_SOUNDEX_DIGITS = "01230120022455012623010202"


def soundex(word: str, length: int = 4) -> str:
    """
    Soundex encoding: first letter + 3 digits from consonants.
    Similar-sounding words get the same code. Non-ASCII-alphabetic input gives "".
    """
    if not word or not word.isascii() or not word.isalpha():
        return ""
    word = word.upper()
    first = word[0]
    code = first
    last_digit = _SOUNDEX_DIGITS[ord(first) - ord("A")]
    for c in word[1:]:
        d = _SOUNDEX_DIGITS[ord(c) - ord("A")]
        if d == "0":
            # H and W do not separate consonants of the same class
            if c not in "HW":
                last_digit = "0"
            continue
        if d == last_digit:
            continue
        code += d
        last_digit = d
    code = (code + "0" * length)[:length]
    return code


class SoundexEncoder(PhoneticEncoder):
    """Consonant-class reduction for English tokens."""

    identifier = "soundex"

    def encode(self, token: str) -> List[str]:
        code = soundex(token)
        return [code] if code else []
