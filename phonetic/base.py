"""
Phonetic encoder interface.

- One implementation per language; a locale selects one by identifier.
- encode() is pure and deterministic and never raises on arbitrary input.
- Unencodable tokens (empty, pure numerals, foreign alphabet) yield [].
"""

from typing import Iterable, List, Set


class PhoneticEncoder:
    """Abstract encoder: token -> approximate-pronunciation codes."""

    identifier = ""

    def encode(self, token: str) -> List[str]:
        """Return phonetic codes for token (possibly several, possibly none)."""
        raise NotImplementedError

    def encode_all(self, tokens: Iterable[str]) -> Set[str]:
        """Union of codes for every token."""
        codes: Set[str] = set()
        for token in tokens:
            codes.update(self.encode(token))
        return codes

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
