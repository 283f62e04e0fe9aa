"""
Encoder lookup by identifier. Locale configuration names an encoder; the
index builder resolves it once per build.
"""

from typing import Dict, Type

from .base import PhoneticEncoder
from .chinese import PinyinEncoder
from .english import SoundexEncoder
from .french import Soundex2Encoder
from .tamil import TamilPhoneticEncoder


class UnknownEncoderError(ValueError):
    """Locale configuration names an encoder that is not registered."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Unknown phonetic encoder: {identifier!r}")
        self.identifier = identifier


ENCODERS: Dict[str, Type[PhoneticEncoder]] = {
    cls.identifier: cls
    for cls in (SoundexEncoder, Soundex2Encoder, TamilPhoneticEncoder, PinyinEncoder)
}


def register_encoder(cls: Type[PhoneticEncoder]) -> Type[PhoneticEncoder]:
    """Add an encoder class under its identifier (usable as a decorator)."""
    if not cls.identifier:
        raise ValueError(f"{cls.__name__} has no identifier")
    ENCODERS[cls.identifier] = cls
    return cls


def get_encoder(identifier: str) -> PhoneticEncoder:
    cls = ENCODERS.get(identifier)
    if cls is None:
        raise UnknownEncoderError(identifier)
    return cls()
