"""
Per-language phonetic encoders: token -> approximate-pronunciation codes.
"""

from .base import PhoneticEncoder
from .chinese import PinyinEncoder
from .english import SoundexEncoder, soundex
from .french import Soundex2Encoder, soundex2
from .registry import ENCODERS, UnknownEncoderError, get_encoder, register_encoder
from .tamil import TamilPhoneticEncoder

__all__ = [
    "PhoneticEncoder",
    "SoundexEncoder",
    "Soundex2Encoder",
    "TamilPhoneticEncoder",
    "PinyinEncoder",
    "soundex",
    "soundex2",
    "ENCODERS",
    "UnknownEncoderError",
    "get_encoder",
    "register_encoder",
]
