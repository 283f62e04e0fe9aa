"""Exceptions raised by index builds and snapshot storage."""

from dictionary.locales import LocaleConfigError
from phonetic.registry import UnknownEncoderError


class FoodIndexError(Exception):
    """Base class for build-level failures."""


class UnknownLocaleError(FoodIndexError, KeyError):
    def __init__(self, locale_id: str) -> None:
        super().__init__(f"No configuration for locale {locale_id!r}")
        self.locale_id = locale_id

    def __str__(self) -> str:
        return self.args[0]


class RecordSourceError(FoodIndexError):
    """Food records could not be fetched (source unreachable, unreadable)."""


class SnapshotError(FoodIndexError):
    """Persisted index snapshot is missing fields or has an unknown format."""


__all__ = [
    "FoodIndexError",
    "UnknownLocaleError",
    "RecordSourceError",
    "SnapshotError",
    "UnknownEncoderError",
    "LocaleConfigError",
]
