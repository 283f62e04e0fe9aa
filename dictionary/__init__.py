"""Locale text analysis: normalization, synonym expansion, phonetic codes."""

from .dictionary import Analysis, Dictionary
from .locales import DEFAULT_LOCALES, LocaleConfig, LocaleConfigError, Script, load_locale_configs
from .normalizer import fold, split_words
from .synonyms import SynonymTable

__all__ = [
    "Analysis",
    "Dictionary",
    "DEFAULT_LOCALES",
    "LocaleConfig",
    "LocaleConfigError",
    "Script",
    "load_locale_configs",
    "fold",
    "split_words",
    "SynonymTable",
]
