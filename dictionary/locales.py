"""
Per-locale dictionary configuration.

- LocaleConfig: token length floor, synonym groups, stop words, script,
  phonetic encoder identifier, stemming suffixes.
- DEFAULT_LOCALES covers en, fr, ta and zh; a JSON file may override or add
  locales ({"locales": [{"locale_id": ..., ...}, ...]}).
"""

import json
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class LocaleConfigError(ValueError):
    """Locale configuration file is missing, unreadable or invalid."""


class Script(str, Enum):
    LATIN = "latin"
    HAN = "han"
    OTHER = "other"


class LocaleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    locale_id: str = Field(..., min_length=1)
    phonetic_encoder: str = "soundex"
    script: Script = Script.LATIN
    min_token_length: int = Field(1, ge=1)
    synonyms: List[List[str]] = Field(default_factory=list)
    ignore_words: List[str] = Field(default_factory=list)
    # Suffixes stripped before synonym expansion, first match only
    stem_suffixes: List[str] = Field(default_factory=list)
    min_stem_length: int = Field(1, ge=1)


# Plural, case and postposition endings
TAMIL_SUFFIXES = [
    "கள்", "ங்கள்", "உடன்", "இன்", "ஆல்", "க்கு", "இல்",
    "ஐ", "ஓடு", "உக்கு", "உடைய", "ஆக", "ஆன", "ஆகிய",
]

# Diminutive, plural and category endings
CHINESE_SUFFIXES = ["儿", "子", "们", "类", "等"]


DEFAULT_LOCALES: Dict[str, LocaleConfig] = {
    c.locale_id: c
    for c in (
        LocaleConfig(
            locale_id="en",
            phonetic_encoder="soundex",
            min_token_length=2,
            synonyms=[
                ["fries", "chips"],
                ["soda", "pop", "fizzy"],
                ["aubergine", "eggplant"],
                ["courgette", "zucchini"],
                ["mince", "ground"],
                ["biscuit", "cookie"],
            ],
            ignore_words=["and", "or", "with", "of", "the", "a", "in"],
        ),
        LocaleConfig(
            locale_id="fr",
            phonetic_encoder="soundex2",
            min_token_length=2,
            synonyms=[
                ["yaourt", "yogourt", "yoghourt"],
                ["patate", "pdt"],
                ["soda", "gazeuse"],
            ],
            ignore_words=["et", "ou", "avec", "de", "du", "des", "la", "le", "les", "au", "aux", "en"],
        ),
        LocaleConfig(
            locale_id="ta",
            phonetic_encoder="tamil",
            script=Script.OTHER,
            ignore_words=["மற்றும்", "அல்லது", "இல்", "உடன்", "இருந்து", "க்கு", "ஆக", "போன்ற", "வகை", "சேர்த்து", "கொண்ட"],
            stem_suffixes=TAMIL_SUFFIXES,
            min_stem_length=2,
        ),
        LocaleConfig(
            locale_id="zh",
            phonetic_encoder="pinyin",
            script=Script.HAN,
            synonyms=[["薯", "芋"]],
            ignore_words=["的", "了", "是", "在", "和", "与", "或", "但", "而", "把", "被", "给", "对", "向"],
            stem_suffixes=CHINESE_SUFFIXES,
        ),
    )
}


def load_locale_configs(
    path: Optional[Union[str, Path]] = None,
    defaults: Optional[Dict[str, LocaleConfig]] = None,
) -> Dict[str, LocaleConfig]:
    """
    Return locale configurations: defaults overlaid with the file at path.
    Read once per rebuild so a build never sees a half-edited configuration.
    """
    configs = dict(DEFAULT_LOCALES if defaults is None else defaults)
    if path is None:
        return configs
    p = Path(path)
    if not p.exists():
        raise LocaleConfigError(f"Locale config not found: {p}")
    try:
        with open(p, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise LocaleConfigError(f"Cannot read locale config {p}: {e}") from e
    items: Iterable = raw.get("locales", []) if isinstance(raw, dict) else raw
    try:
        for item in items:
            config = LocaleConfig.model_validate(item)
            configs[config.locale_id] = config
    except (ValidationError, TypeError) as e:
        raise LocaleConfigError(f"Invalid locale config {p}: {e}") from e
    return configs
