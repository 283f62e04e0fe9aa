"""
Dictionary: normalization per script, stop words, length floor, synonym
expansion, phonetic codes, idempotence, locale configuration loading.
"""

import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from pydantic import ValidationError

from dictionary import DEFAULT_LOCALES, Dictionary, LocaleConfig, LocaleConfigError, Script, load_locale_configs
from phonetic import UnknownEncoderError


@pytest.fixture
def en():
    return Dictionary(DEFAULT_LOCALES["en"])


@pytest.fixture
def zh():
    return Dictionary(DEFAULT_LOCALES["zh"])


def test_normalize_case_punctuation_stop_words(en):
    assert en.normalize("Apple Pie, with CREAM!") == {"apple", "pie", "cream"}


def test_normalize_folds_diacritics_for_latin(en):
    assert en.normalize("Crème Brûlée") == {"creme", "brulee"}


def test_normalize_keeps_short_tokens_with_digits(en):
    assert en.normalize("7up") == {"7up"}
    # min_token_length is 2 for en: single letters go, single digits stay
    assert en.normalize("b 7 c") == {"7"}


def test_normalize_empty(en):
    assert en.normalize("") == set()
    assert en.normalize("  ... !!! ") == set()
    assert en.normalize("the and of") == set()


@pytest.mark.parametrize(
    "locale_id,text",
    [
        ("en", "Chicken & mushroom pie (homemade), 2% milk"),
        ("en", "Crème brûlée; ＦＵＬＬ-width"),
        ("fr", "Pomme de terre sautée à l'ail"),
        ("zh", "的牛肉面 and noodles"),
        ("ta", "தயிர் சாதம், இட்லி"),
    ],
)
def test_normalize_idempotent(locale_id, text):
    d = Dictionary(DEFAULT_LOCALES[locale_id])
    tokens = d.normalize(text)
    assert tokens
    assert d.normalize(" ".join(sorted(tokens))) == tokens


def test_fullwidth_compatibility_folding(en):
    assert en.normalize("ＦＵＬＬ") == {"full"}


def test_french_stop_words():
    fr = Dictionary(DEFAULT_LOCALES["fr"])
    assert fr.normalize("Pomme de terre sautée") == {"pomme", "terre", "sautee"}


def test_han_split_into_characters(zh):
    assert zh.normalize("牛肉面") == {"牛", "肉", "面"}
    assert zh.normalize("的面条") == {"面", "条"}
    assert zh.normalize("ｍｉａｎ tiao") == {"mian", "tiao"}


def test_tamil_words_keep_vowel_signs():
    ta = Dictionary(DEFAULT_LOCALES["ta"])
    assert ta.normalize("தயிர் சாதம்") == {"தயிர்", "சாதம்"}
    # stop word "மற்றும்" (and) is dropped
    assert ta.normalize("இட்லி மற்றும் தோசை") == {"இட்லி", "தோசை"}


def test_expand_symmetric_and_idempotent(en):
    assert en.expand({"chips"}) == {"chips", "fries"}
    assert en.expand({"fries"}) == {"chips", "fries"}
    once = en.expand({"soda", "apple"})
    assert once == {"soda", "pop", "fizzy", "apple"}
    assert en.expand(once) == once


def test_overlapping_synonym_groups_merge():
    d = Dictionary(LocaleConfig(locale_id="xx", synonyms=[["soda", "pop"], ["pop", "fizzy"]]))
    assert d.expand({"soda"}) == {"soda", "pop", "fizzy"}
    assert d.expand({"fizzy"}) == {"soda", "pop", "fizzy"}


def test_multi_word_synonym_member_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        d = Dictionary(LocaleConfig(locale_id="xx", synonyms=[["french fries", "chips", "frites"]]))
    assert d.expand({"chips"}) == {"chips", "frites"}
    assert "french fries" in caplog.text


def test_han_synonyms(zh):
    assert zh.expand({"薯"}) == {"薯", "芋"}


def test_phonetics_over_expanded_tokens(en):
    assert en.phonetics({"apple"}) == {"A140"}
    analysis = en.analyze("apple chips")
    assert analysis.base_tokens == {"apple", "chips"}
    assert analysis.tokens == {"apple", "chips", "fries"}
    assert analysis.codes == {"A140", "C120", "F620"}


def test_analyze_all_unions_texts(en):
    analysis = en.analyze_all(["Chips", "French fries"])
    assert analysis.base_tokens == {"chips", "french", "fries"}


def test_encode_cached_and_stable(en):
    assert en.encode("aple") == ("A140",)
    assert en.encode("aple") == en.encode("apple")


def test_unknown_encoder_raises():
    with pytest.raises(UnknownEncoderError):
        Dictionary(LocaleConfig(locale_id="xx", phonetic_encoder="nope"))


def test_locale_config_validation():
    with pytest.raises(ValidationError):
        LocaleConfig(locale_id="xx", min_token_length=0)
    with pytest.raises(ValidationError):
        LocaleConfig(locale_id="xx", script="cyrillic")
    assert LocaleConfig(locale_id="xx", script="han").script == Script.HAN


def test_load_locale_configs_overrides_defaults(tmp_path):
    path = tmp_path / "locales.json"
    path.write_text(
        json.dumps({"locales": [
            {"locale_id": "en", "phonetic_encoder": "soundex", "synonyms": [["crisps", "chips"]]},
            {"locale_id": "de", "phonetic_encoder": "soundex"},
        ]}),
        encoding="utf-8",
    )
    configs = load_locale_configs(path)
    assert configs["en"].synonyms == [["crisps", "chips"]]
    assert configs["en"].min_token_length == 1
    assert "de" in configs
    assert "fr" in configs


def test_load_locale_configs_errors(tmp_path):
    with pytest.raises(LocaleConfigError):
        load_locale_configs(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(LocaleConfigError):
        load_locale_configs(bad)
    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps([{"locale_id": "en", "min_token_length": -1}]), encoding="utf-8")
    with pytest.raises(LocaleConfigError):
        load_locale_configs(invalid)


def test_shipped_locale_file_loads():
    configs = load_locale_configs(ROOT / "data" / "locales.json")
    assert {"en", "fr", "ta", "zh"} <= set(configs)
    for config in configs.values():
        Dictionary(config)


def test_tamil_suffixes_stripped_once():
    ta = Dictionary(DEFAULT_LOCALES["ta"])
    # plural -கள் and dative -க்கு
    assert ta.normalize("இட்லிகள்") == {"இட்லி"}
    assert ta.normalize("தோசைக்கு") == {"தோசை"}
    # a bare suffix is too short to stem
    assert ta.normalize("கள்") == {"கள்"}


def test_chinese_suffix_stripped_before_character_split(zh):
    assert zh.normalize("饺子") == {"饺"}
    assert zh.normalize("孩子们") == {"孩", "子"}
    # a lone suffix character is kept
    assert zh.normalize("子") == {"子"}


def test_stem_applies_to_records_and_queries_alike():
    ta = Dictionary(DEFAULT_LOCALES["ta"])
    assert ta.analyze("இட்லிகள்").base_tokens == ta.analyze("இட்லி").base_tokens


def test_stem_suffixes_configurable():
    config = LocaleConfig(locale_id="xx", stem_suffixes=["ies", "s"], min_stem_length=3)
    d = Dictionary(config)
    assert d.normalize("berries apples gas") == {"berr", "apple", "gas"}


def test_typed_pinyin_split_into_syllables(zh):
    assert zh.normalize("miantiao") == {"mian", "tiao"}
    assert zh.normalize("niurou mian") == {"niu", "rou", "mian"}
    # words that are not pinyin stay whole
    assert zh.normalize("noodles") == {"noodles"}
