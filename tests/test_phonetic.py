"""
Phonetic encoders: known codes, tolerance to misspellings, determinism,
empty output for unencodable tokens, registry lookup.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from phonetic import (
    PinyinEncoder,
    Soundex2Encoder,
    SoundexEncoder,
    TamilPhoneticEncoder,
    UnknownEncoderError,
    PhoneticEncoder,
    get_encoder,
    register_encoder,
    soundex,
    soundex2,
)
import phonetic.registry
from dictionary import Dictionary, LocaleConfig
from phonetic.chinese import fuzzy, split_syllables
from phonetic.tamil import simplify, transliterate


@pytest.mark.parametrize(
    "word,code",
    [
        ("apple", "A140"),
        ("aple", "A140"),
        ("Robert", "R163"),
        ("Rupert", "R163"),
        ("Ashcraft", "A261"),
        ("Tymczak", "T522"),
        ("Pfister", "P236"),
        ("pie", "P000"),
    ],
)
def test_soundex_known_codes(word, code):
    assert soundex(word) == code


def test_soundex_unencodable():
    enc = SoundexEncoder()
    assert enc.encode("") == []
    assert enc.encode("123") == []
    assert enc.encode("7up") == []
    assert enc.encode("café") == []


@pytest.mark.parametrize(
    "a,b",
    [("pain", "pains"), ("patate", "patates"), ("gateau", "gato"), ("orange", "oranges")],
)
def test_soundex2_variants_share_code(a, b):
    assert soundex2(a) == soundex2(b)
    assert soundex2(a) != ""


def test_soundex2_codes():
    assert soundex2("pain") == "PN"
    assert soundex2("patate") == "PT"
    assert soundex2("orange") == "ORNG"
    assert len(soundex2("anticonstitutionnellement")) == 4


def test_soundex2_unencodable():
    enc = Soundex2Encoder()
    assert enc.encode("") == []
    assert enc.encode("2024") == []


def test_tamil_transliteration():
    assert transliterate("சோறு") == "chooru"
    assert transliterate("இட்லி") == "itli"
    assert simplify("chooru") == "soru"


def test_tamil_spelling_variants_meet():
    enc = TamilPhoneticEncoder()
    # ற and ர are often confused in writing
    assert set(enc.encode("சோறு")) & set(enc.encode("சோரு"))
    assert enc.encode("சோறு") == ["chooru", "soru"]
    assert enc.encode("இட்லி") == ["itli"]


def test_tamil_unencodable():
    enc = TamilPhoneticEncoder()
    assert enc.encode("") == []
    assert enc.encode("rice") == []
    assert enc.encode("42") == []


def test_pinyin_han_codes():
    codes = PinyinEncoder().encode("面")
    assert "mian" in codes
    assert "mian4" in codes


def test_pinyin_heteronyms():
    codes = PinyinEncoder().encode("行")
    assert "xing" in codes
    assert "hang" in codes


def test_pinyin_typed_latin_reaches_han():
    enc = PinyinEncoder()
    assert enc.encode("mian") == ["mian"]
    assert set(enc.encode("mian4")) == {"mian", "mian4"}
    assert enc.encode("zhang") == ["zan"]
    assert fuzzy("shang4") == "san"


def test_pinyin_unencodable():
    enc = PinyinEncoder()
    assert enc.encode("") == []
    assert enc.encode("123") == []
    assert enc.encode("சோறு") == []


@pytest.mark.parametrize(
    "encoder,token",
    [
        (SoundexEncoder(), "chocolate"),
        (Soundex2Encoder(), "fromage"),
        (TamilPhoneticEncoder(), "தோசை"),
        (PinyinEncoder(), "饺"),
    ],
)
def test_encoders_deterministic(encoder, token):
    first = encoder.encode(token)
    assert first
    for _ in range(5):
        assert encoder.encode(token) == first


def test_encode_all_unions_codes():
    assert SoundexEncoder().encode_all(["apple", "aple", "pie", ""]) == {"A140", "P000"}


def test_registry_lookup():
    assert isinstance(get_encoder("soundex"), SoundexEncoder)
    assert isinstance(get_encoder("soundex2"), Soundex2Encoder)
    assert isinstance(get_encoder("tamil"), TamilPhoneticEncoder)
    assert isinstance(get_encoder("pinyin"), PinyinEncoder)


def test_registry_unknown_identifier():
    with pytest.raises(UnknownEncoderError) as exc:
        get_encoder("metaphone")
    assert exc.value.identifier == "metaphone"
    assert isinstance(exc.value, ValueError)


def test_register_encoder_makes_identifier_configurable(monkeypatch):
    monkeypatch.setattr(phonetic.registry, "ENCODERS", dict(phonetic.registry.ENCODERS))

    @register_encoder
    class FirstLetterEncoder(PhoneticEncoder):
        identifier = "first-letter"

        def encode(self, token):
            return [token[0].upper()] if token else []

    assert isinstance(get_encoder("first-letter"), FirstLetterEncoder)
    dictionary = Dictionary(LocaleConfig(locale_id="xx", phonetic_encoder="first-letter"))
    assert dictionary.analyze("apple pie").codes == {"A", "P"}


def test_register_encoder_requires_identifier(monkeypatch):
    monkeypatch.setattr(phonetic.registry, "ENCODERS", dict(phonetic.registry.ENCODERS))

    class Nameless(PhoneticEncoder):
        pass

    with pytest.raises(ValueError):
        register_encoder(Nameless)


def test_split_syllables():
    assert split_syllables("miantiao") == ["mian", "tiao"]
    assert split_syllables("xian") == ["xian"]
    assert split_syllables("niurou") == ["niu", "rou"]
    assert split_syllables("zhongguo") == ["zhong", "guo"]
    # not pinyin: returned whole
    assert split_syllables("noodles") == ["noodles"]
    assert split_syllables("mian4") == ["mian4"]
