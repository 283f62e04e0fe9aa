"""
Index construction and publication: skipped/degraded accounting, posting
consistency, immutability, determinism, version allocation, snapshot-safe
reconstruction.
"""

import sys
import threading
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from server import FoodRecord, Index, IndexBuilder, IndexRegistry, UnknownLocaleError
from server.index_backend import index_from_snapshot, index_to_snapshot


def _records(locale_id="en"):
    descriptions = [
        "apple pie", "apple juice", "orange juice", "chocolate cake", "fried rice",
        "boiled egg", "green salad", "tomato soup", "roast chicken", "semi skimmed milk",
    ]
    return [
        FoodRecord(f"f{i}", locale_id, d, popularity_rank=i)
        for i, d in enumerate(descriptions, 1)
    ]


@pytest.fixture
def builder():
    return IndexBuilder(IndexRegistry())


def test_build_indexes_every_valid_record(builder):
    index, report = builder.build("en", _records())
    assert len(index) == 10
    assert report.total_records == 10
    assert report.indexed_records == 10
    assert report.skipped_records == 0
    assert report.degraded is False
    assert index.entries["f1"].base_tokens == {"apple", "pie"}
    assert "A140" in index.entries["f1"].phonetic_codes
    assert index.token_postings["apple"] == {"f1", "f2"}


def test_two_of_ten_malformed_is_degraded_but_built(builder):
    records = _records()[:8] + [
        FoodRecord("bad1", "en", "   "),
        FoodRecord("bad2", "fr", "pain complet"),
    ]
    index, report = builder.build("en", records)
    assert len(index) == 8
    assert report.indexed_records == 8
    assert report.skipped_records == 2
    assert report.degraded is True
    assert report.skip_reasons == {"empty_description": 1, "locale_mismatch": 1}
    assert "bad1" not in index.entries and "bad2" not in index.entries


def test_skip_reasons(builder):
    records = [
        FoodRecord("f1", "en", "apple pie"),
        FoodRecord("", "en", "no id"),
        FoodRecord("f1", "en", "apple pie again"),
        FoodRecord("f3", "en", "!!! ..."),
        FoodRecord("f4", "en", "the and"),
        FoodRecord("f5", "en", None),
    ]
    index, report = builder.build("en", records)
    assert list(index.entries) == ["f1"]
    assert report.skip_reasons == {
        "missing_id": 1,
        "duplicate_id": 1,
        "no_tokens": 2,
        "empty_description": 1,
    }



def test_malformed_records_are_skipped_not_raised(builder):
    records = [
        FoodRecord("f1", "en", "apple pie", popularity_rank=3),
        FoodRecord("f2", "en", "apple juice", popularity_rank="high"),
        FoodRecord("f3", "en", 42),
        FoodRecord("f4", "en", "orange juice", alt_names=(7,)),
        FoodRecord("f5", "en", "tomato soup", popularity_rank=float("nan")),
        FoodRecord(6, "en", "boiled egg"),
        FoodRecord("f7", "en", "green salad", popularity_rank="12.5"),
    ]
    index, report = builder.build("en", records)
    assert sorted(index.entries) == ["f1", "f7"]
    assert index.entries["f7"].popularity_rank == 12.5
    assert report.total_records == 7
    assert report.skip_reasons == {"malformed": 5}
    assert report.degraded is True
    assert index.token_postings["apple"] == {"f1"}

def test_one_skip_in_twenty_is_not_degraded(builder):
    records = [FoodRecord(f"f{i}", "en", f"food number{i}") for i in range(19)]
    records.append(FoodRecord("x", "en", ""))
    _, report = builder.build("en", records)
    assert report.skipped_records == 1
    assert report.degraded is False


def test_empty_input_builds_empty_index(builder):
    index, report = builder.build("en", [])
    assert len(index) == 0
    assert report.degraded is False
    assert index.token_postings == {}


def test_alt_names_are_indexed(builder):
    index, _ = builder.build("en", [FoodRecord("c1", "en", "Chips", 1, ("French fries",))])
    entry = index.entries["c1"]
    assert entry.base_tokens == {"chips", "french", "fries"}
    assert index.token_postings["french"] == {"c1"}


def test_postings_reference_only_entries(builder):
    index, _ = builder.build("en", _records())
    for postings in (index.token_postings, index.phonetic_postings):
        for food_ids in postings.values():
            assert food_ids
            assert food_ids <= set(index.entries)


def test_published_index_is_read_only(builder):
    index, _ = builder.build("en", _records())
    with pytest.raises(TypeError):
        index.entries["new"] = index.entries["f1"]
    with pytest.raises(TypeError):
        index.token_postings["apple"] = frozenset()
    assert isinstance(index.token_postings["apple"], frozenset)
    with pytest.raises(AttributeError):
        index.token_postings["apple"].add("f9")


def test_build_is_deterministic(builder):
    a, _ = builder.build("en", _records())
    b, _ = builder.build("en", list(reversed(_records())))
    assert dict(a.token_postings) == dict(b.token_postings)
    assert dict(a.phonetic_postings) == dict(b.phonetic_postings)
    assert dict(a.entries) == dict(b.entries)


def test_versions_strictly_increase():
    registry = IndexRegistry()
    builder = IndexBuilder(registry)
    versions = [builder.rebuild("en", _records())[0].version for _ in range(3)]
    assert versions == [1, 2, 3]
    assert registry.current("en").version == 3
    # versions are per locale
    fr_index, _ = builder.rebuild("fr", _records("fr"))
    assert fr_index.version == 1


def test_registry_rejects_older_version():
    registry = IndexRegistry()
    builder = IndexBuilder(registry)
    old, _ = builder.build("en", _records())
    new, _ = builder.build("en", _records()[:3])
    assert registry.publish(new) is True
    assert registry.publish(old) is False
    assert registry.current("en") is new



def test_registry_locales_safe_during_publish():
    registry = IndexRegistry()
    index, _ = IndexBuilder(registry).build("en", _records())
    errors = []

    def publish_many():
        for i in range(2000):
            registry.publish(Index.from_entries(f"l{i}", 1, [], index.dictionary))

    writer = threading.Thread(target=publish_many)
    writer.start()
    try:
        while writer.is_alive():
            try:
                registry.locales()
            except RuntimeError as e:
                errors.append(e)
    finally:
        writer.join()
    assert errors == []
    assert len(registry.locales()) == 2000
    assert registry.locales() == sorted(registry.locales())

def test_next_version_exceeds_restored_version():
    registry = IndexRegistry()
    builder = IndexBuilder(registry)
    index, _ = builder.build("en", _records())
    restored = Index.from_entries("en", 41, index.entries.values(), index.dictionary)
    fresh = IndexRegistry()
    fresh.publish(restored)
    assert fresh.next_version("en") == 42


def test_unknown_locale_raises(builder):
    with pytest.raises(UnknownLocaleError):
        builder.build("xx", [FoodRecord("f1", "xx", "apple")])


def test_snapshot_round_trip_rebuilds_postings(builder):
    index, _ = builder.build("en", _records())
    restored = index_from_snapshot(index_to_snapshot(index))
    assert restored.version == index.version
    assert restored.config == index.config
    assert dict(restored.entries) == dict(index.entries)
    assert dict(restored.token_postings) == dict(index.token_postings)
    assert dict(restored.phonetic_postings) == dict(index.phonetic_postings)
