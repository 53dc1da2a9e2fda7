import json
from unittest.mock import MagicMock, patch

import pytest

from imagelinks_catalog.exceptions import CatalogCorruptedError, StorageUnavailableError
from imagelinks_catalog.kv import InMemoryKeyValueStore, JsonFileKeyValueStore
from imagelinks_catalog.store import CatalogStore
from imagelinks_core.constants import KEY_API_HITS, KEY_IMAGE_LIST


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# Key-value back-ends
class TestInMemoryKeyValueStore:

    def test_get_missing_returns_none(self):
        assert InMemoryKeyValueStore().get("nope") is None

    def test_put_overwrites(self):
        kv = InMemoryKeyValueStore()
        kv.put("k", "1")
        kv.put("k", "2")
        assert kv.get("k") == "2"

    def test_ttl_expires(self):
        clock = FakeClock()
        kv = InMemoryKeyValueStore(clock=clock)
        kv.put("session_abc", "valid", ttl=60)
        assert kv.get("session_abc") == "valid"
        clock.now += 61
        assert kv.get("session_abc") is None

    def test_delete(self):
        kv = InMemoryKeyValueStore()
        kv.put("k", "v")
        kv.delete("k")
        kv.delete("k")
        assert kv.get("k") is None


class TestJsonFileKeyValueStore:

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileKeyValueStore(path).put("k", "v")
        assert JsonFileKeyValueStore(path).get("k") == "v"

    def test_missing_file_reads_as_empty(self, tmp_path):
        assert JsonFileKeyValueStore(tmp_path / "absent.json").get("k") is None

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.json"
        JsonFileKeyValueStore(path).put("k", "v")
        assert path.exists()

    def test_ttl_expires_and_is_purged(self, tmp_path):
        clock = FakeClock()
        path = tmp_path / "store.json"
        kv = JsonFileKeyValueStore(path, clock=clock)
        kv.put("session_abc", "valid", ttl=10)
        clock.now += 11
        assert kv.get("session_abc") is None

        kv.put("other", "x")
        assert "session_abc" not in json.loads(path.read_text())

    def test_leaves_no_temp_files(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "store.json")
        kv.put("a", "1")
        kv.put("b", "2")
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_failed_replace_removes_temp_file(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "store.json")
        kv.put("a", "1")

        with patch("imagelinks_catalog.kv.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(StorageUnavailableError):
                kv.put("b", "2")

        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]
        assert kv.get("b") is None

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        with pytest.raises(StorageUnavailableError):
            JsonFileKeyValueStore(path).get("k")

    def test_delete_removes_key(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "store.json")
        kv.put("k", "v")
        kv.delete("k")
        assert kv.get("k") is None


# Catalog adapter
class TestCatalogStore:

    def test_load_empty_when_absent(self, store):
        assert store.load_catalog() == []

    def test_round_trip_preserves_order(self, store, sample_records):
        store.save_catalog(sample_records)
        assert [r.url for r in store.load_catalog()] == [r.url for r in sample_records]

    def test_saves_documented_shape(self, store, kv, make_record):
        store.save_catalog([make_record("https://a/1.png", "x", 100, 50)])
        assert json.loads(kv.get(KEY_IMAGE_LIST)) == [
            {"url": "https://a/1.png", "tag": "x", "width": 100, "height": 50, "ratio": 2.0}
        ]

    def test_invalid_json_raises_corrupted(self, store, kv):
        kv.put(KEY_IMAGE_LIST, "{oops")
        with pytest.raises(CatalogCorruptedError):
            store.load_catalog()

    def test_non_array_document_raises_corrupted(self, store, kv):
        kv.put(KEY_IMAGE_LIST, json.dumps({"url": "https://a/1.png"}))
        with pytest.raises(CatalogCorruptedError):
            store.load_catalog()

    def test_corrupted_is_storage_unavailable(self):
        assert issubclass(CatalogCorruptedError, StorageUnavailableError)

    def test_skips_unreadable_entries(self, store, kv, caplog):
        kv.put(KEY_IMAGE_LIST, json.dumps([
            {"url": "https://a/1.png", "tag": "x", "width": 1, "height": 1, "ratio": 1},
            "garbage",
            {"tag": "no-url"},
        ]))
        with caplog.at_level("WARNING"):
            records = store.load_catalog()
        assert [r.url for r in records] == ["https://a/1.png"]
        assert "Skipping unreadable catalog entry" in caplog.text

    def test_store_read_failure_raises(self):
        kv = MagicMock()
        kv.get.side_effect = OSError("disk gone")
        with pytest.raises(StorageUnavailableError, match="disk gone"):
            CatalogStore(kv).load_catalog()

    def test_store_write_failure_raises(self, sample_records):
        kv = MagicMock()
        kv.put.side_effect = ConnectionError("unreachable")
        with pytest.raises(StorageUnavailableError):
            CatalogStore(kv).save_catalog(sample_records)

    def test_export_document_defaults_to_empty_array(self, store):
        assert store.export_document() == "[]"

    def test_export_document_returns_raw_json(self, seeded_store, sample_records):
        assert len(json.loads(seeded_store.export_document())) == len(sample_records)


class TestHitCounter:

    def test_starts_at_zero(self, store):
        assert store.load_hit_counter() == 0

    def test_increment(self, store, kv):
        store.increment_hit_counter()
        assert store.increment_hit_counter() == 2
        assert kv.get(KEY_API_HITS) == "2"

    def test_unparsable_value_reads_as_zero(self, store, kv):
        kv.put(KEY_API_HITS, "many")
        assert store.load_hit_counter() == 0

    def test_rejects_negative(self, store):
        with pytest.raises(ValueError):
            store.save_hit_counter(-1)

    def test_independent_from_catalog(self, seeded_store, sample_records):
        seeded_store.increment_hit_counter()
        assert len(seeded_store.load_catalog()) == len(sample_records)
