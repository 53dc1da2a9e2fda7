from unittest.mock import MagicMock

import pytest

from imagelinks_catalog.exceptions import InvalidFormatError, NotFoundError, StorageUnavailableError
from imagelinks_catalog.mutations import MutationEngine
from imagelinks_catalog.store import CatalogStore


@pytest.fixture
def engine(store):
    return MutationEngine(store)


class TestReplaceAll:

    def test_replaces_previous_catalog(self, seeded_store):
        result = MutationEngine(seeded_store).replace_all([{"url": "https://a/new.png"}])
        assert result.stored == 1
        assert [r.url for r in seeded_store.load_catalog()] == ["https://a/new.png"]

    def test_first_occurrence_wins(self, engine, store):
        engine.replace_all([
            {"url": "https://a/1.png", "tag": "first"},
            {"url": " https://a/1.png ", "tag": "second"},
        ])
        catalog = store.load_catalog()
        assert len(catalog) == 1
        assert catalog[0].tag == "first"

    def test_drops_invalid_records(self, engine, store):
        result = engine.replace_all([
            {"url": "https://a/1.png"},
            {"url": "ftp://a/2.png"},
            None,
            {"tag": "no-url"},
        ])
        assert result.stored == 1
        assert result.dropped == 3
        assert len(store.load_catalog()) == 1

    def test_size_never_exceeds_input(self, engine):
        raw = [{"url": f"https://a/{i % 3}.png"} for i in range(10)]
        assert engine.replace_all(raw).stored <= len(raw)

    def test_empty_list_clears_catalog(self, seeded_store):
        assert MutationEngine(seeded_store).replace_all([]).stored == 0
        assert seeded_store.load_catalog() == []

    @pytest.mark.parametrize("payload", [{"url": "https://a/1.png"}, "https://a/1.png", None, 3])
    def test_rejects_non_array(self, payload):
        kv = MagicMock()
        with pytest.raises(InvalidFormatError):
            MutationEngine(CatalogStore(kv)).replace_all(payload)
        kv.put.assert_not_called()

    def test_message_carries_count(self, engine):
        result = engine.replace_all([{"url": "https://a/1.png"}, {"url": "https://a/2.png"}])
        assert "Stored 2 unique links" in result.message


class TestAppendUnique:

    def test_skips_existing_url(self, engine, store):
        store.save_catalog([])
        engine.append_unique([{"url": "https://a/1.png", "tag": "x"}])

        result = engine.append_unique([
            {"url": "https://a/1.png", "tag": "x"},
            {"url": "https://a/2.png", "tag": "y"},
        ])

        assert result.added == 1
        assert result.total == 2

    def test_skips_duplicates_within_batch(self, engine, store):
        result = engine.append_unique([
            {"url": "https://a/1.png"},
            {"url": "https://a/1.png"},
            {"url": "https://a/1.png  "},
        ])
        assert result.added == 1
        assert len(store.load_catalog()) == 1

    def test_preserves_order(self, seeded_store, sample_records):
        MutationEngine(seeded_store).append_unique([
            {"url": "https://a/z.png"},
            {"url": "https://a/a.png"},
        ])
        urls = [r.url for r in seeded_store.load_catalog()]
        assert urls == [r.url for r in sample_records] + ["https://a/z.png", "https://a/a.png"]

    def test_never_shrinks_or_duplicates(self, seeded_store, sample_records):
        before = len(seeded_store.load_catalog())
        MutationEngine(seeded_store).append_unique([
            {"url": sample_records[0].url},
            {"url": "not-a-url"},
            {"url": "https://a/new.png"},
        ])
        urls = [r.url for r in seeded_store.load_catalog()]
        assert len(urls) >= before
        assert len(urls) == len(set(urls))

    def test_counts_dropped_records(self, engine):
        result = engine.append_unique([{"url": "mailto:x@y"}, {"url": "https://a/1.png"}])
        assert result.dropped == 1
        assert result.added == 1

    def test_rejects_non_array(self, engine):
        with pytest.raises(InvalidFormatError):
            engine.append_unique({"url": "https://a/1.png"})

    def test_storage_failure_aborts(self):
        kv = MagicMock()
        kv.get.return_value = "[]"
        kv.put.side_effect = OSError("write failed")
        with pytest.raises(StorageUnavailableError):
            MutationEngine(CatalogStore(kv)).append_unique([{"url": "https://a/1.png"}])

    def test_message_carries_counts(self, engine):
        result = engine.append_unique([{"url": "https://a/1.png"}])
        assert result.message == "Successfully added 1 new links. Total links: 1."


class TestBatchDelete:

    def test_deletes_matching_url(self, engine, store):
        engine.replace_all([{"url": "https://a/1.png"}])

        result = engine.batch_delete(["https://a/1.png"])

        assert (result.removed, result.remaining) == (1, 0)
        assert store.load_catalog() == []

    def test_second_identical_call_not_found(self, engine):
        engine.replace_all([{"url": "https://a/1.png"}])
        engine.batch_delete(["https://a/1.png"])
        with pytest.raises(NotFoundError):
            engine.batch_delete(["https://a/1.png"])

    def test_trims_input_urls(self, seeded_store, sample_records):
        result = MutationEngine(seeded_store).batch_delete([f"  {sample_records[1].url}\n"])
        assert result.removed == 1

    def test_disjoint_set_leaves_catalog_unchanged(self, seeded_store, sample_records):
        with pytest.raises(NotFoundError):
            MutationEngine(seeded_store).batch_delete(["https://elsewhere/x.png"])
        assert seeded_store.load_catalog() == sample_records

    def test_removes_several(self, seeded_store, sample_records):
        urls = [r.url for r in sample_records[:2]] + ["https://elsewhere/x.png"]
        result = MutationEngine(seeded_store).batch_delete(urls)
        assert (result.removed, result.remaining) == (2, 2)

    @pytest.mark.parametrize("payload", [[], None, "https://a/1.png", {"urlsToDelete": []}, [1, 2]])
    def test_rejects_invalid_input_without_touching_store(self, payload):
        kv = MagicMock()
        with pytest.raises(InvalidFormatError):
            MutationEngine(CatalogStore(kv)).batch_delete(payload)
        kv.get.assert_not_called()
        kv.put.assert_not_called()
