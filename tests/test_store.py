"""
Tests for the Local Key-Value Store

Run with: pytest tests/test_store.py -v
"""

import threading

from core.store import KeyValueStore, MemoryStore, StoreKeys


class TestKeyValueStore:
    """Test the JSON-file store."""

    def test_round_trip(self, tmp_path):
        """Test a value written is read back equal."""
        store = KeyValueStore(tmp_path / "state")
        store.set(StoreKeys.STATUS_LIGHTS, {"Machine_1_Equipment_1": [1, 0]})

        assert store.get(StoreKeys.STATUS_LIGHTS) == {"Machine_1_Equipment_1": [1, 0]}
        assert (tmp_path / "state" / "statusLights.json").exists()

    def test_missing_key_returns_default(self, tmp_path):
        """Test absent keys read as the default."""
        store = KeyValueStore(tmp_path)
        assert store.get(StoreKeys.FILTERS) is None
        assert store.get(StoreKeys.FILTERS, {}) == {}

    def test_corrupt_blob_reads_as_absent(self, tmp_path):
        """Test a damaged file does not raise."""
        (tmp_path / "chartData.json").write_text("{not json", encoding="utf-8")
        store = KeyValueStore(tmp_path)

        assert store.get(StoreKeys.CHART_DATA, []) == []

    def test_overwrite(self, tmp_path):
        """Test a second write replaces the first."""
        store = KeyValueStore(tmp_path)
        store.set(StoreKeys.START_DATE, "2024-05-01")
        store.set(StoreKeys.START_DATE, "2024-06-01")

        assert store.get(StoreKeys.START_DATE) == "2024-06-01"
        assert list(tmp_path.glob("*.tmp")) == []

    def test_delete_and_contains(self, tmp_path):
        """Test deletion."""
        store = KeyValueStore(tmp_path)
        store.set(StoreKeys.END_DATE, "")
        assert store.contains(StoreKeys.END_DATE)

        store.delete(StoreKeys.END_DATE)
        assert not store.contains(StoreKeys.END_DATE)
        store.delete(StoreKeys.END_DATE)

    def test_load_all_and_clear(self, tmp_path):
        """Test bulk read and clear of the dashboard keys."""
        store = KeyValueStore(tmp_path)
        store.set(StoreKeys.DISPLAY_OPTIONS, {"Machine_1": "daily"})
        store.set(StoreKeys.DISPLAY_MODES, {"Machine_1": ["vibration"]})

        assert store.load_all() == {
            "displayOptions": {"Machine_1": "daily"},
            "displayModes": {"Machine_1": ["vibration"]},
        }

        store.clear()
        assert store.load_all() == {}


class TestConcurrentWrites:
    """Test several sessions writing the same directory."""

    def test_parallel_sets_do_not_collide(self, tmp_path):
        """Test threads writing one key never fail and leave a readable blob."""
        errors = []

        def writer(n):
            store = KeyValueStore(tmp_path)
            for i in range(300):
                try:
                    store.set(StoreKeys.STATUS_LIGHTS, {"writer": n, "i": i})
                except Exception as e:
                    errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert KeyValueStore(tmp_path).get(StoreKeys.STATUS_LIGHTS)["i"] == 299
        assert list(tmp_path.glob("*.tmp")) == []


class TestMemoryStore:
    """Test the in-process store."""

    def test_values_are_copies(self):
        """Test mutating a read value does not change the store."""
        store = MemoryStore({StoreKeys.STATUS_LIGHTS: {"A": [1]}})
        value = store.get(StoreKeys.STATUS_LIGHTS)
        value["A"].append(0)

        assert store.get(StoreKeys.STATUS_LIGHTS) == {"A": [1]}

    def test_delete(self):
        """Test deletion."""
        store = MemoryStore({StoreKeys.START_DATE: "2024-05-01"})
        store.delete(StoreKeys.START_DATE)

        assert not store.contains(StoreKeys.START_DATE)
        assert store.get(StoreKeys.START_DATE, "") == ""
