"""Тесты истории операций."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import json
import re

import pytest
from bloom_filter import BloomFilter
from history_manager import EntryKind, HistoryManager, MAX_HISTORY_SIZE


class TestHistoryManager:
    def test_add_entry(self):
        hm = HistoryManager()
        entry = hm.add_entry("add", {"word": "a"}, 'Added word "a" to the filter')
        assert entry.kind is EntryKind.ADD
        assert entry.payload == {"word": "a"}
        assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", entry.timestamp)
        assert hm.get_history() == [entry]

    def test_most_recent_first(self):
        hm = HistoryManager()
        first = hm.add_entry(EntryKind.ADD, {}, "first")
        second = hm.add_entry(EntryKind.CHECK, {}, "second")
        assert hm.get_history() == [second, first]

    def test_bounded(self):
        hm = HistoryManager()
        for i in range(60):
            hm.add_entry(EntryKind.CHECK, {"n": i}, f"op {i}")
        history = hm.get_history()
        assert len(history) == MAX_HISTORY_SIZE == 50
        assert history[0].description == "op 59"
        assert history[-1].description == "op 10"

    def test_custom_size(self):
        hm = HistoryManager(max_history_size=3)
        for i in range(5):
            hm.add_entry(EntryKind.RESET, {}, str(i))
        assert [e.description for e in hm.get_history()] == ["4", "3", "2"]

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            HistoryManager(max_history_size=0)

    def test_unique_ids(self):
        hm = HistoryManager()
        ids = {hm.add_entry(EntryKind.CHECK, {}, "x").id for _ in range(50)}
        assert len(ids) == 50

    def test_get_entry(self):
        hm = HistoryManager()
        entry = hm.add_entry(EntryKind.ADD, {"word": "a", "positions": [1, 2]}, "add a")
        hm.add_entry(EntryKind.CHECK, {}, "check")
        found = hm.get_entry(entry.id)
        assert found is entry
        assert found.payload == {"word": "a", "positions": (1, 2)}

    def test_get_entry_missing(self):
        hm = HistoryManager()
        hm.add_entry(EntryKind.ADD, {}, "x")
        assert hm.get_entry("nope") is None

    def test_evicted_entry_not_found(self):
        hm = HistoryManager(max_history_size=2)
        oldest = hm.add_entry(EntryKind.ADD, {}, "0")
        hm.add_entry(EntryKind.ADD, {}, "1")
        hm.add_entry(EntryKind.ADD, {}, "2")
        assert hm.get_entry(oldest.id) is None

    def test_clear_history(self):
        hm = HistoryManager()
        hm.add_entry(EntryKind.ADD, {}, "x")
        hm.clear_history()
        hm.clear_history()
        assert hm.get_history() == []
        assert len(hm) == 0

    def test_get_history_is_copy(self):
        hm = HistoryManager()
        hm.add_entry(EntryKind.ADD, {}, "x")
        hm.get_history().clear()
        assert len(hm) == 1

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            HistoryManager().add_entry("explode", {}, "x")

    def test_payload_isolated_from_filter(self):
        """Запись хранит снимок, а не ссылку на живое состояние."""
        bf = BloomFilter(16, 2)
        bf.insert("a")
        payload = {"filter_state": bf.snapshot()}
        entry = HistoryManager().add_entry(EntryKind.ADD, payload, "add a")
        payload["filter_state"]["members"].append("mutated")
        bf.insert("b")
        assert entry.payload["filter_state"]["members"] == ("a",)

    def test_entry_frozen(self):
        entry = HistoryManager().add_entry(EntryKind.ADD, {}, "x")
        with pytest.raises(AttributeError):
            entry.description = "changed"

    def test_payload_read_only(self):
        """Записанную историю нельзя переписать через возвращённую запись."""
        bf = BloomFilter(16, 2)
        bf.insert("a")
        hm = HistoryManager()
        entry = hm.add_entry(EntryKind.ADD, {"word": "a", "filter_state": bf.snapshot()}, "add a")
        found = hm.get_entry(entry.id)
        with pytest.raises(TypeError):
            found.payload["word"] = "zzz"
        with pytest.raises(TypeError):
            found.payload["filter_state"]["members"] = ["zzz"]
        with pytest.raises(AttributeError):
            found.payload["filter_state"]["members"].append("zzz")
        assert hm.get_history()[0].payload["word"] == "a"
        assert hm.get_history()[0].payload["filter_state"]["members"] == ("a",)

    def test_to_dict_is_mutable_copy(self):
        hm = HistoryManager()
        entry = hm.add_entry(EntryKind.ADD, {"word": "a", "positions": [1, 2]}, "add a")
        data = entry.to_dict()
        assert data["payload"] == {"word": "a", "positions": [1, 2]}
        data["payload"]["word"] = "zzz"
        data["payload"]["positions"].append(3)
        assert entry.payload["word"] == "a"
        assert entry.payload["positions"] == (1, 2)

    def test_to_dict_json(self):
        bf = BloomFilter(8, 1)
        bf.insert("a")
        entry = HistoryManager().add_entry(EntryKind.ADD, {"filter_state": bf.snapshot()}, "add a")
        data = json.loads(json.dumps(entry.to_dict()))
        assert data["kind"] == "add"
        assert data["id"] == entry.id
        assert data["payload"]["filter_state"]["bits"][1] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
