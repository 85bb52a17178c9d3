"""
Сессия визуализатора: владеет фильтром и историей.
Каждая операция над фильтром записывается в историю со снимком состояния.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from bloom_filter import BloomConfig, BloomFilter
from history_manager import EntryKind, HistoryEntry, HistoryManager, MAX_HISTORY_SIZE

logger = logging.getLogger(__name__)


class Verdict(Enum):
    DEFINITELY_PRESENT = auto()
    POSSIBLE_FALSE_POSITIVE = auto()
    DEFINITELY_ABSENT = auto()


class FocusTarget(Enum):
    NONE = auto()
    ADD = auto()
    CHECK = auto()


@dataclass(frozen=True)
class CheckResult:
    word: str
    positions: List[int]
    might_contain: bool
    definitely_contains: bool

    @property
    def verdict(self) -> Verdict:
        if self.definitely_contains:
            return Verdict.DEFINITELY_PRESENT
        if self.might_contain:
            return Verdict.POSSIBLE_FALSE_POSITIVE
        return Verdict.DEFINITELY_ABSENT

    @property
    def message(self) -> str:
        v = self.verdict
        if v is Verdict.DEFINITELY_PRESENT:
            return f'"{self.word}" is DEFINITELY in the Bloom filter.'
        if v is Verdict.POSSIBLE_FALSE_POSITIVE:
            return f'"{self.word}" MIGHT be in the Bloom filter (possible false positive).'
        return f'"{self.word}" is DEFINITELY NOT in the Bloom filter.'


def _clean(word: str) -> str:
    word = word.strip()
    if not word:
        raise ValueError("Please enter a word")
    return word


class BloomSession:
    """Единственный владелец фильтра; история только наблюдает."""

    def __init__(self, config: Optional[BloomConfig] = None,
                 max_history_size: int = MAX_HISTORY_SIZE):
        self.config = (config or BloomConfig()).clamped()
        self.bloom_filter = BloomFilter.from_config(self.config)
        self.history = HistoryManager(max_history_size)
        self.current_entry: Optional[HistoryEntry] = None

    @property
    def filter_state(self) -> dict:
        return self.bloom_filter.snapshot()

    def _record(self, kind: EntryKind, payload: dict, description: str) -> HistoryEntry:
        payload['filter_state'] = self.bloom_filter.snapshot()
        return self.history.add_entry(kind, payload, description)

    # ── Операции ──────────────────────────────────────────────────────────────

    def add_word(self, word: str) -> bool:
        word = _clean(word)
        if not self.bloom_filter.insert(word):
            logger.info('word "%s" is already in the filter', word)
            return False
        entry = self._record(
            EntryKind.ADD,
            {'word': word, 'positions': self.bloom_filter.get_hash_positions(word)},
            f'Added word "{word}" to the filter',
        )
        self.current_entry = entry
        return True

    def check_word(self, word: str) -> CheckResult:
        word = _clean(word)
        result = CheckResult(
            word=word,
            positions=self.bloom_filter.get_hash_positions(word),
            might_contain=self.bloom_filter.might_contain(word),
            definitely_contains=self.bloom_filter.definitely_contains(word),
        )
        entry = self._record(
            EntryKind.CHECK,
            {
                'word': word,
                'positions': list(result.positions),
                'might_contain': result.might_contain,
                'definitely_contains': result.definitely_contains,
            },
            f'Checked if word "{word}" exists in the filter',
        )
        self.current_entry = entry
        return result

    def remove_word(self, word: str) -> bool:
        word = _clean(word)
        if not self.bloom_filter.remove(word):
            logger.info('word "%s" is not in the filter', word)
            return False
        self._record(EntryKind.REMOVE, {'word': word}, f'Removed word "{word}" from the filter')
        return True

    def reset_filter(self) -> None:
        self.bloom_filter.reset()
        self._record(EntryKind.RESET, {}, "Reset Bloom Filter")

    def update_filter_params(self, capacity: int, hash_count: int) -> List[str]:
        """Параметры приводятся к допустимым границам; о корректировке пишется warning."""
        requested = BloomConfig(int(capacity), int(hash_count))
        config = requested.clamped()
        if config != requested:
            logger.warning("requested size=%d, hash functions=%d adjusted to size=%d, hash functions=%d",
                           requested.capacity, requested.hash_count,
                           config.capacity, config.hash_count)

        previous = self.bloom_filter.update_params(config.capacity, config.hash_count)
        self.config = config
        self._record(
            EntryKind.UPDATE,
            {
                'requested_capacity': requested.capacity if requested.capacity != config.capacity else None,
                'requested_hash_count': requested.hash_count if requested.hash_count != config.hash_count else None,
                'previous_members': previous,
            },
            f"Updated filter parameters to size={config.capacity}, hash functions={config.hash_count}",
        )
        return previous

    # ── Повтор ────────────────────────────────────────────────────────────────

    def replay_last(self) -> Optional[HistoryEntry]:
        """Последняя запись становится текущей (история хранится новыми вперёд)."""
        history = self.history.get_history()
        if not history:
            return None
        self.current_entry = history[0]
        return self.current_entry

    def replay(self, entry_id: str) -> Optional[HistoryEntry]:
        entry = self.history.get_entry(entry_id)
        if entry is not None:
            self.current_entry = entry
        return entry

    @property
    def focus_target(self) -> FocusTarget:
        if self.current_entry is None:
            return FocusTarget.NONE
        if self.current_entry.kind is EntryKind.ADD:
            return FocusTarget.ADD
        if self.current_entry.kind is EntryKind.CHECK:
            return FocusTarget.CHECK
        return FocusTarget.NONE

    def clear_history(self) -> None:
        self.history.clear_history()
        self.current_entry = None
