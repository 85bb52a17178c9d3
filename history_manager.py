"""История операций над фильтром — ограниченный лог для повторного просмотра."""

import copy
import logging
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

MAX_HISTORY_SIZE = 50

_ID_ALPHABET = string.digits + string.ascii_lowercase


class EntryKind(Enum):
    ADD = "add"
    CHECK = "check"
    REMOVE = "remove"
    RESET = "reset"
    UPDATE = "update"


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    timestamp: str
    kind: EntryKind
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    description: str = ""

    def to_dict(self) -> dict:
        """Для сериализации в JSON."""
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'kind': self.kind.value,
            'payload': _thaw(self.payload),
            'description': self.description,
        }


def _new_id() -> str:
    # миллисекунды + случайный base36 суффикс
    suffix = ''.join(random.choices(_ID_ALPHABET, k=7))
    return f"{int(time.time() * 1000)}{suffix}"


def _freeze(value: Any) -> Any:
    """dict -> MappingProxyType, list -> tuple, рекурсивно."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(v) for v in value)
    return copy.deepcopy(value)


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    if isinstance(value, frozenset):
        return [_thaw(v) for v in value]
    return value


class HistoryManager:
    """Новые записи в начале, при переполнении удаляется самая старая."""

    def __init__(self, max_history_size: int = MAX_HISTORY_SIZE):
        if max_history_size < 1:
            raise ValueError("max_history_size must be positive")
        self.max_history_size = max_history_size
        self.history: List[HistoryEntry] = []

    def add_entry(self, kind: Union[EntryKind, str], payload: Optional[dict],
                  description: str) -> HistoryEntry:
        kind = EntryKind(kind)
        entry_id = _new_id()
        while self.get_entry(entry_id) is not None:
            entry_id = _new_id()

        entry = HistoryEntry(
            id=entry_id,
            timestamp=datetime.now().strftime("%H:%M:%S"),
            kind=kind,
            # глубокая копия только для чтения: живой фильтр потом меняется
            payload=_freeze(payload or {}),
            description=description,
        )
        self.history.insert(0, entry)

        if len(self.history) > self.max_history_size:
            dropped = self.history.pop()
            logger.debug("history full, evicted %s (%s)", dropped.id, dropped.kind.value)
        return entry

    def get_history(self) -> List[HistoryEntry]:
        return list(self.history)

    def get_entry(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self.history:
            if entry.id == entry_id:
                return entry
        return None

    def clear_history(self) -> None:
        self.history = []

    def __len__(self) -> int:
        return len(self.history)
