"""Bloom Filter - вероятностная структура с точным учётом вставленных слов."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterator, List

import numpy as np

logger = logging.getLogger(__name__)

MIN_CAPACITY = 8
MAX_CAPACITY = 128
MIN_HASH_COUNT = 1
MAX_HASH_COUNT = 5


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


@dataclass(frozen=True)
class BloomConfig:
    capacity: int = 32   # размер битового массива (m)
    hash_count: int = 3  # количество хеш-функций (k)

    def clamped(self) -> 'BloomConfig':
        """Копия с параметрами, приведёнными к [8, 128] и [1, 5]."""
        return replace(
            self,
            capacity=_clamp(self.capacity, MIN_CAPACITY, MAX_CAPACITY),
            hash_count=_clamp(self.hash_count, MIN_HASH_COUNT, MAX_HASH_COUNT),
        )

    @property
    def is_valid(self) -> bool:
        return self == self.clamped()

    @property
    def optimal_n(self) -> int:
        """Оптимальное количество элементов: n = (m/k) * ln(2)."""
        return int(self.capacity * np.log(2) / self.hash_count)


def _utf16_units(key: str) -> Iterator[int]:
    """Кодовые единицы UTF-16 (символы вне BMP дают суррогатную пару)."""
    for ch in key:
        code = ord(ch)
        if code > 0xFFFF:
            code -= 0x10000
            yield 0xD800 + (code >> 10)
            yield 0xDC00 + (code & 0x3FF)
        else:
            yield code


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


class BloomFilter:
    """Bloom Filter: битовый массив + множество слов для точного удаления."""

    def __init__(self, capacity: int = 32, hash_count: int = 3):
        config = BloomConfig(capacity, hash_count).clamped()
        self.capacity = config.capacity
        self.hash_count = config.hash_count
        self.bits = np.zeros(self.capacity, dtype=bool)
        # dict сохраняет порядок вставки
        self.members: Dict[str, None] = {}

    @classmethod
    def from_config(cls, config: BloomConfig) -> 'BloomFilter':
        return cls(config.capacity, config.hash_count)

    @property
    def config(self) -> BloomConfig:
        return BloomConfig(self.capacity, self.hash_count)

    # ── Хеширование ───────────────────────────────────────────────────────────

    def hash(self, key: str, seed: int) -> int:
        """Полиномиальный rolling hash: h = h*31 + c*seed по модулю 2^32 со знаком."""
        h = 0
        for c in _utf16_units(key):
            h = _to_int32((h << 5) - h + c * seed)
        return abs(h) % self.capacity

    def get_hash_positions(self, key: str) -> List[int]:
        """Позиции для seed = 1..k. Повторы не убираются."""
        return [self.hash(key, seed) for seed in range(1, self.hash_count + 1)]

    # ── Мутации ───────────────────────────────────────────────────────────────

    def insert(self, key: str) -> bool:
        """Вставка. Возвращает False если слово уже есть."""
        if key in self.members:
            return False
        self._set_bits(key)
        self.members[key] = None
        logger.debug("inserted %r, bits set: %d", key, int(self.bits.sum()))
        return True

    def remove(self, key: str) -> bool:
        """Удаление через полную перестройку по оставшимся словам."""
        if key not in self.members:
            return False
        del self.members[key]
        self.bits[:] = False
        # Общие биты нельзя сбросить выборочно
        for word in self.members:
            self._set_bits(word)
        logger.debug("removed %r, rebuilt from %d members", key, len(self.members))
        return True

    def reset(self) -> None:
        self.bits[:] = False
        self.members.clear()

    def update_params(self, capacity: int, hash_count: int) -> List[str]:
        """Смена m и k. Все слова перехешируются, возвращает прежний список слов."""
        old_words = list(self.members)
        config = BloomConfig(capacity, hash_count).clamped()
        self.reset()
        self.capacity = config.capacity
        self.hash_count = config.hash_count
        self.bits = np.zeros(self.capacity, dtype=bool)
        for word in old_words:
            self.insert(word)
        logger.debug("params -> m=%d k=%d, rehashed %d words",
                     self.capacity, self.hash_count, len(old_words))
        return old_words

    def _set_bits(self, key: str) -> None:
        self.bits[self.get_hash_positions(key)] = True

    # ── Запросы ───────────────────────────────────────────────────────────────

    def might_contain(self, key: str) -> bool:
        """Все k битов установлены. Возможен false positive."""
        return bool(self.bits[self.get_hash_positions(key)].all())

    def definitely_contains(self, key: str) -> bool:
        return key in self.members

    def __contains__(self, key: str) -> bool:
        return self.might_contain(key)

    def __len__(self) -> int:
        return len(self.members)

    def snapshot(self) -> dict:
        """Независимая копия состояния из обычных list/int."""
        return {
            'bits': self.bits.tolist(),
            'members': list(self.members),
            'capacity': self.capacity,
            'hash_count': self.hash_count,
        }

    @property
    def fill_ratio(self) -> float:
        return float(self.bits.mean())

    @property
    def estimated_fpr(self) -> float:
        """False Positive Rate: (1 - e^(-kn/m))^k."""
        n = len(self.members)
        if n == 0:
            return 0.0
        k, m = self.hash_count, self.capacity
        return float((1 - np.exp(-k * n / m)) ** k)

    def __repr__(self) -> str:
        return f"BloomFilter(capacity={self.capacity}, hash_count={self.hash_count}, members={len(self.members)})"
