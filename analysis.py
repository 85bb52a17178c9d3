"""Эксперименты: реальный FPR фильтра против теоретического на допустимой сетке m и k."""

from typing import List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt

from bloom_filter import BloomFilter, MAX_CAPACITY, MIN_CAPACITY, MAX_HASH_COUNT, MIN_HASH_COUNT


def generate_dataset(size: int, seed: Optional[int] = None) -> Tuple[List[str], List[str]]:
    # train и test с разными префиксами — гарантированно не пересекаются
    rng = np.random.default_rng(seed)
    salt = int(rng.integers(0, 10**6))
    train = [f"train_{salt}_{i}" for i in range(size)]
    test  = [f"test_{salt}_{i}"  for i in range(size)]
    return train, test


def theoretical_fpr(capacity: int, hash_count: int, n: int) -> float:
    """(1 - e^(-kn/m))^k"""
    if n == 0:
        return 0.0
    return float((1 - np.exp(-hash_count * n / capacity)) ** hash_count)


def measure_fpr(capacities: List[int], hash_counts: List[int], n: int = 10,
                trials: int = 20, seed: int = 0) -> np.ndarray:
    """Средний FPR по trials прогонам для каждой пары (m, k)."""
    results = np.zeros((len(capacities), len(hash_counts)))

    for i, m in enumerate(capacities):
        for j, k in enumerate(hash_counts):
            rates = []
            for t in range(trials):
                train, test = generate_dataset(n, seed=seed + t)
                bf = BloomFilter(m, k)
                for item in train:
                    bf.insert(item)
                # Считаем false positives
                rates.append(sum(1 for item in test if item in bf) / len(test))
            results[i, j] = np.mean(rates)

    return results


def theoretical_grid(capacities: List[int], hash_counts: List[int], n: int) -> np.ndarray:
    return np.array([[theoretical_fpr(m, k, n) for k in hash_counts] for m in capacities])


def plot_heatmap(results: np.ndarray, capacities: List[int], hash_counts: List[int], n: int,
                 path: str = 'bloom_fpr_heatmap.png') -> str:
    """Реальный FPR слева, теоретический справа, общая шкала цвета."""
    theory = theoretical_grid(capacities, hash_counts, n)
    fig, axes = plt.subplots(1, 2, figsize=(12, 6), sharey=True)

    for ax, grid, title in ((axes[0], results, 'Реальный'), (axes[1], theory, 'Теория')):
        im = ax.imshow(grid, cmap='viridis', aspect='auto', vmin=0.0, vmax=1.0)
        # подпись в каждой клетке: значение и отклонение от теории
        for i in range(len(capacities)):
            for j in range(len(hash_counts)):
                label = f"{grid[i, j]:.2f}"
                if grid is results:
                    label += f"\n{results[i, j] - theory[i, j]:+.2f}"
                ax.text(j, i, label, ha='center', va='center', fontsize=7,
                        color='white' if grid[i, j] < 0.5 else 'black')
        ax.set_xticks(range(len(hash_counts)))
        ax.set_xticklabels(hash_counts)
        ax.set_xlabel('k (hash functions)')
        ax.set_title(f"{title} FPR (n={n})")

    axes[0].set_yticks(range(len(capacities)))
    axes[0].set_yticklabels(capacities)
    axes[0].set_ylabel('m (bit array size)')
    fig.colorbar(im, ax=axes, label='False Positive Rate')
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path


if __name__ == "__main__":
    m_vals = list(range(MIN_CAPACITY, MAX_CAPACITY + 1, 24))
    k_vals = list(range(MIN_HASH_COUNT, MAX_HASH_COUNT + 1))

    print("Running FPR analysis...")
    fpr_matrix = measure_fpr(m_vals, k_vals, n=10)
    for m, row in zip(m_vals, fpr_matrix):
        theory = [theoretical_fpr(m, k, 10) for k in k_vals]
        print(f"m={m:>3}: " + "  ".join(f"{r:.3f}/{t:.3f}" for r, t in zip(row, theory)))
    print("Сохранено:", plot_heatmap(fpr_matrix, m_vals, k_vals, n=10))
