"""
Seed Statistics — характеристики начального распределения (prior)

Для вектора начальных весов считает сумму корня, минимальный вес и ΔE —
поддержку backstop, доступную рынку с этим prior:

    ΔE = α · ln(root_sum / (n · min_factor))

Для равномерного prior ΔE = 0.
"""

from dataclasses import dataclass
from typing import Sequence

from src.core.math.fixed_point import w_div, w_ln, w_mul
from src.tree.errors import InvalidFactor, TreeSizeZero


@dataclass(frozen=True)
class SeedStats:
    """Статистика prior."""

    root_sum: int
    min_factor: int
    delta_et: int


def compute_seed_stats(factors: Sequence[int], alpha: int) -> SeedStats:
    """
    Статистика prior для начальных весов factors.

    Raises:
        TreeSizeZero: Пустой вектор
        InvalidFactor: Нулевой или отрицательный вес
    """
    if len(factors) == 0:
        raise TreeSizeZero("Seed factors must not be empty")

    root_sum = 0
    min_factor = factors[0]
    for factor in factors:
        if factor <= 0:
            raise InvalidFactor(factor)
        root_sum += factor
        min_factor = min(min_factor, factor)

    uniform_sum = len(factors) * min_factor
    delta_et = w_mul(alpha, w_ln(w_div(root_sum, uniform_sum)))

    return SeedStats(root_sum=root_sum, min_factor=min_factor, delta_et=delta_et)
