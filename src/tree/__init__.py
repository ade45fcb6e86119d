"""
Tree — разреженное дерево весов CLMSR и ценообразование поверх него.
"""

from src.tree.errors import (
    IndexOutOfBounds,
    InvalidFactor,
    InvalidLiquidityParameter,
    InvalidRange,
    SeedLengthMismatch,
    TreeAlreadyInitialized,
    TreeAlreadySeeded,
    TreeError,
    TreeNotInitialized,
    TreeNotPristine,
    TreeSizeTooLarge,
    TreeSizeZero,
)
from src.tree.lazy_mul_tree import (
    DEFAULT_TREE_CONFIG,
    MAX_FACTOR,
    MIN_FACTOR,
    LazyMulSegmentTree,
    TreeConfig,
)
from src.tree.pricing import (
    apply_buy,
    apply_sell,
    compute_buy_cost_from_sum_change,
    compute_sell_proceeds_from_sum_change,
    max_safe_chunk_quantity,
    quantity_from_cost,
    quote_buy,
    quote_sell,
    safe_exp,
)
from src.tree.seed_stats import SeedStats, compute_seed_stats

__all__ = [
    # Tree
    "LazyMulSegmentTree",
    "TreeConfig",
    "DEFAULT_TREE_CONFIG",
    "MIN_FACTOR",
    "MAX_FACTOR",
    # Pricing
    "safe_exp",
    "max_safe_chunk_quantity",
    "compute_buy_cost_from_sum_change",
    "compute_sell_proceeds_from_sum_change",
    "quote_buy",
    "quote_sell",
    "apply_buy",
    "apply_sell",
    "quantity_from_cost",
    # Seed
    "SeedStats",
    "compute_seed_stats",
    # Errors
    "TreeError",
    "TreeNotInitialized",
    "TreeAlreadyInitialized",
    "TreeSizeZero",
    "TreeSizeTooLarge",
    "TreeAlreadySeeded",
    "TreeNotPristine",
    "SeedLengthMismatch",
    "InvalidRange",
    "IndexOutOfBounds",
    "InvalidFactor",
    "InvalidLiquidityParameter",
]
