"""
CLMSR Pricing — стоимость сделок по изменению суммы весов дерева

Покупка количества q на диапазоне [lo, hi] умножает веса диапазона на
exp(q/α); стоимость = α · ln(T_after / T_before), где T — сумма весов всего
домена. Продажа — множитель exp(−q/α), выручка = α · ln(T_before / T_after).

Округление:
- стоимость покупки (дебет) — вверх: ln_up поверх floor-отношения
- выручка продажи (кредит) — вниз

Крупная сделка делится на чанки не больше max_safe_chunk_quantity(α): множитель
каждого чанка остаётся в полосе [MIN_FACTOR, MAX_FACTOR] дерева и
в домене w_exp.
"""

import logging
from typing import Final

from src.core.math.fixed_point import (
    MAX_EXP_INPUT_WAD,
    MAX_UINT256,
    WAD,
    FixedPointOverflow,
    w_div,
    w_div_up,
    w_exp,
    w_ln,
    w_ln_up,
    w_mul,
    w_mul_nearest,
    w_mul_up,
)
from src.tree.errors import InvalidLiquidityParameter
from src.tree.lazy_mul_tree import MAX_FACTOR, LazyMulSegmentTree

logger = logging.getLogger(__name__)

_CHUNKED_SUM_LIMIT: Final[int] = MAX_UINT256 // 4


# =============================================================================
# ПРИМИТИВЫ
# =============================================================================


def safe_exp(quantity: int, alpha: int) -> int:
    """
    exp(q / α) в WAD.

    Raises:
        InvalidLiquidityParameter: α == 0
        FixedPointOverflow: q / α > MAX_EXP_INPUT_WAD
    """
    if alpha == 0:
        raise InvalidLiquidityParameter("Liquidity parameter alpha must be positive")
    return w_exp(w_div(quantity, alpha))


def max_safe_chunk_quantity(alpha: int) -> int:
    """
    Максимальное количество одного чанка: min(α·ln(MAX_FACTOR), α·MAX_EXP_INPUT).

    Для реальных α ограничение дерева (ln 100 ≈ 4.6) всегда связывающее.
    """
    if alpha == 0:
        return 0
    tree_limit = w_mul(alpha, w_ln(MAX_FACTOR))
    exp_limit = w_mul(alpha, MAX_EXP_INPUT_WAD)
    return min(tree_limit, exp_limit)


def compute_buy_cost_from_sum_change(alpha: int, sum_before: int, sum_after: int) -> int:
    """Стоимость покупки α · ln(after / before), округление вверх; 0 при after ≤ before."""
    if sum_after <= sum_before:
        return 0
    ratio = w_div(sum_after, sum_before)
    if ratio <= WAD:
        return 0
    return w_mul(alpha, w_ln_up(ratio))


def compute_sell_proceeds_from_sum_change(alpha: int, sum_before: int, sum_after: int) -> int:
    """Выручка продажи α · ln(before / after), округление вниз; 0 при after ≥ before."""
    if sum_after >= sum_before:
        return 0
    ratio = w_div(sum_before, sum_after)
    return w_mul(alpha, w_ln(ratio))


def _chunks(alpha: int, quantity: int) -> list[int]:
    max_chunk = max_safe_chunk_quantity(alpha)
    if max_chunk == 0:
        raise InvalidLiquidityParameter("Liquidity parameter alpha must be positive")

    chunks = []
    remaining = quantity
    while remaining > 0:
        chunk = min(remaining, max_chunk)
        chunks.append(chunk)
        remaining -= chunk

    if len(chunks) > 1:
        logger.debug("quantity %d split into %d chunks (max %d)", quantity, len(chunks), max_chunk)
    return chunks


def _require_headroom(total: int, factors: list[int]) -> None:
    # Граница суммы домена после всех чанков; запас вдвое шире проверки дерева
    bound = total
    for factor in factors:
        bound = w_mul_up(bound, max(factor, WAD))
    if bound > _CHUNKED_SUM_LIMIT:
        raise FixedPointOverflow(f"Chunked update would overflow root sum {total}")


def _buy_factor(chunk: int, alpha: int) -> int:
    return safe_exp(chunk, alpha)


def _sell_factor(chunk: int, alpha: int) -> int:
    # Округление вверх: веса после продажи не ниже точных, выручка не завышена
    return w_div_up(WAD, safe_exp(chunk, alpha))


# =============================================================================
# КОТИРОВКИ (без мутации дерева)
# =============================================================================


def _simulate(
    tree: LazyMulSegmentTree, alpha: int, lo: int, hi: int, quantity: int, is_buy: bool
) -> int:
    range_sum = tree.get_range_sum(lo, hi)
    total = tree.total_sum()
    if quantity == 0:
        return 0

    amount = 0
    for chunk in _chunks(alpha, quantity):
        factor = _buy_factor(chunk, alpha) if is_buy else _sell_factor(chunk, alpha)
        new_range_sum = w_mul_nearest(range_sum, factor)
        new_total = total - range_sum + new_range_sum

        if is_buy:
            amount += compute_buy_cost_from_sum_change(alpha, total, new_total)
        else:
            amount += compute_sell_proceeds_from_sum_change(alpha, total, new_total)

        range_sum, total = new_range_sum, new_total
    return amount


def quote_buy(tree: LazyMulSegmentTree, alpha: int, lo: int, hi: int, quantity: int) -> int:
    """
    Стоимость покупки quantity на диапазоне [lo, hi] без изменения дерева.

    Examples:
        Покупка на всём домене стоит ровно quantity (с точностью округления):
        T · exp(q/α) / T = exp(q/α) ⇒ α · ln(exp(q/α)) = q.
    """
    return _simulate(tree, alpha, lo, hi, quantity, is_buy=True)


def quote_sell(tree: LazyMulSegmentTree, alpha: int, lo: int, hi: int, quantity: int) -> int:
    """Выручка продажи quantity на диапазоне [lo, hi] без изменения дерева."""
    return _simulate(tree, alpha, lo, hi, quantity, is_buy=False)


# =============================================================================
# ИСПОЛНЕНИЕ (мутация дерева)
# =============================================================================


def _execute(
    tree: LazyMulSegmentTree, alpha: int, lo: int, hi: int, quantity: int, is_buy: bool
) -> int:
    # Валидация диапазона до первой мутации
    tree.get_range_sum(lo, hi)
    if quantity == 0:
        return 0

    chunks = _chunks(alpha, quantity)
    factors = [
        _buy_factor(chunk, alpha) if is_buy else _sell_factor(chunk, alpha) for chunk in chunks
    ]
    _require_headroom(tree.total_sum(), factors)

    amount = 0
    for factor in factors:
        before = tree.total_sum()
        tree.apply_range_factor(lo, hi, factor)
        after = tree.total_sum()

        if is_buy:
            amount += compute_buy_cost_from_sum_change(alpha, before, after)
        else:
            amount += compute_sell_proceeds_from_sum_change(alpha, before, after)
    return amount


def apply_buy(tree: LazyMulSegmentTree, alpha: int, lo: int, hi: int, quantity: int) -> int:
    """Покупка quantity на [lo, hi]: мутирует дерево, возвращает стоимость (WAD)."""
    return _execute(tree, alpha, lo, hi, quantity, is_buy=True)


def apply_sell(tree: LazyMulSegmentTree, alpha: int, lo: int, hi: int, quantity: int) -> int:
    """Продажа quantity на [lo, hi]: мутирует дерево, возвращает выручку (WAD)."""
    return _execute(tree, alpha, lo, hi, quantity, is_buy=False)


# =============================================================================
# ОБРАТНОЕ ЦЕНООБРАЗОВАНИЕ
# =============================================================================


def quantity_from_cost(tree: LazyMulSegmentTree, alpha: int, lo: int, hi: int, cost: int) -> int:
    """
    Количество, покупаемое на [lo, hi] за стоимость cost.

    Из T · exp(C/α) = T − s + s · exp(q/α):
        q = α · ln((T · exp(C/α) − T + s) / s)

    Raises:
        InvalidLiquidityParameter: α == 0
        FixedPointOverflow: C / α > MAX_EXP_INPUT_WAD
    """
    range_sum = tree.get_range_sum(lo, hi)
    total = tree.total_sum()
    if cost == 0:
        return 0

    target_total = w_mul(total, safe_exp(cost, alpha))
    if target_total <= total:
        return 0

    ratio = w_div(target_total - total + range_sum, range_sum)
    if ratio <= WAD:
        return 0
    return w_mul(alpha, w_ln(ratio))
