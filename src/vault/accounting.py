"""
Vault Accounting — чистые функции учёта NAV / долей / цены

Все значения — int в WAD. Функции не хранят состояния; живой учёт собран в
CapitalLedger (src/vault/ledger.py).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Цена пустого vault (shares == 0) = WAD
2. Депозит: minted = floor(A / P), используется minted · P (floor), пыль
   возвращается депозитору; NAV растёт только на использованную сумму
3. Вывод: amount = floor(x · P); цена после вывода не ниже P и выше неё
   не более чем на ceil((S + WAD) / S') wei (остаток floor-цены уходит держателям)
4. Пик цены не убывает
5. Просадка 1 − P/peak ∈ [0, WAD]; 0 при peak == 0 или P ≥ peak
"""

from typing import NamedTuple

from src.core.domain.waterfall import WaterfallResult
from src.core.math.fixed_point import WAD, w_div, w_mul
from src.vault.errors import (
    InsufficientNAV,
    InsufficientShares,
    ZeroPriceNotAllowed,
    ZeroSharesNotAllowed,
)


# =============================================================================
# RESULT TYPES
# =============================================================================


class PreBatch(NamedTuple):
    """NAV и цена перед батчем."""

    nav_pre: int
    batch_price: int


class DepositResult(NamedTuple):
    """Результат депозита по цене батча."""

    nav: int
    shares: int
    minted: int
    refund: int


class WithdrawResult(NamedTuple):
    """Результат вывода по цене батча."""

    nav: int
    shares: int
    amount: int


class PostBatchState(NamedTuple):
    """Состояние после батча: NAV, доли, цена, пик, просадка."""

    nav: int
    shares: int
    price: int
    price_peak: int
    drawdown: int


# =============================================================================
# PRICE
# =============================================================================


def compute_price(nav: int, shares: int) -> int:
    """
    Цена доли NAV / shares (floor).

    Examples:
        >>> compute_price(0, 0) == WAD
        True
    """
    if shares == 0:
        return WAD
    return w_div(nav, shares)


def compute_pre_batch(result: WaterfallResult, shares_prev: int) -> PreBatch:
    """
    Pre-batch NAV из водопада комиссий и цена батча nav_pre_batch / S_prev.

    Raises:
        ZeroSharesNotAllowed: S_prev == 0
    """
    if shares_prev == 0:
        raise ZeroSharesNotAllowed("Batch price requires non-zero shares")
    return PreBatch(
        nav_pre=result.nav_pre_batch,
        batch_price=w_div(result.nav_pre_batch, shares_prev),
    )


def compute_pre_batch_for_seed(result: WaterfallResult) -> PreBatch:
    """Pre-batch для пустого vault: цена батча всегда WAD."""
    return PreBatch(nav_pre=result.nav_pre_batch, batch_price=WAD)


# =============================================================================
# DEPOSIT / WITHDRAW
# =============================================================================


def apply_deposit(nav: int, shares: int, price: int, amount: int) -> DepositResult:
    """
    Депозит amount по цене price.

    minted = floor(amount / price); used = floor(minted · price);
    refund = amount − used.

    Raises:
        ZeroPriceNotAllowed: price == 0
    """
    if price == 0:
        raise ZeroPriceNotAllowed("Deposit requires non-zero price")

    minted = w_div(amount, price)
    used = w_mul(minted, price)
    return DepositResult(nav=nav + used, shares=shares + minted, minted=minted, refund=amount - used)


def apply_withdraw(nav: int, shares: int, price: int, shares_out: int) -> WithdrawResult:
    """
    Вывод shares_out долей по цене price.

    Raises:
        InsufficientShares: shares_out > shares
        InsufficientNAV: floor(shares_out · price) > nav
    """
    if shares_out > shares:
        raise InsufficientShares(shares_out, shares)

    amount = w_mul(shares_out, price)
    if amount > nav:
        raise InsufficientNAV(amount, nav)
    return WithdrawResult(nav=nav - amount, shares=shares - shares_out, amount=amount)


# =============================================================================
# PEAK / DRAWDOWN
# =============================================================================


def update_peak(current_peak: int, price: int) -> int:
    """Монотонный пик цены."""
    return max(current_peak, price)


def compute_drawdown(price: int, peak: int) -> int:
    """
    Просадка 1 − price / peak в WAD, ограниченная [0, WAD].

    Examples:
        >>> compute_drawdown(8 * 10**17, WAD) == 2 * 10**17
        True
    """
    if peak == 0 or price >= peak:
        return 0
    return WAD - w_div(price, peak)


def compute_post_batch_state(nav: int, shares: int, previous_peak: int) -> PostBatchState:
    """
    Состояние после батча.

    Пустой vault: цена WAD, пик сохраняется, просадка 0.
    """
    if shares == 0:
        return PostBatchState(
            nav=nav, shares=0, price=WAD, price_peak=previous_peak, drawdown=0
        )

    price = compute_price(nav, shares)
    peak = update_peak(previous_peak, price)
    return PostBatchState(
        nav=nav,
        shares=shares,
        price=price,
        price_peak=peak,
        drawdown=compute_drawdown(price, peak),
    )
