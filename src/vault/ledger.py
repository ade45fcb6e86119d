"""
CapitalLedger — живой капитальный учёт vault

Держит NAV, доли, пик цены, а также балансы backstop и treasury.
Расчётный цикл (settle_cycle) — водопад комиссий и батч выводов/депозитов —
исполняется как одна критическая секция: состояние меняется только после того,
как все шаги успешно посчитаны (all-or-nothing).

Порядок батча: ВСЕ выводы до ВСЕХ депозитов, обе стороны по единой цене
nav_pre_batch / shares_prev.
"""

import logging
from typing import Any, Dict, NamedTuple

from src.core.domain.capital import BatchOutcome, CapitalLedgerState, CapitalStack
from src.core.domain.waterfall import WaterfallParams, WaterfallResult
from src.core.math.fixed_point import WAD
from src.vault.accounting import (
    DepositResult,
    WithdrawResult,
    apply_deposit,
    apply_withdraw,
    compute_drawdown,
    compute_post_batch_state,
    compute_pre_batch,
    compute_pre_batch_for_seed,
    compute_price,
    update_peak,
)
from src.vault.config import VaultConfig
from src.vault.errors import SeedAmountTooLow, VaultAlreadySeeded, VaultNotSeeded
from src.vault.fee_waterfall import calculate_fee_waterfall

logger = logging.getLogger(__name__)


class CycleSettlement(NamedTuple):
    """Итог расчётного цикла: водопад + батч."""

    waterfall: WaterfallResult
    batch: BatchOutcome


class CapitalLedger:
    """
    Капитальный учёт vault.

    Пример:
        >>> ledger = CapitalLedger()
        >>> ledger.seed(1000 * WAD)
        >>> ledger.price == WAD
        True
    """

    def __init__(self, config: VaultConfig | None = None, backstop: int = 0, treasury: int = 0):
        self.config = config or VaultConfig()

        self._nav: int = 0
        self._shares: int = 0
        self._price_peak: int = 0
        self._backstop: int = backstop
        self._treasury: int = treasury
        self._seeded: bool = False

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def nav(self) -> int:
        return self._nav

    @property
    def total_shares(self) -> int:
        return self._shares

    @property
    def price(self) -> int:
        return compute_price(self._nav, self._shares)

    @property
    def price_peak(self) -> int:
        return self._price_peak

    @property
    def drawdown(self) -> int:
        if self._shares == 0:
            return 0
        return compute_drawdown(self.price, self._price_peak)

    @property
    def is_seeded(self) -> bool:
        return self._seeded

    @property
    def capital_stack(self) -> CapitalStack:
        return CapitalStack(nav=self._nav, backstop=self._backstop, treasury=self._treasury)

    def snapshot(self) -> CapitalLedgerState:
        """Неизменяемый снапшот текущего состояния."""
        return CapitalLedgerState(
            nav=self._nav,
            total_shares=self._shares,
            price=self.price,
            price_peak=self._price_peak,
            drawdown=self.drawdown,
            backstop=self._backstop,
            treasury=self._treasury,
            is_seeded=self._seeded,
        )

    def export_state(self) -> Dict[str, Any]:
        """Снапшот как документ контракта capital_ledger_state."""
        return self.snapshot().to_contract()

    # -------------------------------------------------------------------------
    # Seed / deposit / withdraw
    # -------------------------------------------------------------------------

    def seed(self, amount: int) -> None:
        """
        Внесение начального капитала по цене WAD.

        Raises:
            VaultAlreadySeeded: Повторный seed
            SeedAmountTooLow: amount < config.min_seed_amount
        """
        if self._seeded:
            raise VaultAlreadySeeded("Vault is already seeded")
        if amount < self.config.min_seed_amount:
            raise SeedAmountTooLow(amount, self.config.min_seed_amount)

        self._nav = amount
        self._shares = amount
        self._price_peak = WAD
        self._seeded = True
        logger.info("vault seeded: nav=%d shares=%d", amount, amount)

    def deposit(self, amount: int) -> DepositResult:
        """
        Депозит по текущей цене; пыль округления возвращается в refund.

        Raises:
            VaultNotSeeded, ZeroPriceNotAllowed
        """
        self._require_seeded()
        result = apply_deposit(self._nav, self._shares, self.price, amount)
        self._commit(result.nav, result.shares)
        return result

    def withdraw(self, shares: int) -> WithdrawResult:
        """
        Вывод shares долей по текущей цене.

        Raises:
            VaultNotSeeded, InsufficientShares, InsufficientNAV
        """
        self._require_seeded()
        result = apply_withdraw(self._nav, self._shares, self.price, shares)
        self._commit(result.nav, result.shares)
        return result

    # -------------------------------------------------------------------------
    # Batch
    # -------------------------------------------------------------------------

    def apply_batch(
        self,
        result: WaterfallResult,
        pending_withdraw_shares: int,
        pending_deposit_amount: int,
    ) -> BatchOutcome:
        """
        Применение результата водопада и батча выводов/депозитов.

        1. NAV := result.nav_pre_batch
        2. Цена батча = nav_pre_batch / shares_prev (WAD для пустого vault)
        3. Выводы, затем депозиты — по цене батча
        4. Обновление пика и просадки; backstop/treasury из результата

        Raises:
            VaultNotSeeded, InsufficientShares, InsufficientNAV, ZeroPriceNotAllowed
        """
        self._require_seeded()

        if self._shares == 0:
            pre = compute_pre_batch_for_seed(result)
        else:
            pre = compute_pre_batch(result, self._shares)
        batch_price = pre.batch_price

        withdrawn = apply_withdraw(
            pre.nav_pre, self._shares, batch_price, pending_withdraw_shares
        )

        if pending_deposit_amount > 0:
            deposited = apply_deposit(
                withdrawn.nav, withdrawn.shares, batch_price, pending_deposit_amount
            )
        else:
            deposited = DepositResult(nav=withdrawn.nav, shares=withdrawn.shares, minted=0, refund=0)

        post = compute_post_batch_state(deposited.nav, deposited.shares, self._price_peak)

        # Все расчёты успешны — фиксируем состояние
        self._nav = post.nav
        self._shares = post.shares
        self._price_peak = post.price_peak
        self._backstop = result.backstop_next
        self._treasury = result.treasury_next

        logger.info(
            "batch applied: price=%d withdrawn=%d minted=%d nav=%d shares=%d drawdown=%d",
            batch_price,
            withdrawn.amount,
            deposited.minted,
            post.nav,
            post.shares,
            post.drawdown,
        )

        return BatchOutcome(
            batch_price=batch_price,
            withdrawn_shares=pending_withdraw_shares,
            withdrawn_amount=withdrawn.amount,
            deposited_amount=pending_deposit_amount - deposited.refund,
            minted_shares=deposited.minted,
            deposit_refund=deposited.refund,
            state=self.snapshot(),
        )

    def settle_cycle(
        self,
        pnl: int,
        gross_fees: int,
        delta_et: int,
        pending_withdraw_shares: int = 0,
        pending_deposit_amount: int = 0,
    ) -> CycleSettlement:
        """
        Расчётный цикл: водопад комиссий по текущему стеку капитала + батч.

        Ошибка на любом шаге оставляет учёт без изменений.
        """
        self._require_seeded()

        params = WaterfallParams(
            pnl=pnl,
            gross_fees=gross_fees,
            nav_prev=self._nav,
            backstop_prev=self._backstop,
            treasury_prev=self._treasury,
            delta_et=delta_et,
            pdd=self.config.pdd,
            rho_bs=self.config.rho_bs,
            phi_lp=self.config.phi_lp,
            phi_bs=self.config.phi_bs,
            phi_tr=self.config.phi_tr,
        )
        waterfall = calculate_fee_waterfall(params)
        batch = self.apply_batch(waterfall, pending_withdraw_shares, pending_deposit_amount)
        return CycleSettlement(waterfall=waterfall, batch=batch)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self, nav: int, shares: int) -> None:
        self._nav = nav
        self._shares = shares
        if shares > 0:
            self._price_peak = update_peak(self._price_peak, compute_price(nav, shares))

    def _require_seeded(self) -> None:
        if not self._seeded:
            raise VaultNotSeeded("Vault is not seeded")
