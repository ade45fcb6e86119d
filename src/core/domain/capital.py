"""
CapitalLedgerState — снапшот капитального учёта vault

Immutable Pydantic модели:
- CapitalLedgerState: NAV, доли, цена, пик цены, просадка, backstop, treasury
- CapitalStack: три баланса, сумма которых сохраняется водопадом
- BatchOutcome: итог применения батча выводов/депозитов

Совместимость с JSON Schema (contracts/schema/capital_ledger_state.json).
"""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from src.core.contracts.validators import validate_ledger_state
from src.core.math.fixed_point import WAD


# =============================================================================
# CAPITAL STACK
# =============================================================================


class CapitalStack(BaseModel):
    """Балансы NAV / backstop / treasury (WAD)."""

    nav: int = Field(..., ge=0, description="NAV пула LP")
    backstop: int = Field(..., ge=0, description="Баланс backstop")
    treasury: int = Field(..., ge=0, description="Баланс treasury")

    model_config = {"frozen": True}

    def total(self) -> int:
        return self.nav + self.backstop + self.treasury


# =============================================================================
# LEDGER STATE
# =============================================================================


class CapitalLedgerState(BaseModel):
    """
    Снапшот состояния капитального учёта.

    Immutable модель (frozen=True). Живой учёт (CapitalLedger) отдаёт её
    через snapshot(); изменения состояния всегда создают новый снапшот.
    """

    nav: int = Field(..., ge=0, description="NAV (WAD)")
    total_shares: int = Field(..., ge=0, description="Выпущенные доли (WAD)")
    price: int = Field(..., ge=0, description="Цена доли NAV/shares (WAD; WAD для пустого vault)")
    price_peak: int = Field(..., ge=0, description="Исторический пик цены (WAD)")
    drawdown: int = Field(..., ge=0, le=WAD, description="Просадка 1 − price/peak (WAD, 0..WAD)")
    backstop: int = Field(0, ge=0, description="Баланс backstop (WAD)")
    treasury: int = Field(0, ge=0, description="Баланс treasury (WAD)")
    is_seeded: bool = Field(..., description="Начальный капитал внесён")

    model_config = {"frozen": True}

    @field_validator("price_peak")
    @classmethod
    def validate_peak_not_below_price(cls, v: int, info) -> int:
        """Пик не ниже текущей цены для засеянного vault с долями."""
        if "price" in info.data and "total_shares" in info.data:
            if info.data["total_shares"] > 0 and v < info.data["price"]:
                raise ValueError(f"price_peak {v} below current price {info.data['price']}")
        return v

    def capital_stack(self) -> CapitalStack:
        return CapitalStack(nav=self.nav, backstop=self.backstop, treasury=self.treasury)

    def to_contract(self) -> Dict[str, Any]:
        """
        Документ capital_ledger_state, проверенный по JSON Schema.

        Raises:
            ValidationError: Документ не соответствует контракту
        """
        document = self.model_dump(mode="json")
        validate_ledger_state(document)
        return document


# =============================================================================
# BATCH OUTCOME
# =============================================================================


class BatchOutcome(BaseModel):
    """
    Итог применения батча одного расчётного цикла.

    Выводы исполняются до депозитов по единой цене батча.
    """

    batch_price: int = Field(..., ge=0, description="Цена батча: nav_pre / shares_prev (WAD)")
    withdrawn_shares: int = Field(..., ge=0, description="Погашенные доли")
    withdrawn_amount: int = Field(..., ge=0, description="Выплаченная сумма выводов")
    deposited_amount: int = Field(..., ge=0, description="Использованная сумма депозитов")
    minted_shares: int = Field(..., ge=0, description="Выпущенные доли")
    deposit_refund: int = Field(..., ge=0, description="Возврат пыли депозита")
    state: CapitalLedgerState = Field(..., description="Состояние после батча")

    model_config = {"frozen": True}
