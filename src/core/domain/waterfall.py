"""
WaterfallParams / WaterfallResult — вход и выход водопада комиссий

Immutable Pydantic модели одного расчётного цикла. Все суммы — int в WAD,
P&L знаковый. Совместимость с JSON Schema
(contracts/schema/waterfall_result.json).

Проверки pdd и суммы долей phi_* выполняет сам калькулятор: их нарушение —
ConservationBreach, а не ошибка валидации ввода.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from src.core.contracts.validators import validate_waterfall_result


# =============================================================================
# PARAMS
# =============================================================================


class WaterfallParams(BaseModel):
    """
    Параметры водопада одного расчётного цикла.

    Immutable модель (frozen=True).
    """

    # Результат цикла
    pnl: int = Field(..., description="P&L цикла L (знаковый, WAD)")
    gross_fees: int = Field(..., ge=0, description="Валовые комиссии F (WAD)")

    # Капитал до цикла
    nav_prev: int = Field(..., ge=0, description="NAV до цикла (WAD)")
    backstop_prev: int = Field(..., ge=0, description="Баланс backstop до цикла (WAD)")
    treasury_prev: int = Field(..., ge=0, description="Баланс treasury до цикла (WAD)")

    # Лимиты и доли
    delta_et: int = Field(..., ge=0, description="Доступная поддержка backstop ΔE (WAD)")
    pdd: int = Field(..., description="Пол просадки, ожидается (−WAD, 0)")
    rho_bs: int = Field(..., ge=0, description="Коэффициент покрытия backstop (WAD)")
    phi_lp: int = Field(..., ge=0, description="Доля LP в остатке комиссий (WAD)")
    phi_bs: int = Field(..., ge=0, description="Доля backstop в остатке комиссий (WAD)")
    phi_tr: int = Field(..., ge=0, description="Доля treasury в остатке комиссий (WAD)")

    model_config = {"frozen": True}

    def capital_before(self) -> int:
        """Капитал до цикла с учётом P&L и комиссий: N + B + T + L + F."""
        return self.nav_prev + self.backstop_prev + self.treasury_prev + self.pnl + self.gross_fees


# =============================================================================
# RESULT
# =============================================================================


class WaterfallResult(BaseModel):
    """
    Результат водопада комиссий.

    Промежуточные значения сохраняются для диагностики и аудита.
    """

    # Шаг 1: компенсация убытка
    loss_comp: int = Field(..., ge=0, description="Компенсация убытка из комиссий")
    pool: int = Field(..., ge=0, description="Остаток комиссий после компенсации")

    # Шаг 2: пол просадки и грант
    nav_raw: int = Field(..., ge=0, description="NAV после P&L и компенсации")
    nav_floor: int = Field(..., ge=0, description="Пол NAV: ceil(N_prev · (1 + pdd))")
    grant_need: int = Field(..., ge=0, description="Требуемый грант до пола")
    grant: int = Field(..., ge=0, description="Выданный грант min(grant_need, ΔE)")
    grant_shortfall: int = Field(..., ge=0, description="Непокрытая часть grant_need")

    # Шаг 3: пополнение backstop
    fill: int = Field(..., ge=0, description="Пополнение backstop из остатка комиссий")

    # Шаг 4: распределение остатка
    lp_share: int = Field(..., ge=0, description="Доля LP (floor)")
    bs_share: int = Field(..., ge=0, description="Доля backstop (floor)")
    tr_share: int = Field(..., ge=0, description="Доля treasury (floor)")
    dust: int = Field(..., ge=0, description="Пыль округления (уходит LP)")

    # Шаг 5: выход
    fee_to_lp: int = Field(..., ge=0, description="Комиссии LP: loss_comp + lp_share + dust")
    nav_pre_batch: int = Field(..., ge=0, description="NAV перед батчем депозитов/выводов")
    backstop_next: int = Field(..., ge=0, description="Баланс backstop после цикла")
    treasury_next: int = Field(..., ge=0, description="Баланс treasury после цикла")

    model_config = {"frozen": True}

    @field_validator("grant")
    @classmethod
    def validate_grant_within_need(cls, v: int, info) -> int:
        """Грант никогда не превышает потребность."""
        if "grant_need" in info.data and v > info.data["grant_need"]:
            raise ValueError(f"grant {v} exceeds grant_need {info.data['grant_need']}")
        return v

    @field_validator("grant_shortfall")
    @classmethod
    def validate_shortfall(cls, v: int, info) -> int:
        """grant_shortfall == grant_need − grant."""
        if "grant_need" in info.data and "grant" in info.data:
            expected = info.data["grant_need"] - info.data["grant"]
            if v != expected:
                raise ValueError(f"grant_shortfall {v} must equal grant_need - grant = {expected}")
        return v

    def capital_after(self) -> int:
        """Капитал после цикла: N_pre + B_next + T_next."""
        return self.nav_pre_batch + self.backstop_next + self.treasury_next

    def is_grant_capped(self) -> bool:
        """Грант ограничен ΔE (пол просадки не восстановлен полностью)."""
        return self.grant_shortfall > 0

    def to_contract(self) -> Dict[str, Any]:
        """
        Документ waterfall_result, проверенный по JSON Schema.

        Raises:
            ValidationError: Документ не соответствует контракту
        """
        document = self.model_dump(mode="json")
        validate_waterfall_result(document)
        return document
