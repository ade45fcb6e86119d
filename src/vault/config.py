"""
VaultConfig — параметры водопада и капитального учёта vault

Immutable Pydantic модель. Значения по умолчанию:
- pdd = −0.3 (пол просадки 30%)
- rho_bs = 0.2 (покрытие backstop 20%)
- phi_lp / phi_bs / phi_tr = 0.7 / 0.2 / 0.1
- min_seed_amount = 100 единиц внешней валюты
"""

from typing import Final

from pydantic import BaseModel, Field, model_validator

from src.core.math.fixed_point import WAD, to_wad

DEFAULT_PDD: Final[int] = -3 * 10**17
DEFAULT_RHO_BS: Final[int] = 2 * 10**17
DEFAULT_PHI_LP: Final[int] = 7 * 10**17
DEFAULT_PHI_BS: Final[int] = 2 * 10**17
DEFAULT_PHI_TR: Final[int] = 1 * 10**17
DEFAULT_MIN_SEED_AMOUNT: Final[int] = to_wad(100_000_000)


class VaultConfig(BaseModel):
    """
    Конфигурация vault.

    Инварианты:
    - pdd ∈ (−WAD, 0)
    - 0 ≤ rho_bs ≤ WAD
    - phi_lp + phi_bs + phi_tr == WAD (ровно)
    """

    pdd: int = Field(DEFAULT_PDD, gt=-WAD, lt=0, description="Пол просадки (WAD, отрицательный)")
    rho_bs: int = Field(DEFAULT_RHO_BS, ge=0, le=WAD, description="Покрытие backstop (WAD)")
    phi_lp: int = Field(DEFAULT_PHI_LP, ge=0, le=WAD, description="Доля LP (WAD)")
    phi_bs: int = Field(DEFAULT_PHI_BS, ge=0, le=WAD, description="Доля backstop (WAD)")
    phi_tr: int = Field(DEFAULT_PHI_TR, ge=0, le=WAD, description="Доля treasury (WAD)")
    min_seed_amount: int = Field(
        DEFAULT_MIN_SEED_AMOUNT, gt=0, description="Минимальный начальный капитал (WAD)"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_split_sum(self) -> "VaultConfig":
        """Доли распределения комиссий в сумме дают ровно WAD."""
        total = self.phi_lp + self.phi_bs + self.phi_tr
        if total != WAD:
            raise ValueError(f"phi_lp + phi_bs + phi_tr = {total}, expected {WAD}")
        return self
