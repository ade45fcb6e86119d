"""
Vault — водопад комиссий и капитальный учёт пула LP.
"""

from src.vault.accounting import (
    DepositResult,
    PostBatchState,
    PreBatch,
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
from src.vault.errors import (
    CatastrophicLoss,
    ConservationBreach,
    ConservationViolation,
    InsufficientBackstopForGrant,
    InsufficientNAV,
    InsufficientShares,
    InvalidDrawdownFloor,
    InvalidFeeSplit,
    SeedAmountTooLow,
    VaultAlreadySeeded,
    VaultError,
    VaultNotSeeded,
    ZeroPriceNotAllowed,
    ZeroSharesNotAllowed,
)
from src.vault.fee_waterfall import calculate_fee_waterfall
from src.vault.ledger import CapitalLedger, CycleSettlement

__all__ = [
    # Config
    "VaultConfig",
    # Waterfall
    "calculate_fee_waterfall",
    # Accounting
    "PreBatch",
    "DepositResult",
    "WithdrawResult",
    "PostBatchState",
    "compute_price",
    "compute_pre_batch",
    "compute_pre_batch_for_seed",
    "apply_deposit",
    "apply_withdraw",
    "update_peak",
    "compute_drawdown",
    "compute_post_batch_state",
    # Ledger
    "CapitalLedger",
    "CycleSettlement",
    # Errors
    "VaultError",
    "ZeroSharesNotAllowed",
    "ZeroPriceNotAllowed",
    "InsufficientShares",
    "InsufficientNAV",
    "SeedAmountTooLow",
    "VaultAlreadySeeded",
    "VaultNotSeeded",
    "ConservationBreach",
    "CatastrophicLoss",
    "InsufficientBackstopForGrant",
    "InvalidFeeSplit",
    "InvalidDrawdownFloor",
    "ConservationViolation",
]
