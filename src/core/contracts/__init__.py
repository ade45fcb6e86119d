"""
Contract Validation Module

Валидация JSON контрактов водопада комиссий и капитального учёта.
"""

from .validators import (
    CAPITAL_LEDGER_STATE,
    CONTRACTS,
    SCHEMA_DIR,
    WATERFALL_RESULT,
    CapitalLedgerStateValidator,
    ContractValidator,
    SchemaLoader,
    WaterfallResultValidator,
    validate_ledger_state,
    validate_waterfall_result,
)

__all__ = [
    # Constants
    "SCHEMA_DIR",
    "WATERFALL_RESULT",
    "CAPITAL_LEDGER_STATE",
    "CONTRACTS",
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "WaterfallResultValidator",
    "CapitalLedgerStateValidator",
    # Functions
    "validate_waterfall_result",
    "validate_ledger_state",
]
