"""
Domain models and value objects.

Contains the value types exchanged between the fee waterfall and the capital
ledger: WaterfallParams, WaterfallResult, CapitalLedgerState, BatchOutcome.
"""

from src.core.domain.capital import BatchOutcome, CapitalLedgerState, CapitalStack
from src.core.domain.waterfall import WaterfallParams, WaterfallResult

__all__ = [
    # Waterfall
    "WaterfallParams",
    "WaterfallResult",
    # Capital
    "CapitalStack",
    "CapitalLedgerState",
    "BatchOutcome",
]
