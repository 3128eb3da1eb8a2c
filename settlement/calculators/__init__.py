"""
Calculators Package

Provides all calculation components for tour settlement.
"""

from .cuts import CutResolver, equal_splits
from .fees import FeeCalculator
from .ledger import LedgerAggregator
from .payout import PayoutCalculator
from .savings import SavingsCalculator

__all__ = [
    "LedgerAggregator",
    "FeeCalculator",
    "SavingsCalculator",
    "CutResolver",
    "PayoutCalculator",
    "equal_splits",
]
