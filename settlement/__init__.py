"""
BACKLINE SETTLEMENT ENGINE
Tour finance settlement for bands
"""

from .models import SettlementInput, SettlementResult
from .processor import SettlementProcessor, calculate_settlement

__all__ = ['SettlementProcessor', 'SettlementInput', 'SettlementResult', 'calculate_settlement']
