"""
Token custody and time for the reward engine
"""

from .balances import BalanceTable, InMemoryToken, TokenBank
from .clock import ManualClock

__all__ = [
    "BalanceTable",
    "InMemoryToken",
    "TokenBank",
    "ManualClock",
]
