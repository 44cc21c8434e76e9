"""
groupsplit - split shared group expenses and work out who owes whom

Entry points:
  - normalize_split: amount + split mode -> split lines summing exactly to it
  - compute_balances: expenses -> net balances, settle-up plan, summary
  - Group: in-memory ledger wiring the two together
"""

from groupsplit.balances import balance_between, compute_balances, generate_settlements, participant_stats
from groupsplit.group import Group
from groupsplit.models import (
    BalanceReport,
    Expense,
    NetBalance,
    Participant,
    Settlement,
    SplitLine,
    SplitMode,
)
from groupsplit.money import normalize_split, round2

__all__ = [
    "BalanceReport",
    "Expense",
    "Group",
    "NetBalance",
    "Participant",
    "Settlement",
    "SplitLine",
    "SplitMode",
    "balance_between",
    "compute_balances",
    "generate_settlements",
    "normalize_split",
    "participant_stats",
    "round2",
]
