"""
models.py - Data model definitions

Dataclasses shared by the split normalizer, the balance engine and the group
ledger. Money is always a Decimal with two fractional digits; records are
serialized to/from plain dicts so the embedding service can store or return
them as JSON.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _to_money(value: Any) -> Decimal:
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return ZERO


class SplitMode(str, Enum):
    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"


@dataclass
class SplitLine:
    """One participant's share of one expense."""
    participant_id: str
    amount: Decimal

    def to_dict(self) -> Dict:
        return {"participantId": self.participant_id, "amount": self.amount}

    @staticmethod
    def from_dict(d: Dict) -> "SplitLine":
        return SplitLine(
            participant_id=str(d.get("participantId", d.get("participant_id", ""))),
            amount=_to_money(d.get("amount", 0)),
        )


@dataclass
class Expense:
    """
    A logged group expense.

    Fields:
      - id: identifier assigned by the ledger
      - group_id: owning group
      - payer_id: participant who paid the full amount
      - amount: total, equal to the sum of `splits` (within 0.01)
      - split_mode: strategy the splits were produced with
      - splits: per-participant shares, never empty for a live expense
      - date: ISO date string "YYYY-MM-DD"
      - is_deleted: soft-delete flag; deleted expenses are ignored by balances
    """
    id: str = ""
    group_id: str = ""
    payer_id: str = ""
    amount: Decimal = ZERO
    split_mode: SplitMode = SplitMode.EQUAL
    splits: List[SplitLine] = field(default_factory=list)
    date: str = ""
    description: str = ""
    category: str = "uncategorized"
    is_deleted: bool = False

    def participant_ids(self) -> List[str]:
        """Payer first, then everyone with a split line, without duplicates."""
        return list(dict.fromkeys([self.payer_id] + [s.participant_id for s in self.splits]))

    def split_for(self, participant_id: str) -> Optional[SplitLine]:
        for line in self.splits:
            if line.participant_id == participant_id:
                return line
        return None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "groupId": self.group_id,
            "payerId": self.payer_id,
            "amount": self.amount,
            "splitMode": self.split_mode.value,
            "splits": [s.to_dict() for s in self.splits],
            "date": self.date,
            "description": self.description,
            "category": self.category,
            "isDeleted": self.is_deleted,
        }

    @staticmethod
    def from_dict(d: Dict) -> "Expense":
        """
        Inverse of to_dict. Missing keys fall back to defaults; an unknown
        split mode is kept as EQUAL since the stored splits are authoritative.
        """
        try:
            mode = SplitMode(str(d.get("splitMode", "equal")).lower())
        except ValueError:
            mode = SplitMode.EQUAL
        return Expense(
            id=str(d.get("id", "")),
            group_id=str(d.get("groupId", "")),
            payer_id=str(d.get("payerId", "")),
            amount=_to_money(d.get("amount", 0)),
            split_mode=mode,
            splits=[SplitLine.from_dict(s) for s in d.get("splits", []) or []],
            date=d.get("date", "") or "",
            description=d.get("description", "") or "",
            category=d.get("category", "uncategorized") or "uncategorized",
            is_deleted=bool(d.get("isDeleted", False)),
        )


@dataclass
class Participant:
    id: str
    name: str
    color: str = "#6b7280"
    is_owner: bool = False

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name, "color": self.color, "isOwner": self.is_owner}


@dataclass
class NetBalance:
    """Computed per query, never stored. net = paid - owed."""
    participant_id: str
    paid: Decimal
    owed: Decimal
    net: Decimal

    def to_dict(self) -> Dict:
        return {"participantId": self.participant_id, "paid": self.paid, "owed": self.owed, "net": self.net}


@dataclass
class Settlement:
    """`from_id` should pay `to_id` this amount."""
    from_id: str
    to_id: str
    amount: Decimal

    def to_dict(self) -> Dict:
        return {"from": self.from_id, "to": self.to_id, "amount": self.amount}


@dataclass
class BalanceSummary:
    total_spent: Decimal = ZERO
    total_owed: Decimal = ZERO
    participant_count: int = 0

    def to_dict(self) -> Dict:
        return {
            "totalSpent": self.total_spent,
            "totalOwed": self.total_owed,
            "participantCount": self.participant_count,
        }


@dataclass
class BalanceReport:
    net_balances: List[NetBalance] = field(default_factory=list)
    settlements: List[Settlement] = field(default_factory=list)
    summary: BalanceSummary = field(default_factory=BalanceSummary)

    def net_for(self, participant_id: str) -> Decimal:
        for b in self.net_balances:
            if b.participant_id == participant_id:
                return b.net
        return ZERO

    def to_dict(self) -> Dict:
        return {
            "netBalances": [b.to_dict() for b in self.net_balances],
            "settlements": [s.to_dict() for s in self.settlements],
            "summary": self.summary.to_dict(),
        }


@dataclass
class PairBalance:
    """
    Position between two participants: what each fronted for the other's
    shares. `owes_to` is who should receive `amount`.
    """
    first_id: str
    second_id: str
    first_paid: Decimal
    first_owed: Decimal
    second_paid: Decimal
    second_owed: Decimal
    net: Decimal
    owes_to: str
    amount: Decimal

    def to_dict(self) -> Dict:
        return {
            "participant1": {"id": self.first_id, "paid": self.first_paid, "owed": self.first_owed},
            "participant2": {"id": self.second_id, "paid": self.second_paid, "owed": self.second_owed},
            "netBalance": self.net,
            "owesTo": self.owes_to,
            "amount": self.amount,
        }


@dataclass
class ParticipantStats:
    participant_id: str
    total_paid: Decimal
    total_owed: Decimal
    net_balance: Decimal
    expense_count: int

    def to_dict(self) -> Dict:
        return {
            "participantId": self.participant_id,
            "totalPaid": self.total_paid,
            "totalOwed": self.total_owed,
            "netBalance": self.net_balance,
            "expenseCount": self.expense_count,
        }
