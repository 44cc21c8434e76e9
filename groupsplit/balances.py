"""
balances.py - net balances and settle-up plan for a group's expenses

Every function here is pure: it builds its own per-call mappings and returns
fresh result objects, so it can be called from any number of requests at once.
Callers pass only the live (non-deleted) expenses of a single group.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from groupsplit.config import get_logger
from groupsplit.models import (
    ZERO,
    BalanceReport,
    BalanceSummary,
    Expense,
    NetBalance,
    PairBalance,
    ParticipantStats,
    Settlement,
)
from groupsplit.money import round2

# Balances and transfers at or below one cent are treated as settled.
SETTLEMENT_EPSILON = Decimal("0.01")

logger = get_logger(__name__)


def compute_balances(expenses: Iterable[Expense]) -> BalanceReport:
    """
    Aggregate paid/owed per participant and derive the settlement plan.

    Interpretation:
        - the payer is credited the full expense amount
        - every split line debits its participant by the line amount
        - net = paid - owed; positive => should receive, negative => owes
    """
    paid: Dict[str, Decimal] = {}
    owed: Dict[str, Decimal] = {}

    for e in expenses:
        paid[e.payer_id] = round2(paid.get(e.payer_id, ZERO) + e.amount)
        for line in e.splits:
            owed[line.participant_id] = round2(owed.get(line.participant_id, ZERO) + line.amount)

    participants = list(dict.fromkeys(list(paid) + list(owed)))
    net_balances = [
        NetBalance(
            participant_id=p,
            paid=round2(paid.get(p, ZERO)),
            owed=round2(owed.get(p, ZERO)),
            net=round2(paid.get(p, ZERO) - owed.get(p, ZERO)),
        )
        for p in participants
    ]

    settlements = generate_settlements(net_balances)
    summary = BalanceSummary(
        total_spent=round2(sum(paid.values(), ZERO)),
        total_owed=round2(sum(owed.values(), ZERO)),
        participant_count=len(participants),
    )
    logger.debug(
        "Computed balances for %d participants (spent=%s, settlements=%d)",
        summary.participant_count, summary.total_spent, len(settlements),
    )
    return BalanceReport(net_balances=net_balances, settlements=settlements, summary=summary)


def generate_settlements(net_balances: Iterable[NetBalance]) -> List[Settlement]:
    """
    Greedy settle-up plan.

      - creditors: net > epsilon, debtors: net < -epsilon
      - both sorted descending by magnitude (ties keep input order)
      - repeatedly match the largest remaining debtor with the largest
        remaining creditor for min(debt, credit)

    Applying the whole plan zeroes every balance (to within a cent). The
    number of transfers is a heuristic, not a proven minimum: finding the
    true minimum is NP-hard in general.
    """
    creditors: List[Tuple[str, Decimal]] = [(b.participant_id, b.net) for b in net_balances if b.net > SETTLEMENT_EPSILON]
    debtors: List[Tuple[str, Decimal]] = [(b.participant_id, -b.net) for b in net_balances if b.net < -SETTLEMENT_EPSILON]
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    settlements: List[Settlement] = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        d_id, d_amt = debtors[i]
        c_id, c_amt = creditors[j]
        pay = round2(min(d_amt, c_amt))
        if pay > SETTLEMENT_EPSILON:
            settlements.append(Settlement(from_id=d_id, to_id=c_id, amount=pay))
            d_amt = round2(d_amt - pay)
            c_amt = round2(c_amt - pay)
            debtors[i] = (d_id, d_amt)
            creditors[j] = (c_id, c_amt)
        if d_amt <= SETTLEMENT_EPSILON:
            i += 1
        if c_amt <= SETTLEMENT_EPSILON:
            j += 1
    return settlements


def balance_between(expenses: Iterable[Expense], first_id: str, second_id: str) -> PairBalance:
    """
    Position between two participants only.

    first_paid is what `first` fronted for `second`'s shares (expenses paid by
    first where second has a split line), and vice versa. The owed totals are
    each participant's full share across the expenses.
    """
    first_paid = second_paid = ZERO
    first_owed = second_owed = ZERO

    for e in expenses:
        first_line = e.split_for(first_id)
        second_line = e.split_for(second_id)
        if e.payer_id == first_id and second_line is not None:
            first_paid += second_line.amount
        if e.payer_id == second_id and first_line is not None:
            second_paid += first_line.amount
        if first_line is not None:
            first_owed += first_line.amount
        if second_line is not None:
            second_owed += second_line.amount

    net = round2(first_paid - second_paid)
    return PairBalance(
        first_id=first_id,
        second_id=second_id,
        first_paid=round2(first_paid),
        first_owed=round2(first_owed),
        second_paid=round2(second_paid),
        second_owed=round2(second_owed),
        net=net,
        owes_to=second_id if net < 0 else first_id,
        amount=abs(net),
    )


def participant_stats(expenses: Iterable[Expense], participant_id: str) -> ParticipantStats:
    """Totals for one participant; expense_count covers paid-for or split-in."""
    total_paid = total_owed = ZERO
    count = 0
    for e in expenses:
        line = e.split_for(participant_id)
        if e.payer_id == participant_id or line is not None:
            count += 1
        if e.payer_id == participant_id:
            total_paid += e.amount
        if line is not None:
            total_owed += line.amount
    return ParticipantStats(
        participant_id=participant_id,
        total_paid=round2(total_paid),
        total_owed=round2(total_owed),
        net_balance=round2(total_paid - total_owed),
        expense_count=count,
    )
