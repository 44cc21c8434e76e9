"""
group.py - in-memory group ledger

Responsibilities:
 - keep the participant list of one group (owner first, bounded size)
 - keep the group's expenses, normalizing splits on create/edit
 - soft-delete expenses and cascade participant removal into expenses
 - provide balance helpers that run the engine over live expenses only

Persistence is the embedding service's job: Group only holds state in memory
and exposes to_dict() on its records.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from groupsplit import balances as engine
from groupsplit.config import Settings, get_logger
from groupsplit.errors import GroupError, ParticipantLimitExceeded, UnknownParticipant
from groupsplit.models import (
    ZERO,
    BalanceReport,
    Expense,
    PairBalance,
    Participant,
    ParticipantStats,
    SplitMode,
)
from groupsplit.money import normalize_split, parse_split_mode, round2

OWNER_COLOR = "#2d6cdf"
DEFAULT_COLOR = "#6b7280"
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

logger = get_logger(__name__)


class Group:
    """
    One expense-sharing group. The owner is created with the group, is always
    participants[0], and cannot be removed.
    """

    def __init__(self, name: str, owner_name: str, owner_color: str = OWNER_COLOR,
                 group_id: str = "", settings: Optional[Settings] = None):
        name = (name or "").strip()
        if not name:
            raise GroupError("Group name is required")
        self.id = group_id or name
        self.name = name
        self.settings = settings or Settings.from_env()
        self.participants: List[Participant] = []
        self.expenses: List[Expense] = []
        # ids are never reused, even after deletes/removals
        self._next_participant_id = 1
        self._next_expense_id = 1
        self._append_participant(owner_name, owner_color, is_owner=True)

    @property
    def owner(self) -> Participant:
        return self.participants[0]

    # -----------------------
    # Participants
    # -----------------------
    def _append_participant(self, name: str, color: Optional[str], is_owner: bool = False) -> Participant:
        name = (name or "").strip()
        if not name:
            raise GroupError("Participant name is required")
        color = color or DEFAULT_COLOR
        if not COLOR_PATTERN.match(color):
            raise GroupError(f"Color must be a valid hex code, got {color!r}")
        p = Participant(
            id=str(self._next_participant_id),
            name=name,
            color=color,
            is_owner=is_owner,
        )
        self._next_participant_id += 1
        self.participants.append(p)
        return p

    def add_participant(self, name: str, color: Optional[str] = None) -> Participant:
        """Add a member; raises ParticipantLimitExceeded once the group is full."""
        if len(self.participants) >= self.settings.max_participants:
            raise ParticipantLimitExceeded(self.settings.max_participants)
        p = self._append_participant(name, color)
        logger.info("Group %s: added participant id=%s (%s)", self.id, p.id, p.name)
        return p

    def get_participant(self, participant_id: str) -> Participant:
        for p in self.participants:
            if p.id == participant_id:
                return p
        raise UnknownParticipant(participant_id)

    def participant_ids(self) -> List[str]:
        return [p.id for p in self.participants]

    def _check_members(self, ids: Sequence[str]):
        known = set(self.participant_ids())
        for pid in ids:
            if pid not in known:
                raise UnknownParticipant(pid)

    def remove_participant(self, participant_id: str) -> List[Expense]:
        """
        Remove a participant and cascade into the expenses:
          - their split lines are dropped
          - expenses they paid are reassigned to the owner
          - amount becomes the sum of the remaining lines
          - an expense left without lines is soft-deleted
        Returns the expenses that changed.
        """
        p = self.get_participant(participant_id)
        if p.is_owner:
            raise GroupError("The group owner cannot be removed")
        self.participants = [x for x in self.participants if x.id != participant_id]

        changed: List[Expense] = []
        for e in self.active_expenses():
            if e.payer_id != participant_id and e.split_for(participant_id) is None:
                continue
            e.splits = [s for s in e.splits if s.participant_id != participant_id]
            if e.payer_id == participant_id:
                e.payer_id = self.owner.id
            if not e.splits:
                e.is_deleted = True
            else:
                e.amount = round2(sum((s.amount for s in e.splits), ZERO))
            changed.append(e)

        logger.info("Group %s: removed participant id=%s; %d expense(s) updated.",
                    self.id, participant_id, len(changed))
        return changed

    # -----------------------
    # Expenses
    # -----------------------
    def add_expense(
        self,
        amount: Any,
        payer_id: str,
        split_mode: Union[SplitMode, str] = SplitMode.EQUAL,
        participant_ids: Optional[Sequence[str]] = None,
        custom_values: Optional[Mapping[str, Any]] = None,
        description: str = "",
        category: str = "uncategorized",
        date: str = "",
    ) -> Expense:
        """
        Create an expense with normalized splits.
        participant_ids defaults to every member of the group.
        """
        ids = list(participant_ids) if participant_ids else self.participant_ids()
        self._check_members([payer_id] + ids)
        splits = normalize_split(amount, split_mode, ids, custom_values)
        exp = Expense(
            id=str(self._next_expense_id),
            group_id=self.id,
            payer_id=payer_id,
            amount=round2(amount),
            split_mode=parse_split_mode(split_mode),
            splits=splits,
            date=date,
            description=description,
            category=category,
        )
        self._next_expense_id += 1
        self.expenses.append(exp)
        logger.info("Group %s: added expense id=%s (amount=%s, payer=%s)", self.id, exp.id, exp.amount, payer_id)
        return exp

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for e in self.expenses:
            if e.id == str(expense_id) and not e.is_deleted:
                return e
        return None

    def edit_expense(self, expense_id: str, **kwargs) -> Optional[Expense]:
        """
        Update an existing expense. Supported kwargs:
        amount, payer_id, split_mode, participant_ids, custom_values,
        description, category, date.
        Splits are re-normalized when any split input is given; participants
        default to the ones currently on the expense.
        Returns the updated Expense or None if id not found.
        """
        e = self.get_expense(expense_id)
        if e is None:
            logger.info("Expense id=%s not found", expense_id)
            return None

        payer_id = kwargs.get("payer_id", e.payer_id)
        split_keys = ("amount", "split_mode", "participant_ids", "custom_values")
        if any(k in kwargs for k in split_keys):
            amount = kwargs.get("amount", e.amount)
            mode = kwargs.get("split_mode", e.split_mode)
            ids = list(kwargs.get("participant_ids") or [s.participant_id for s in e.splits])
            self._check_members([payer_id] + ids)
            # validate before touching the record so a bad edit leaves it intact
            splits = normalize_split(amount, mode, ids, kwargs.get("custom_values"))
            e.splits = splits
            e.amount = round2(amount)
            e.split_mode = parse_split_mode(mode)
        else:
            self._check_members([payer_id])
        e.payer_id = payer_id
        for key in ("description", "category", "date"):
            if key in kwargs:
                setattr(e, key, kwargs[key])
        logger.info("Group %s: edited expense id=%s", self.id, e.id)
        return e

    def delete_expense(self, expense_id: str) -> bool:
        """Soft-delete by id. Returns True if deleted, False if not found."""
        e = self.get_expense(expense_id)
        if e is None:
            logger.info("Expense id=%s not found", expense_id)
            return False
        e.is_deleted = True
        logger.info("Deleted expense id=%s (amount=%s). Remaining expenses=%d.",
                    e.id, e.amount, len(self.active_expenses()))
        return True

    def active_expenses(self) -> List[Expense]:
        return [e for e in self.expenses if not e.is_deleted]

    # -----------------------
    # Balances
    # -----------------------
    def balances(self) -> BalanceReport:
        return engine.compute_balances(self.active_expenses())

    def balance_between(self, first_id: str, second_id: str) -> PairBalance:
        self._check_members([first_id, second_id])
        return engine.balance_between(self.active_expenses(), first_id, second_id)

    def participant_stats(self, participant_id: str) -> ParticipantStats:
        self._check_members([participant_id])
        return engine.participant_stats(self.active_expenses(), participant_id)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "participants": [p.to_dict() for p in self.participants],
            "expenses": [e.to_dict() for e in self.expenses],
        }
