"""
money.py - currency rounding and split normalization

Responsibilities:
 - round2: bring any numeric input to a 2-decimal Decimal (half-up)
 - minor unit helpers for exact integer (cent) arithmetic
 - normalize_split: turn amount + split mode + participants into split lines
   whose sum equals the rounded amount exactly

Rounding policy: whenever a remainder has to land somewhere it goes to the
earliest participants in input order. Equal splits hand out one extra cent
each to the first `remainder` participants; custom and percentage splits put
the whole residual on the first participant's line, unless that line is too
small to absorb a negative residual.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from groupsplit.config import get_logger
from groupsplit.errors import (
    InvalidPercentage,
    InvalidSplitInput,
    NegativeSplitAmount,
    PercentageMismatch,
    SplitMismatch,
    UnsupportedSplitMode,
)
from groupsplit.models import CENT, ZERO, SplitLine, SplitMode

# Largest difference accepted between a computed sum and its target.
SPLIT_TOLERANCE = Decimal("0.01")
HUNDRED = Decimal("100")

logger = get_logger(__name__)


def round2(value: Any) -> Decimal:
    """Round to 2 decimal places, half away from zero (1.005 -> 1.01)."""
    d = value if isinstance(value, Decimal) else Decimal(str(value))
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(value: Any) -> int:
    """Money -> integer cents."""
    return int(round2(value) * 100)


def from_minor_units(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def is_valid_amount(value: Any) -> bool:
    """True when value parses as a finite number greater than zero."""
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return False
    return d.is_finite() and d > 0


def parse_split_mode(mode: Union[SplitMode, str]) -> SplitMode:
    if isinstance(mode, SplitMode):
        return mode
    try:
        return SplitMode(str(mode).strip().lower())
    except ValueError:
        raise UnsupportedSplitMode(mode) from None


def _custom_value(custom_values: Mapping[str, Any], participant_id: str) -> Decimal:
    raw = custom_values.get(participant_id)
    if raw is None or raw == "":
        return ZERO
    try:
        d = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise InvalidSplitInput(f"Split value for participant {participant_id} is not a number: {raw!r}") from None
    if not d.is_finite():
        raise InvalidSplitInput(f"Split value for participant {participant_id} must be finite, got {raw!r}")
    try:
        round2(d)
    except InvalidOperation:
        raise InvalidSplitInput(f"Split value for participant {participant_id} is too large: {raw!r}") from None
    return d


def _absorb_residual(lines: List[SplitLine], residual: Decimal) -> None:
    """
    Put the residual on the first line. A negative residual that would push
    the first line below zero is taken back one cent at a time from the lines
    still above zero, earliest first, so no line ends up negative.
    """
    if residual == 0:
        return
    first = lines[0]
    if first.amount + residual >= 0:
        first.amount = round2(first.amount + residual)
        return

    logger.debug("Residual %s spread across lines, first line holds %s", residual, first.amount)
    # lines sum to total - residual with total > 0, so enough cents remain
    remaining = residual
    while remaining < 0:
        for line in lines:
            if remaining == 0:
                break
            if line.amount > 0:
                line.amount = round2(line.amount - CENT)
                remaining += CENT


def _equal_split(total: Decimal, participant_ids: Sequence[str]) -> List[SplitLine]:
    total_cents = to_minor_units(total)
    count = len(participant_ids)
    base_cents = total_cents // count
    remainder = total_cents - base_cents * count
    return [
        SplitLine(participant_id=pid, amount=from_minor_units(base_cents + (1 if index < remainder else 0)))
        for index, pid in enumerate(participant_ids)
    ]


def _custom_split(total: Decimal, participant_ids: Sequence[str], custom_values: Mapping[str, Any]) -> List[SplitLine]:
    lines = [SplitLine(participant_id=pid, amount=round2(_custom_value(custom_values, pid))) for pid in participant_ids]

    for line in lines:
        if line.amount < 0:
            raise NegativeSplitAmount(line.participant_id, line.amount)

    actual = round2(sum((ln.amount for ln in lines), ZERO))
    if abs(actual - total) > SPLIT_TOLERANCE:
        raise SplitMismatch(actual, total)

    _absorb_residual(lines, total - actual)
    return lines


def _percentage_split(total: Decimal, participant_ids: Sequence[str], custom_values: Mapping[str, Any]) -> List[SplitLine]:
    percentages = []
    for pid in participant_ids:
        pct = _custom_value(custom_values, pid)
        if pct < 0 or pct > HUNDRED:
            raise InvalidPercentage(pid, pct)
        percentages.append(pct)

    pct_sum = round2(sum(percentages, ZERO))
    if abs(pct_sum - HUNDRED) > SPLIT_TOLERANCE:
        raise PercentageMismatch(pct_sum)

    lines = [
        SplitLine(participant_id=pid, amount=round2(total * pct / HUNDRED))
        for pid, pct in zip(participant_ids, percentages)
    ]
    _absorb_residual(lines, total - sum((ln.amount for ln in lines), ZERO))
    return lines


def normalize_split(
    amount: Any,
    mode: Union[SplitMode, str],
    participant_ids: Sequence[str],
    custom_values: Optional[Mapping[str, Any]] = None,
) -> List[SplitLine]:
    """
    Convert a total and a split strategy into per-participant split lines.

    custom_values holds amounts (custom mode) or percentages (percentage mode)
    keyed by participant id; missing entries count as 0. Equal mode ignores it.

    Raises InvalidSplitInput, NegativeSplitAmount, SplitMismatch,
    InvalidPercentage, PercentageMismatch or UnsupportedSplitMode.
    """
    if not participant_ids:
        raise InvalidSplitInput("At least one participant is required")
    if not is_valid_amount(amount):
        raise InvalidSplitInput(f"Amount must be greater than 0, got {amount!r}")
    try:
        total = round2(amount)
    except InvalidOperation:
        raise InvalidSplitInput(f"Amount is too large: {amount!r}") from None
    if total <= 0:
        raise InvalidSplitInput(f"Amount must be greater than 0, got {amount!r}")

    split_mode = parse_split_mode(mode)
    values: Dict[str, Any] = dict(custom_values or {})

    if split_mode is SplitMode.EQUAL:
        return _equal_split(total, participant_ids)
    if split_mode is SplitMode.CUSTOM:
        return _custom_split(total, participant_ids, values)
    return _percentage_split(total, participant_ids, values)
