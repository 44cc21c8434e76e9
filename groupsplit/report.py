"""
report.py - caller-side presentation helpers for balance results

The engine only knows opaque participant ids. These helpers join a
BalanceReport with the group's participant list (name/color), build pandas
tables from it, and export them as an XLSX workbook.
"""

from io import BytesIO
from typing import Dict, Iterable, Optional

import pandas as pd

from groupsplit.config import Settings
from groupsplit.models import BalanceReport, Participant
from groupsplit.money import round2

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "CHF": "CHF ", "JPY": "¥"}

BALANCE_COLUMNS = ["participant_id", "name", "color", "paid", "owed", "net"]
SETTLEMENT_COLUMNS = ["from", "from_name", "to", "to_name", "amount"]


def format_currency(amount, currency: Optional[str] = None) -> str:
    """
    '$1,234.50' style string; unknown codes are used as a suffix.
    currency defaults to GROUPSPLIT_CURRENCY.
    """
    currency = currency or Settings.from_env().currency
    value = round2(amount)
    sign = "-" if value < 0 else ""
    text = f"{abs(value):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{sign}{text} {currency.upper()}"
    return f"{sign}{symbol}{text}"


def _lookup(participants: Iterable[Participant]) -> Dict[str, Participant]:
    return {p.id: p for p in participants}


def enrich_balances(report: BalanceReport, participants: Iterable[Participant]) -> Dict:
    """
    report.to_dict() plus display metadata. Ids with no matching participant
    (e.g. removed members still referenced by old data) get name=id.
    """
    people = _lookup(participants)
    out = report.to_dict()
    for b in out["netBalances"]:
        p = people.get(b["participantId"])
        b["name"] = p.name if p else b["participantId"]
        b["color"] = p.color if p else None
    for s in out["settlements"]:
        s["fromName"] = people[s["from"]].name if s["from"] in people else s["from"]
        s["toName"] = people[s["to"]].name if s["to"] in people else s["to"]
    return out


def balances_frame(report: BalanceReport, participants: Iterable[Participant]) -> pd.DataFrame:
    people = _lookup(participants)
    rows = []
    for b in report.net_balances:
        p = people.get(b.participant_id)
        rows.append({
            "participant_id": b.participant_id,
            "name": p.name if p else b.participant_id,
            "color": p.color if p else None,
            "paid": float(b.paid),
            "owed": float(b.owed),
            "net": float(b.net),
        })
    return pd.DataFrame(rows, columns=BALANCE_COLUMNS)


def settlements_frame(report: BalanceReport, participants: Iterable[Participant]) -> pd.DataFrame:
    people = _lookup(participants)
    rows = []
    for s in report.settlements:
        rows.append({
            "from": s.from_id,
            "from_name": people[s.from_id].name if s.from_id in people else s.from_id,
            "to": s.to_id,
            "to_name": people[s.to_id].name if s.to_id in people else s.to_id,
            "amount": float(s.amount),
        })
    return pd.DataFrame(rows, columns=SETTLEMENT_COLUMNS)


def export_xlsx(report: BalanceReport, participants: Iterable[Participant],
                currency: Optional[str] = None) -> bytes:
    """
    Workbook with three sheets: balances, settlements, summary.
    Returned as bytes so the caller can stream it as a download. currency
    defaults to GROUPSPLIT_CURRENCY.
    """
    currency = currency or Settings.from_env().currency
    participants = list(participants)
    summary = pd.DataFrame([{
        "total_spent": float(report.summary.total_spent),
        "total_owed": float(report.summary.total_owed),
        "participant_count": report.summary.participant_count,
        "currency": currency,
    }])

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        balances_frame(report, participants).to_excel(writer, index=False, sheet_name="balances")
        settlements_frame(report, participants).to_excel(writer, index=False, sheet_name="settlements")
        summary.to_excel(writer, index=False, sheet_name="summary")
    buffer.seek(0)
    return buffer.getvalue()
