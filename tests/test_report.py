from io import BytesIO

import pandas as pd
import pytest

from groupsplit.balances import compute_balances
from groupsplit.config import Settings
from groupsplit.group import Group
from groupsplit.report import (
    balances_frame,
    enrich_balances,
    export_xlsx,
    format_currency,
    settlements_frame,
)


@pytest.fixture
def trip():
    group = Group("Trip", "Alice", settings=Settings())
    bob = group.add_participant("Bob", "#ff0000")
    carol = group.add_participant("Carol", "#00ff00")
    group.add_expense(60, group.owner.id)
    group.add_expense(30, bob.id)
    return group


def test_enrich_balances_adds_names_and_colors(trip):
    data = enrich_balances(trip.balances(), trip.participants)
    alice = data["netBalances"][0]
    assert alice["name"] == "Alice"
    assert alice["color"] == "#2d6cdf"
    assert data["settlements"] == [
        {"from": "3", "to": "1", "amount": 30, "fromName": "Carol", "toName": "Alice"}
    ]
    assert data["summary"]["totalSpent"] == 90


def test_enrich_balances_falls_back_to_id_for_unknown_participants():
    report = compute_balances([])
    assert enrich_balances(report, []) == report.to_dict()

    group = Group("Trip", "Alice", settings=Settings())
    bob = group.add_participant("Bob")
    group.add_expense(10, group.owner.id)
    data = enrich_balances(group.balances(), [group.owner])
    assert data["netBalances"][1]["name"] == bob.id
    assert data["netBalances"][1]["color"] is None
    assert data["settlements"][0]["fromName"] == bob.id


def test_balances_frame(trip):
    df = balances_frame(trip.balances(), trip.participants)
    assert list(df.columns) == ["participant_id", "name", "color", "paid", "owed", "net"]
    assert list(df["name"]) == ["Alice", "Bob", "Carol"]
    assert list(df["net"]) == [30.0, 0.0, -30.0]
    assert df["paid"].sum() == df["owed"].sum()


def test_settlements_frame(trip):
    df = settlements_frame(trip.balances(), trip.participants)
    assert df.to_dict("records") == [
        {"from": "3", "from_name": "Carol", "to": "1", "to_name": "Alice", "amount": 30.0}
    ]


def test_empty_frames_keep_columns():
    report = compute_balances([])
    assert list(balances_frame(report, []).columns) == ["participant_id", "name", "color", "paid", "owed", "net"]
    assert settlements_frame(report, []).empty


def test_export_xlsx(trip):
    data = export_xlsx(trip.balances(), trip.participants, currency="EUR")
    assert data[:2] == b"PK"
    sheets = pd.read_excel(BytesIO(data), sheet_name=None)
    assert list(sheets) == ["balances", "settlements", "summary"]
    assert list(sheets["balances"]["name"]) == ["Alice", "Bob", "Carol"]
    assert sheets["summary"]["total_spent"][0] == 90
    assert sheets["summary"]["currency"][0] == "EUR"


@pytest.mark.parametrize("amount, currency, expected", [
    (1234.5, "USD", "$1,234.50"),
    (-3, "eur", "-€3.00"),
    ("0.005", "GBP", "£0.01"),
    ("5", "XYZ", "5.00 XYZ"),
])
def test_format_currency(amount, currency, expected):
    assert format_currency(amount, currency) == expected


def test_currency_defaults_to_setting(monkeypatch, trip):
    monkeypatch.setenv("GROUPSPLIT_CURRENCY", "eur")
    assert format_currency(3) == "€3.00"
    assert format_currency(3, "USD") == "$3.00"

    sheets = pd.read_excel(BytesIO(export_xlsx(trip.balances(), trip.participants)), sheet_name=None)
    assert sheets["summary"]["currency"][0] == "EUR"


def test_currency_defaults_to_usd(monkeypatch):
    monkeypatch.delenv("GROUPSPLIT_CURRENCY", raising=False)
    assert format_currency("1234.5") == "$1,234.50"
