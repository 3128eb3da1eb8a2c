"""Shared fixtures for settlement tests."""

import copy

import pytest

SAMPLE_PAYLOAD = {
    "tour": {
        "id": "t1",
        "name": "Summer Run 2025",
        "band_id": "b1",
        "start_date": "2025-06-01",
        "end_date": "2025-06-10",
    },
    "finance_settings": {"savings_percent": 10, "manager_percent": 10, "agent_percent": 5},
    "members": [
        {"id": "m1", "member_name": "Alice", "role": "owner", "is_active": True, "email": "alice@example.com"},
        {"id": "m2", "member_name": "Bob", "role": "manager", "is_active": True},
        {"id": "m3", "member_name": "Cara", "role": "member", "is_active": True},
        {"id": "m4", "member_name": "Dan", "role": "member", "is_active": False},
    ],
    "cuts": [],
    "days": [
        {"id": "d2", "date": "2025-06-02", "day_type": "show"},
        {"id": "d1", "date": "2025-06-01", "day_type": "show"},
    ],
    "ledger_entries": [
        {"id": "e1", "day_id": "d1", "entry_type": "income", "category": "guarantee", "amount_cents": 80000},
        {"id": "e2", "day_id": "d2", "entry_type": "income", "category": "merch_sales", "amount_cents": 20000},
        {"id": "e3", "day_id": "d1", "entry_type": "expense", "category": "gas", "amount_cents": 15000},
        {"id": "e4", "day_id": "d2", "entry_type": "expense", "category": "lodging", "amount_cents": 5000},
    ],
}


@pytest.fixture
def settlement_payload():
    """A tour grossing $1,000.00 against $200.00 of expenses, three active members."""
    return copy.deepcopy(SAMPLE_PAYLOAD)
