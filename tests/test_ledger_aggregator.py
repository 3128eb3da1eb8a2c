"""
Unit Tests for Ledger Aggregator
"""

import pytest

from settlement.calculators.ledger import LedgerAggregator
from settlement.models import LedgerEntry, TourDay


def income(category, cents, day_id=None):
    return LedgerEntry(entry_type="income", category=category, amount_cents=cents, day_id=day_id)


def expense(category, cents, day_id=None):
    return LedgerEntry(entry_type="expense", category=category, amount_cents=cents, day_id=day_id)


class TestLedgerAggregator:

    @pytest.fixture
    def aggregator(self):
        return LedgerAggregator()

    @pytest.fixture
    def days(self):
        # Deliberately out of date order
        return [
            TourDay(day_id="d2", date="2025-06-02", day_type="off"),
            TourDay(day_id="d1", date="2025-06-01", day_type="show"),
        ]

    @pytest.fixture
    def entries(self):
        return [
            income("guarantee", 50000, "d1"),
            income("Buyout", 3000, "d1"),
            income("merch_sales", 12000, "d2"),
            income("tips", 500),
            expense("gas", 4000, "d1"),
            expense("tolls", 700, "d1"),
            expense("Food", 2500, "d2"),
            expense("lodging", 9000, "d2"),
            expense("repairs", 1000),
        ]

    def test_tour_totals(self, aggregator, entries, days):
        totals = aggregator.aggregate(entries, days)

        assert totals.income_cents == 65500
        assert totals.expense_cents == 17200
        assert totals.net_before_fees_cents == 48300

    def test_category_buckets(self, aggregator, entries, days):
        categories = aggregator.aggregate(entries, days).categories

        assert categories.guarantee_cents == 50000
        assert categories.buyout_cents == 3000
        assert categories.merch_cents == 12000
        assert categories.other_income_cents == 500
        assert categories.gas_cents == 4000
        assert categories.food_cents == 2500
        assert categories.lodging_cents == 9000
        assert categories.repairs_cents == 1000
        assert categories.other_expense_cents == 700

    def test_days_sorted_and_numbered(self, aggregator, entries, days):
        day_totals = aggregator.aggregate(entries, days).days

        assert [d.day.day_id for d in day_totals] == ["d1", "d2"]
        assert [d.day_number for d in day_totals] == [1, 2]

    def test_daily_net_and_running_net(self, aggregator, entries, days):
        first, second = aggregator.aggregate(entries, days).days

        assert first.totals.income_cents == 53000
        assert first.totals.expense_cents == 4700
        assert first.totals.net_cents == 48300
        assert first.running_net_cents == 48300

        assert second.totals.net_cents == 500
        assert second.running_net_cents == 48800

    def test_entries_on_unknown_day_count_toward_tour_only(self, aggregator, days):
        totals = aggregator.aggregate([income("guarantee", 1000, "elsewhere")], days)

        assert totals.income_cents == 1000
        assert all(d.totals.income_cents == 0 for d in totals.days)

    def test_empty_ledger(self, aggregator):
        totals = aggregator.aggregate([])

        assert totals.income_cents == 0
        assert totals.expense_cents == 0
        assert totals.days == []
