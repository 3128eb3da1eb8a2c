"""
Ledger Aggregator

Rolls raw ledger entries up into tour, category and per-day totals.
"""

from ..models import INCOME, CategoryTotals, DayTotals, LedgerEntry, LedgerTotals, TourDay

INCOME_BUCKETS = {
    "guarantee": "guarantee_cents",
    "buyout": "buyout_cents",
    "merch_sales": "merch_cents",
}

EXPENSE_BUCKETS = {
    "gas": "gas_cents",
    "food": "food_cents",
    "lodging": "lodging_cents",
    "repairs": "repairs_cents",
}


def add_to_totals(totals: CategoryTotals, entry: LedgerEntry) -> None:
    """Add an entry's amount to its category bucket."""
    if entry.entry_type == INCOME:
        attr = INCOME_BUCKETS.get(entry.category_key, "other_income_cents")
    else:
        attr = EXPENSE_BUCKETS.get(entry.category_key, "other_expense_cents")
    setattr(totals, attr, getattr(totals, attr) + entry.amount_cents)


class LedgerAggregator:
    """Aggregates ledger entries into LedgerTotals."""

    def aggregate(self, entries: list[LedgerEntry], days: list[TourDay] | None = None) -> LedgerTotals:
        """
        Sum entries by type, category and day.

        Entries attached to a day that is not part of the tour still count
        toward the tour totals.
        """
        days = sorted(days or [], key=lambda d: d.date)
        categories = CategoryTotals()
        by_day = {day.day_id: CategoryTotals() for day in days}

        for entry in entries:
            add_to_totals(categories, entry)
            if entry.day_id in by_day:
                add_to_totals(by_day[entry.day_id], entry)

        day_totals = []
        running = 0
        for number, day in enumerate(days, start=1):
            totals = by_day[day.day_id]
            running += totals.net_cents
            day_totals.append(
                DayTotals(day=day, day_number=number, totals=totals, running_net_cents=running)
            )

        return LedgerTotals(
            income_cents=categories.income_cents,
            expense_cents=categories.expense_cents,
            categories=categories,
            days=day_totals,
        )
