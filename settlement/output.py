"""
Output Builder

Constructs the final API response from processing context.
"""

from decimal import Decimal

from .models import CategoryTotals, ExplicitShare, ProcessingContext, SettlementResult
from .validators import CutValidator


def to_money(cents: int) -> float:
    """Convert integer cents to a float dollar amount."""
    return round(cents / 100, 2)


def to_percent(value: Decimal) -> float:
    return round(float(value), 2)


def _fmt(cents: int) -> str:
    """Format cents as a currency string for descriptions."""
    dollars = cents / 100
    if dollars < 0:
        return f"-${-dollars:,.2f}"
    return f"${dollars:,.2f}"


def _pct(value: Decimal) -> str:
    return f"{value.normalize():f}%"


def _figure(cents: int, description: str) -> dict:
    return {"value": to_money(cents), "cents": cents, "description": description}


class OutputBuilder:
    """Builds the final output response."""

    def __init__(self):
        self.cut_validator = CutValidator()

    def build(self, ctx: ProcessingContext) -> SettlementResult:
        """Construct the complete settlement result from processing context."""
        return SettlementResult(
            tour_summary=self._build_tour_summary(ctx),
            calculations=self._build_calculations(ctx),
            member_payouts=self._build_member_payouts(ctx),
            cut_summary=self._build_cut_summary(ctx),
            category_totals=self._build_category_totals(ctx.ledger.categories),
            daily_finance=self._build_daily_finance(ctx),
        )

    def _build_tour_summary(self, ctx: ProcessingContext) -> dict:
        tour = ctx.tour
        return {
            "tour_id": tour.tour_id if tour else None,
            "tour_name": tour.name if tour else None,
            "start_date": tour.start_date if tour else None,
            "end_date": tour.end_date if tour else None,
            "member_count": len(ctx.members),
        }

    def _build_calculations(self, ctx: ProcessingContext) -> dict:
        """Build calculations section with value and dynamic description for each field."""
        ledger = ctx.ledger
        fees = ctx.fees
        savings = ctx.savings
        settings = ctx.settings

        income = ledger.income_cents
        net = savings.net_after_fees_and_expenses_cents

        if net > 0:
            savings_desc = (
                f"{_pct(settings.savings_percent)} × {_fmt(net)} = {_fmt(savings.savings_cents)}"
            )
        else:
            savings_desc = "No savings withheld because the tour did not net a profit"

        return {
            "gross_income": _figure(income, "Sum of all income entries for the tour"),
            "total_expenses": _figure(
                ledger.expense_cents, "Sum of all expense entries for the tour"
            ),
            "net_before_fees": _figure(
                ledger.net_before_fees_cents,
                f"gross_income ({_fmt(income)}) - expenses ({_fmt(ledger.expense_cents)})",
            ),
            "manager_fee": _figure(
                fees.manager_fee_cents,
                f"{_pct(settings.manager_percent)} × {_fmt(income)} = {_fmt(fees.manager_fee_cents)}",
            ),
            "agent_fee": _figure(
                fees.agent_fee_cents,
                f"{_pct(settings.agent_percent)} × {_fmt(income)} = {_fmt(fees.agent_fee_cents)}",
            ),
            "gross_fees": _figure(
                fees.gross_fees_cents,
                f"manager ({_fmt(fees.manager_fee_cents)}) + agent ({_fmt(fees.agent_fee_cents)})",
            ),
            "net_after_fees_and_expenses": _figure(
                net,
                f"gross_income ({_fmt(income)}) - fees ({_fmt(fees.gross_fees_cents)}) "
                f"- expenses ({_fmt(ledger.expense_cents)}) = {_fmt(net)}",
            ),
            "savings_withheld": _figure(savings.savings_cents, savings_desc),
            "distributable_net": _figure(
                savings.distributable_cents,
                f"net ({_fmt(net)}) - savings ({_fmt(savings.savings_cents)}) "
                f"= {_fmt(savings.distributable_cents)}",
            ),
            "percentages": {
                "savings_percent": to_percent(settings.savings_percent),
                "manager_percent": to_percent(settings.manager_percent),
                "agent_percent": to_percent(settings.agent_percent),
            },
        }

    def _build_member_payouts(self, ctx: ProcessingContext) -> list:
        rows = []
        for payout in ctx.payouts:
            member = payout.member
            rows.append({
                "band_member_id": member.member_id,
                "member_name": member.name,
                "email": member.email,
                "role": member.role,
                "share_type": "explicit" if isinstance(payout.share, ExplicitShare) else "equal",
                "cut_percent": to_percent(payout.percent),
                "payout": to_money(payout.payout_cents),
                "payout_cents": payout.payout_cents,
            })
        return rows

    def _build_cut_summary(self, ctx: ProcessingContext) -> dict:
        percents = [p.percent for p in ctx.payouts]
        return {
            "total_percent": to_percent(self.cut_validator.total(percents)),
            "is_valid": bool(percents) and self.cut_validator.is_valid_total(percents),
            "total_payout_cents": sum(p.payout_cents for p in ctx.payouts),
        }

    def _build_category_totals(self, totals: CategoryTotals) -> dict:
        return {
            "guarantee": to_money(totals.guarantee_cents),
            "buyout": to_money(totals.buyout_cents),
            "merch": to_money(totals.merch_cents),
            "other_income": to_money(totals.other_income_cents),
            "total_income": to_money(totals.income_cents),
            "gas": to_money(totals.gas_cents),
            "food": to_money(totals.food_cents),
            "lodging": to_money(totals.lodging_cents),
            "repairs": to_money(totals.repairs_cents),
            "other_expenses": to_money(totals.other_expense_cents),
            "total_expenses": to_money(totals.expense_cents),
        }

    def _build_daily_finance(self, ctx: ProcessingContext) -> list:
        rows = []
        for day_totals in ctx.ledger.days:
            row = {
                "date": day_totals.day.date,
                "day_number": day_totals.day_number,
                "day_type": day_totals.day.day_type,
            }
            row.update(self._build_category_totals(day_totals.totals))
            row["net_day"] = to_money(day_totals.totals.net_cents)
            row["running_net"] = to_money(day_totals.running_net_cents)
            rows.append(row)
        return rows
