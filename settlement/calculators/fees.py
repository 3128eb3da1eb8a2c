"""
Fee Calculators for BackLine Settlement Engine

Manager and agent fees are taken off gross income.
All amounts are integer cents; rounding is ROUND_HALF_UP.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..models import FeeCalculation, ProcessingContext

HUNDRED = Decimal("100")


def round_cents(value: Decimal) -> int:
    """Round to a whole number of cents using ROUND_HALF_UP."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def quantize_percent(value: Decimal) -> Decimal:
    """Round a percentage to 2 decimal places using ROUND_HALF_UP."""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def percent_of(amount_cents: int, percent: Decimal) -> int:
    """Return `percent`% of `amount_cents`, rounded to the cent."""
    return round_cents(Decimal(amount_cents) * percent / HUNDRED)


class FeeCalculator:
    """Calculates fees charged against gross tour income."""

    def calculate(self, ctx: ProcessingContext) -> FeeCalculation:
        income = ctx.ledger.income_cents
        settings = ctx.settings

        return FeeCalculation(
            manager_fee_cents=percent_of(income, settings.manager_percent),
            agent_fee_cents=percent_of(income, settings.agent_percent),
        )
