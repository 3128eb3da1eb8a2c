"""
Savings Withholding Calculator

Holds back a share of the tour's net for the band's savings.
"""

from ..models import ProcessingContext, SavingsWithholding
from .fees import percent_of


class SavingsCalculator:
    """Calculates net after fees, savings withholding and distributable net."""

    def calculate(self, ctx: ProcessingContext) -> SavingsWithholding:
        """
        Net = Gross Income
            - Manager Fee
            - Agent Fee
            - Expenses

        Savings are withheld only from a positive net; a losing tour
        passes its full loss through to the members.
        """
        net = ctx.ledger.income_cents
        net -= ctx.fees.manager_fee_cents
        net -= ctx.fees.agent_fee_cents
        net -= ctx.ledger.expense_cents

        if net > 0:
            savings = percent_of(net, ctx.settings.savings_percent)
        else:
            savings = 0

        return SavingsWithholding(
            net_after_fees_and_expenses_cents=net,
            savings_cents=savings,
            distributable_cents=net - savings,
        )
