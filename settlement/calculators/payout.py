"""
Payout Calculator

Calculates each member's payout from the distributable net.
"""

from ..models import MemberPayout, ProcessingContext
from .fees import percent_of


class PayoutCalculator:
    """Calculates per-member payouts."""

    def calculate(self, ctx: ProcessingContext) -> list[MemberPayout]:
        """
        Payout = Distributable Net × Member Percent / 100

        Each payout is rounded on its own, so the payouts may differ from the
        distributable net by up to one cent per member after the first.
        """
        distributable = ctx.savings.distributable_cents
        return [
            MemberPayout(
                member=member,
                share=share,
                percent=percent,
                payout_cents=percent_of(distributable, percent),
            )
            for member, share, percent in zip(ctx.members, ctx.shares, ctx.percents)
        ]
