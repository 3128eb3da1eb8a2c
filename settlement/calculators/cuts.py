"""
Cut Resolver

Decides each member's percentage of the distributable net.
"""

from decimal import Decimal

from ..models import CutShare, EqualShare, ExplicitShare, ProcessingContext
from .fees import HUNDRED, quantize_percent


def equal_splits(count: int) -> list[Decimal]:
    """
    Split 100% evenly across `count` members.

    Every member gets 100 / count rounded to 2 places; the last member
    absorbs the rounding remainder so the splits total exactly 100.00.
    Three members split as 33.33 / 33.33 / 33.34.
    """
    if count <= 0:
        return []
    base = quantize_percent(HUNDRED / count)
    splits = [base] * count
    remainder = quantize_percent(HUNDRED - sum(splits))
    splits[-1] = quantize_percent(splits[-1] + remainder)
    return splits


class CutResolver:
    """Resolves explicit cuts and equal-share fallbacks for every member."""

    def resolve_shares(self, ctx: ProcessingContext) -> list[CutShare]:
        shares: list[CutShare] = []
        for member in ctx.members:
            percent = ctx.cut_overrides.get(member.member_id)
            if percent is None:
                shares.append(EqualShare())
            else:
                shares.append(ExplicitShare(percent))
        return shares

    def resolve_percents(self, ctx: ProcessingContext) -> list[Decimal]:
        """
        Map each share to a percentage.

        Equal shares take the split for their position among all
        participating members, so a member without a cut gets the same
        figure whether or not the others have explicit cuts.
        """
        splits = equal_splits(len(ctx.members))
        percents = []
        for index, share in enumerate(ctx.shares):
            if isinstance(share, ExplicitShare):
                percents.append(share.percent)
            else:
                percents.append(splits[index])
        return percents
