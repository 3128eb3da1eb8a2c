"""
Domain Models for BackLine Settlement Engine

These dataclasses provide type-safe representations of all settlement entities.
Currency amounts are integer cents; percentages use Decimal.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

INCOME = "income"
EXPENSE = "expense"
ENTRY_TYPES = (INCOME, EXPENSE)

OWNER = "owner"
MANAGER = "manager"
MEMBER = "member"
ROLES = (OWNER, MANAGER, MEMBER)
EDITOR_ROLES = (OWNER, MANAGER)


def parse_decimal(value, field_name: str) -> Decimal:
    """Parse a numeric value into a finite Decimal, raising ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"{field_name} must be numeric, got: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"{field_name} must be a finite number, got: {value!r}")
    return result


def parse_percent(value, field_name: str) -> Decimal:
    """Parse a percentage; None means 0."""
    if value is None:
        return Decimal("0")
    return parse_decimal(value, field_name)


def parse_cents(value, field_name: str = "amount_cents") -> int:
    amount = parse_decimal(value, field_name)
    if amount != amount.to_integral_value():
        raise ValueError(f"{field_name} must be a whole number of cents, got: {value!r}")
    return int(amount)


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass(frozen=True)
class LedgerEntry:
    """A single income or expense line recorded against a tour."""

    entry_type: str  # 'income' or 'expense'
    category: str
    amount_cents: int
    day_id: str | None = None
    entry_id: str | None = None
    notes: str | None = None

    @property
    def category_key(self) -> str:
        return (self.category or "").lower()

    @classmethod
    def from_dict(cls, data: dict) -> "LedgerEntry":
        return cls(
            entry_type=data["entry_type"],
            category=data.get("category") or "",
            amount_cents=parse_cents(data["amount_cents"]),
            day_id=data.get("day_id"),
            entry_id=data.get("id"),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class FinanceSettings:
    """Band-level fee and withholding configuration. Absent settings mean all zero."""

    savings_percent: Decimal = Decimal("0")
    manager_percent: Decimal = Decimal("0")
    agent_percent: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, data: dict | None) -> "FinanceSettings":
        if not data:
            return cls()
        return cls(
            savings_percent=parse_percent(data.get("savings_percent"), "savings_percent"),
            manager_percent=parse_percent(data.get("manager_percent"), "manager_percent"),
            agent_percent=parse_percent(data.get("agent_percent"), "agent_percent"),
        )


@dataclass(frozen=True)
class Member:
    """A band member who may take a cut of the tour."""

    member_id: str
    name: str
    role: str = MEMBER  # 'owner', 'manager' or 'member'
    is_active: bool = True
    user_id: str | None = None
    email: str | None = None

    @property
    def can_edit(self) -> bool:
        return self.role in EDITOR_ROLES

    @property
    def label(self) -> str:
        return self.email or self.name

    @classmethod
    def from_dict(cls, data: dict) -> "Member":
        return cls(
            member_id=str(data["id"]),
            name=data.get("member_name") or data.get("name") or "",
            role=data.get("role", MEMBER),
            is_active=data.get("is_active", True),
            user_id=data.get("user_id"),
            email=data.get("email"),
        )


@dataclass(frozen=True)
class Cut:
    """An explicit percentage assigned to one member for one tour."""

    member_id: str
    percent: Decimal
    cut_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Cut":
        # Older rows only carry the legacy 'percent' column
        raw = data.get("cut_percent")
        if raw is None:
            raw = data.get("percent")
        return cls(
            member_id=str(data["band_member_id"]),
            percent=parse_percent(raw, "cut_percent"),
            cut_id=data.get("id"),
        )


@dataclass(frozen=True)
class Tour:
    tour_id: str
    name: str
    start_date: str | None = None
    end_date: str | None = None
    band_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "Tour":
        data = data or {}
        return cls(
            tour_id=str(data.get("id", "")),
            name=data.get("name") or "Tour",
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            band_id=data.get("band_id"),
        )


@dataclass(frozen=True)
class TourDay:
    day_id: str
    date: str
    day_type: str | None = None  # 'show', 'off' or None

    @classmethod
    def from_dict(cls, data: dict) -> "TourDay":
        return cls(day_id=str(data["id"]), date=data["date"], day_type=data.get("day_type"))


@dataclass(frozen=True)
class ExplicitShare:
    """A cut percentage set by an owner or manager."""

    percent: Decimal


@dataclass(frozen=True)
class EqualShare:
    """No explicit cut; the member takes an equal split of 100%."""


CutShare = ExplicitShare | EqualShare


@dataclass
class SettlementInput:
    """Complete input for settling a tour."""

    tour: Tour
    settings: FinanceSettings
    members: list[Member] = field(default_factory=list)
    cuts: list[Cut] = field(default_factory=list)
    days: list[TourDay] = field(default_factory=list)
    entries: list[LedgerEntry] = field(default_factory=list)

    @property
    def active_members(self) -> list[Member]:
        """Members taking part in the settlement, in creation order."""
        return [m for m in self.members if m.is_active]

    @property
    def cut_overrides(self) -> dict[str, Decimal]:
        return {cut.member_id: cut.percent for cut in self.cuts}

    @classmethod
    def from_dict(cls, data: dict) -> "SettlementInput":
        cuts = [Cut.from_dict(c) for c in data.get("cuts") or [] if c.get("band_member_id")]
        return cls(
            tour=Tour.from_dict(data.get("tour")),
            settings=FinanceSettings.from_dict(data.get("finance_settings")),
            members=[Member.from_dict(m) for m in data.get("members") or []],
            cuts=cuts,
            days=[TourDay.from_dict(d) for d in data.get("days") or []],
            entries=[LedgerEntry.from_dict(e) for e in data.get("ledger_entries") or []],
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass
class CategoryTotals:
    """Ledger amounts bucketed by category."""

    guarantee_cents: int = 0
    buyout_cents: int = 0
    merch_cents: int = 0
    other_income_cents: int = 0
    gas_cents: int = 0
    food_cents: int = 0
    lodging_cents: int = 0
    repairs_cents: int = 0
    other_expense_cents: int = 0

    @property
    def income_cents(self) -> int:
        return self.guarantee_cents + self.buyout_cents + self.merch_cents + self.other_income_cents

    @property
    def expense_cents(self) -> int:
        return (
            self.gas_cents
            + self.food_cents
            + self.lodging_cents
            + self.repairs_cents
            + self.other_expense_cents
        )

    @property
    def net_cents(self) -> int:
        return self.income_cents - self.expense_cents


@dataclass
class DayTotals:
    day: TourDay
    day_number: int
    totals: CategoryTotals
    running_net_cents: int = 0


@dataclass
class LedgerTotals:
    """Results of ledger aggregation."""

    income_cents: int = 0
    expense_cents: int = 0
    categories: CategoryTotals = field(default_factory=CategoryTotals)
    days: list[DayTotals] = field(default_factory=list)

    @property
    def net_before_fees_cents(self) -> int:
        return self.income_cents - self.expense_cents


@dataclass
class FeeCalculation:
    """Results of fee calculations."""

    manager_fee_cents: int = 0
    agent_fee_cents: int = 0

    @property
    def gross_fees_cents(self) -> int:
        return self.manager_fee_cents + self.agent_fee_cents


@dataclass
class SavingsWithholding:
    """Results of the savings withholding step."""

    net_after_fees_and_expenses_cents: int = 0
    savings_cents: int = 0
    distributable_cents: int = 0


@dataclass
class MemberPayout:
    member: Member
    share: CutShare
    percent: Decimal
    payout_cents: int


@dataclass
class ProcessingContext:
    """
    Holds all intermediate state during settlement.
    This is the "bag" that flows through the pipeline.
    """

    # Input (immutable during processing)
    settings: FinanceSettings
    members: list[Member]
    cut_overrides: dict[str, Decimal] = field(default_factory=dict)
    tour: Tour | None = None

    # Step results (populated as we go)
    ledger: LedgerTotals = field(default_factory=LedgerTotals)
    fees: FeeCalculation = field(default_factory=FeeCalculation)
    savings: SavingsWithholding = field(default_factory=SavingsWithholding)
    shares: list[CutShare] = field(default_factory=list)
    percents: list[Decimal] = field(default_factory=list)
    payouts: list[MemberPayout] = field(default_factory=list)

    @property
    def total_cut_percent(self) -> Decimal:
        return sum((p.percent for p in self.payouts), Decimal("0"))


@dataclass
class SettlementResult:
    """Final output of settlement processing."""

    tour_summary: dict
    calculations: dict
    member_payouts: list
    cut_summary: dict
    category_totals: dict
    daily_finance: list
