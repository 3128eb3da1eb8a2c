"""
Input Validation for BackLine Settlement Engine

Validates input data before processing and before cuts or finance settings
are saved. Raises ValueError with clear messages for any constraint violations.
"""

from decimal import Decimal

from .calculators.fees import HUNDRED, quantize_percent
from .models import EDITOR_ROLES, ENTRY_TYPES, ROLES, FinanceSettings, SettlementInput

CUT_TOLERANCE = Decimal("0.01")


def _check_percent_range(value: Decimal, label: str) -> None:
    if not (0 <= value <= HUNDRED):
        raise ValueError(f"{label} must be between 0 and 100.")


def _check_editor(actor_role: str | None, action: str) -> None:
    """Only owners and managers may change settlement data."""
    if actor_role is not None and actor_role not in EDITOR_ROLES:
        raise ValueError(f"Only owners/managers can {action}.")


class InputValidator:
    """Validates settlement input according to business rules."""

    def validate(self, input_data: SettlementInput) -> None:
        """
        Run all validations. Raises ValueError if any check fails.
        """
        FinanceSettingsValidator().validate(input_data.settings)
        self._validate_members(input_data)
        self._validate_entries(input_data)
        self._validate_cuts(input_data)

    def _validate_members(self, input_data: SettlementInput) -> None:
        seen = set()
        for member in input_data.members:
            if member.role not in ROLES:
                raise ValueError(f"Invalid role: {member.role}. Must be one of {', '.join(ROLES)}")
            if member.member_id in seen:
                raise ValueError(f"Duplicate member id: {member.member_id}")
            seen.add(member.member_id)

    def _validate_entries(self, input_data: SettlementInput) -> None:
        for entry in input_data.entries:
            if entry.entry_type not in ENTRY_TYPES:
                raise ValueError(
                    f"Invalid entry_type: {entry.entry_type}. Must be 'income' or 'expense'"
                )
            if entry.amount_cents < 0:
                raise ValueError(f"amount_cents cannot be negative, got: {entry.amount_cents}")

    def _validate_cuts(self, input_data: SettlementInput) -> None:
        for cut in input_data.cuts:
            _check_percent_range(cut.percent, f"Cut for member {cut.member_id}")


class FinanceSettingsValidator:
    """Validates band finance settings before use or save."""

    def validate(self, settings: FinanceSettings, actor_role: str | None = None) -> None:
        _check_percent_range(settings.savings_percent, "Savings Withhold %")
        _check_percent_range(settings.manager_percent, "Manager %")
        _check_percent_range(settings.agent_percent, "Agent %")
        _check_editor(actor_role, "update finance settings")


class CutValidator:
    """Validates a full set of member cuts before they are saved."""

    def total(self, percents: list[Decimal]) -> Decimal:
        return quantize_percent(sum(percents, Decimal("0")))

    def is_valid_total(self, percents: list[Decimal]) -> bool:
        """True when the cuts total 100.00 within a 0.01 tolerance."""
        return abs(self.total(percents) - HUNDRED) <= CUT_TOLERANCE

    def validate(self, percents: list[Decimal], actor_role: str | None = None) -> None:
        _check_editor(actor_role, "edit cuts")

        if not percents:
            raise ValueError("At least one member cut is required.")

        if not self.is_valid_total(percents):
            raise ValueError(
                f"Cuts must total 100.00% before saving (currently {self.total(percents)}%)."
            )

        if any(p < 0 for p in percents):
            raise ValueError("Cut percentages must be 0 or greater.")
