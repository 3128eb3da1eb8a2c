"""
Settlement Processor - Main Orchestrator

Coordinates the settlement pipeline through discrete, testable steps.
"""

import json
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from .calculators import (
    CutResolver,
    FeeCalculator,
    LedgerAggregator,
    PayoutCalculator,
    SavingsCalculator,
)
from .calculators.fees import quantize_percent
from .export import WorkbookExporter
from .models import (
    FinanceSettings,
    LedgerTotals,
    Member,
    ProcessingContext,
    SettlementInput,
    parse_percent,
)
from .output import OutputBuilder
from .validators import CutValidator, FinanceSettingsValidator, InputValidator

_fee_calculator = FeeCalculator()
_savings_calculator = SavingsCalculator()
_cut_resolver = CutResolver()
_payout_calculator = PayoutCalculator()


def run_settlement(ctx: ProcessingContext) -> ProcessingContext:
    """Run the pure settlement steps over a context whose ledger is already set."""
    ctx.fees = _fee_calculator.calculate(ctx)
    ctx.savings = _savings_calculator.calculate(ctx)
    ctx.shares = _cut_resolver.resolve_shares(ctx)
    ctx.percents = _cut_resolver.resolve_percents(ctx)
    ctx.payouts = _payout_calculator.calculate(ctx)
    return ctx


def calculate_settlement(
    total_income_cents: int,
    total_expense_cents: int,
    settings: FinanceSettings | None,
    members: list[Member],
    cut_overrides: dict[str, Decimal] | None = None,
) -> ProcessingContext:
    """
    Settle pre-aggregated tour totals.

    Pure and total: no validation and no side effects. `members` are the
    participating members in creation order; the last one absorbs any
    equal-split rounding remainder.
    """
    ctx = ProcessingContext(
        settings=settings or FinanceSettings(),
        members=list(members),
        cut_overrides=dict(cut_overrides or {}),
        ledger=LedgerTotals(income_cents=total_income_cents, expense_cents=total_expense_cents),
    )
    return run_settlement(ctx)


class SettlementProcessor:
    """
    Main orchestrator for tour settlement.

    Implements a clear pipeline pattern:
    1. Validate Input
    2. Aggregate Ledger
    3. Calculate Fees
    4. Withhold Savings
    5. Resolve Cuts
    6. Calculate Payouts
    7. Build Output
    """

    def __init__(self):
        self.validator = InputValidator()
        self.cut_validator = CutValidator()
        self.settings_validator = FinanceSettingsValidator()
        self.ledger_aggregator = LedgerAggregator()
        self.output_builder = OutputBuilder()
        self.exporter = WorkbookExporter()

    def settle(self, input_data: SettlementInput) -> ProcessingContext:
        """
        Run the settlement pipeline and return the populated context.

        Args:
            input_data: SettlementInput built from fetched rows

        Returns:
            ProcessingContext with every intermediate figure
        """
        # Step 1: Validate
        self.validator.validate(input_data)

        # Step 2: Build context and aggregate the ledger
        ctx = ProcessingContext(
            settings=input_data.settings,
            members=input_data.active_members,
            cut_overrides=input_data.cut_overrides,
            tour=input_data.tour,
        )
        ctx.ledger = self.ledger_aggregator.aggregate(input_data.entries, input_data.days)

        # Steps 3-6: Fees, savings, cuts, payouts
        return run_settlement(ctx)

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Settle a tour from raw dictionary input.

        Convenience method for API usage.
        """
        ctx = self.settle(SettlementInput.from_dict(data))
        result = self.output_builder.build(ctx)
        return {
            "tour_summary": result.tour_summary,
            "calculations": result.calculations,
            "member_payouts": result.member_payouts,
            "cut_summary": result.cut_summary,
            "category_totals": result.category_totals,
            "daily_finance": result.daily_finance,
        }

    def export_from_dict(self, data: Dict[str, Any], as_of: date | None = None) -> tuple[str, bytes]:
        """Settle a tour and render it as an xlsx workbook. Returns (filename, content)."""
        ctx = self.settle(SettlementInput.from_dict(data))
        filename = self.exporter.filename(ctx.tour.name, as_of or date.today())
        return filename, self.exporter.render(ctx)

    def prepare_cut_records(self, data: Dict[str, Any]) -> list[dict]:
        """
        Validate a full set of edited cuts and build the rows to upsert.

        Expects {"tour_id", "actor_role", "cuts": [{"band_member_id", "cut_percent",
        "id"?, "label"?}]}.
        """
        tour_id = data.get("tour_id")
        if not tour_id:
            raise ValueError("tour_id is required.")

        rows = data.get("cuts") or []
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise ValueError("cuts must be a list of objects.")
        percents = [parse_percent(row.get("cut_percent"), "cut_percent") for row in rows]
        self.cut_validator.validate(percents, data.get("actor_role"))

        records = []
        for row, percent in zip(rows, percents):
            rounded = float(quantize_percent(percent))
            record = {
                "tour_id": tour_id,
                "band_member_id": row["band_member_id"],
                "cut_percent": rounded,
                "percent": rounded,
                "label": row.get("email") or row.get("member_name") or row.get("label"),
                "is_active": True,
            }
            if row.get("id"):
                record["id"] = row["id"]
            records.append(record)
        return records

    def prepare_finance_settings(self, data: Dict[str, Any]) -> dict:
        """Validate edited finance settings and build the row to upsert."""
        band_id = data.get("band_id")
        if not band_id:
            raise ValueError("band_id is required.")

        settings = FinanceSettings(
            savings_percent=parse_percent(data.get("savings_percent"), "Savings Withhold %"),
            manager_percent=parse_percent(data.get("manager_percent"), "Manager %"),
            agent_percent=parse_percent(data.get("agent_percent"), "Agent %"),
        )
        self.settings_validator.validate(settings, data.get("actor_role"))

        return {
            "band_id": band_id,
            "savings_percent": float(settings.savings_percent),
            "manager_percent": float(settings.manager_percent),
            "agent_percent": float(settings.agent_percent),
        }


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def process_settlement_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """Settle a tour from a Python dict and return a Python dict."""
    processor = SettlementProcessor()
    return processor.process_from_dict(input_data)


def process_settlement_from_json(json_input: str) -> str:
    """
    Settle a tour from JSON string input and return JSON string output.
    """
    try:
        input_data = json.loads(json_input)
        processor = SettlementProcessor()
        result = processor.process_from_dict(input_data)
        return json.dumps(result, indent=2)

    except ValueError as e:
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except Exception as e:
        error_response = {"error": str(e), "status": "failed"}
        return json.dumps(error_response, indent=2)
