"""
Workbook Export

Lays a settled tour out as an xlsx workbook with a Daily Finance sheet and a
Settlement sheet.
"""

import logging
import re
from datetime import date
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from .models import CategoryTotals, ProcessingContext

logger = logging.getLogger(__name__)

MONEY_FORMAT = "$#,##0.00"
PERCENT_FORMAT = "0.00%"
WORKBOOK_CREATOR = "BackLine"

DAILY_COLUMNS = [
    "Date",
    "Day #",
    "Day Type",
    "Guarantee",
    "Buyout",
    "Merch",
    "Other Income",
    "Total Income",
    "Gas",
    "Food",
    "Lodging",
    "Repairs",
    "Other Expenses",
    "Total Expenses",
    "Net Day",
    "Running Net",
]
# Columns D onward hold money
FIRST_MONEY_COLUMN = 4


def sanitize_file_part(raw: str) -> str:
    """Lowercase slug for file names; falls back to 'tour'."""
    normalized = re.sub(r"[^a-z0-9]+", "-", (raw or "").lower()).strip("-")
    return normalized or "tour"


def _dollars(cents: int) -> float:
    return cents / 100


def _category_cells(totals: CategoryTotals) -> list:
    return [
        _dollars(totals.guarantee_cents),
        _dollars(totals.buyout_cents),
        _dollars(totals.merch_cents),
        _dollars(totals.other_income_cents),
        _dollars(totals.income_cents),
        _dollars(totals.gas_cents),
        _dollars(totals.food_cents),
        _dollars(totals.lodging_cents),
        _dollars(totals.repairs_cents),
        _dollars(totals.other_expense_cents),
        _dollars(totals.expense_cents),
    ]


def _style_header(row) -> None:
    for cell in row:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(vertical="center")


def _autosize_columns(ws, min_width=10, max_width=60):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        width = min_width
        for cell in ws[letter]:
            if cell.value is None:
                continue
            width = max(width, min(max_width, len(str(cell.value)) + 2))
        ws.column_dimensions[letter].width = width


class WorkbookExporter:
    """Renders a processed settlement context to xlsx bytes."""

    def filename(self, tour_name: str, as_of: date) -> str:
        return f"{sanitize_file_part(tour_name)}-finances-{as_of.isoformat()}.xlsx"

    def render(self, ctx: ProcessingContext) -> bytes:
        wb = Workbook()
        wb.properties.creator = WORKBOOK_CREATOR

        daily = wb.active
        daily.title = "Daily Finance"
        self._write_daily_sheet(daily, ctx)

        settlement = wb.create_sheet("Settlement")
        self._write_settlement_sheet(settlement, ctx)

        _autosize_columns(daily)
        _autosize_columns(settlement)

        buffer = BytesIO()
        wb.save(buffer)
        logger.debug("Rendered workbook with %d days and %d members", len(ctx.ledger.days), len(ctx.payouts))
        return buffer.getvalue()

    def _write_daily_sheet(self, ws, ctx: ProcessingContext) -> None:
        ws.append(DAILY_COLUMNS)
        _style_header(ws[1])
        ws.freeze_panes = "A2"

        for day_totals in ctx.ledger.days:
            totals = day_totals.totals
            ws.append(
                [day_totals.day.date, day_totals.day_number, day_totals.day.day_type or ""]
                + _category_cells(totals)
                + [_dollars(totals.net_cents), _dollars(day_totals.running_net_cents)]
            )

        ledger = ctx.ledger
        net = _dollars(ledger.net_before_fees_cents)
        ws.append(["TOTAL TOUR", "", ""] + _category_cells(ledger.categories) + [net, net])
        for cell in ws[ws.max_row]:
            cell.font = Font(bold=True)

        for row in ws.iter_rows(min_row=2, min_col=FIRST_MONEY_COLUMN, max_col=len(DAILY_COLUMNS)):
            for cell in row:
                cell.number_format = MONEY_FORMAT

    def _write_settlement_sheet(self, ws, ctx: ProcessingContext) -> None:
        tour = ctx.tour
        ledger = ctx.ledger
        fees = ctx.fees
        savings = ctx.savings
        settings = ctx.settings

        ws.append(["Metric", "Value"])
        _style_header(ws[1])

        dates = f"{tour.start_date} to {tour.end_date}" if tour else ""
        metrics = [
            ("Tour", tour.name if tour else "", None),
            ("Dates", dates, None),
            ("Gross income", _dollars(ledger.income_cents), MONEY_FORMAT),
            ("Total expenses", _dollars(ledger.expense_cents), MONEY_FORMAT),
            ("Net before fees", _dollars(ledger.net_before_fees_cents), MONEY_FORMAT),
            ("Manager % (gross)", float(settings.manager_percent) / 100, PERCENT_FORMAT),
            ("Manager fee", _dollars(fees.manager_fee_cents), MONEY_FORMAT),
            ("Agent % (gross)", float(settings.agent_percent) / 100, PERCENT_FORMAT),
            ("Agent fee", _dollars(fees.agent_fee_cents), MONEY_FORMAT),
            ("Net after fees + expenses", _dollars(savings.net_after_fees_and_expenses_cents), MONEY_FORMAT),
            ("Savings withhold %", float(settings.savings_percent) / 100, PERCENT_FORMAT),
            ("Savings withhold amount", _dollars(savings.savings_cents), MONEY_FORMAT),
            ("Distributable net", _dollars(savings.distributable_cents), MONEY_FORMAT),
        ]
        for label, value, number_format in metrics:
            ws.append([label, value])
            if number_format:
                ws.cell(row=ws.max_row, column=2).number_format = number_format

        ws.append([])
        ws.append(["Member", "Role", "Cut %", "Payout"])
        _style_header(ws[ws.max_row])

        for payout in ctx.payouts:
            ws.append([
                payout.member.name,
                payout.member.role,
                float(payout.percent) / 100,
                _dollars(payout.payout_cents),
            ])
            ws.cell(row=ws.max_row, column=3).number_format = PERCENT_FORMAT
            ws.cell(row=ws.max_row, column=4).number_format = MONEY_FORMAT
