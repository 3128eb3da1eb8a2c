"""
Tests for BackLine Settlement Engine

Run with: python -m pytest tests/ -v
"""

import json
from datetime import date
from decimal import Decimal

import pytest

from settlement import SettlementProcessor, calculate_settlement
from settlement.models import FinanceSettings, Member
from settlement.processor import process_settlement_from_dict, process_settlement_from_json


def make_members(count):
    return [Member(member_id=f"m{i}", name=f"Member {i}") for i in range(1, count + 1)]


class TestCalculateSettlement:
    """The pure calculation over pre-aggregated totals."""

    @pytest.fixture
    def settings(self):
        return FinanceSettings(
            savings_percent=Decimal("10"), manager_percent=Decimal("10"), agent_percent=Decimal("5")
        )

    def test_reference_figures(self, settings):
        """$1,000 income, $200 expenses, 10% manager, 5% agent, 10% savings."""
        ctx = calculate_settlement(100000, 20000, settings, make_members(3))

        assert ctx.fees.manager_fee_cents == 10000
        assert ctx.fees.agent_fee_cents == 5000
        assert ctx.savings.net_after_fees_and_expenses_cents == 65000
        assert ctx.savings.savings_cents == 6500
        assert ctx.savings.distributable_cents == 58500

    def test_equal_split_payouts(self, settings):
        ctx = calculate_settlement(100000, 20000, settings, make_members(3))

        assert [p.percent for p in ctx.payouts] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
        assert [p.payout_cents for p in ctx.payouts] == [19498, 19498, 19504]
        assert ctx.total_cut_percent == Decimal("100")

    def test_missing_settings_mean_no_fees(self):
        ctx = calculate_settlement(100000, 20000, None, make_members(2))

        assert ctx.fees.gross_fees_cents == 0
        assert ctx.savings.savings_cents == 0
        assert ctx.savings.distributable_cents == 80000

    @pytest.mark.parametrize("income,expense", [(0, 0), (10000, 10000), (10000, 99999)])
    def test_no_savings_without_profit(self, income, expense):
        settings = FinanceSettings(savings_percent=Decimal("50"))
        ctx = calculate_settlement(income, expense, settings, make_members(2))

        assert ctx.savings.savings_cents == 0
        assert ctx.savings.distributable_cents == income - expense

    @pytest.mark.parametrize("count", [1, 2, 3, 6, 7, 9])
    def test_payout_sum_within_rounding_slack(self, settings, count):
        ctx = calculate_settlement(123457, 3210, settings, make_members(count))

        total = sum(p.payout_cents for p in ctx.payouts)
        assert abs(total - ctx.savings.distributable_cents) <= count - 1

    def test_feeding_percents_back_reproduces_payouts(self, settings):
        members = make_members(7)
        first = calculate_settlement(123457, 3210, settings, members)

        overrides = {p.member.member_id: p.percent for p in first.payouts}
        second = calculate_settlement(123457, 3210, settings, members, overrides)

        assert [p.payout_cents for p in second.payouts] == [p.payout_cents for p in first.payouts]
        assert [p.percent for p in second.payouts] == [p.percent for p in first.payouts]

    def test_no_members(self, settings):
        ctx = calculate_settlement(100000, 20000, settings, [])

        assert ctx.payouts == []
        assert ctx.savings.distributable_cents == 58500


class TestSettlementProcessor:
    """Test the main settlement processor."""

    @pytest.fixture
    def processor(self):
        return SettlementProcessor()

    def test_basic_processing(self, processor, settlement_payload):
        result = processor.process_from_dict(settlement_payload)

        assert "tour_summary" in result
        assert "calculations" in result
        assert "member_payouts" in result
        assert "cut_summary" in result
        assert "daily_finance" in result

    def test_calculations(self, processor, settlement_payload):
        calcs = processor.process_from_dict(settlement_payload)["calculations"]

        assert calcs["gross_income"]["cents"] == 100000
        assert calcs["total_expenses"]["cents"] == 20000
        assert calcs["manager_fee"]["value"] == 100.0
        assert calcs["agent_fee"]["value"] == 50.0
        assert calcs["savings_withheld"]["value"] == 65.0
        assert calcs["distributable_net"]["value"] == 585.0
        assert calcs["manager_fee"]["description"] == "10% × $1,000.00 = $100.00"

    def test_inactive_member_excluded(self, processor, settlement_payload):
        result = processor.process_from_dict(settlement_payload)

        names = [row["member_name"] for row in result["member_payouts"]]
        assert names == ["Alice", "Bob", "Cara"]
        assert result["tour_summary"]["member_count"] == 3

    def test_equal_split_output(self, processor, settlement_payload):
        result = processor.process_from_dict(settlement_payload)

        payouts = result["member_payouts"]
        assert [row["cut_percent"] for row in payouts] == [33.33, 33.33, 33.34]
        assert [row["payout"] for row in payouts] == [194.98, 194.98, 195.04]
        assert {row["share_type"] for row in payouts} == {"equal"}
        assert result["cut_summary"] == {
            "total_percent": 100.0,
            "is_valid": True,
            "total_payout_cents": 58500,
        }

    def test_explicit_cuts(self, processor, settlement_payload):
        settlement_payload["cuts"] = [
            {"id": "c1", "band_member_id": "m1", "cut_percent": 50},
            {"id": "c2", "band_member_id": "m2", "cut_percent": 25},
            {"id": "c3", "band_member_id": "m3", "cut_percent": None, "percent": 25},
        ]
        payouts = processor.process_from_dict(settlement_payload)["member_payouts"]

        assert [row["payout_cents"] for row in payouts] == [29250, 14625, 14625]
        assert {row["share_type"] for row in payouts} == {"explicit"}

    def test_partial_cuts_flagged_invalid(self, processor, settlement_payload):
        settlement_payload["cuts"] = [{"band_member_id": "m1", "cut_percent": 60}]
        summary = processor.process_from_dict(settlement_payload)["cut_summary"]

        assert summary["total_percent"] == 126.67
        assert summary["is_valid"] is False

    def test_losing_tour(self, processor, settlement_payload):
        settlement_payload["ledger_entries"].append(
            {"entry_type": "expense", "category": "repairs", "amount_cents": 200000}
        )
        calcs = processor.process_from_dict(settlement_payload)["calculations"]

        assert calcs["net_after_fees_and_expenses"]["cents"] == -135000
        assert calcs["savings_withheld"]["cents"] == 0
        assert calcs["distributable_net"]["value"] == -1350.0
        assert "did not net a profit" in calcs["savings_withheld"]["description"]

    def test_no_active_members(self, processor, settlement_payload):
        settlement_payload["members"] = []
        result = processor.process_from_dict(settlement_payload)

        assert result["member_payouts"] == []
        assert result["cut_summary"]["is_valid"] is False

    def test_daily_finance(self, processor, settlement_payload):
        daily = processor.process_from_dict(settlement_payload)["daily_finance"]

        assert [row["date"] for row in daily] == ["2025-06-01", "2025-06-02"]
        assert daily[0]["net_day"] == 650.0
        assert daily[1]["running_net"] == 800.0

    def test_validation_error_raised(self, processor, settlement_payload):
        settlement_payload["finance_settings"]["agent_percent"] = 101

        with pytest.raises(ValueError):
            processor.process_from_dict(settlement_payload)

    def test_export_filename(self, processor, settlement_payload):
        filename, content = processor.export_from_dict(settlement_payload, as_of=date(2025, 7, 1))

        assert filename == "summer-run-2025-finances-2025-07-01.xlsx"
        assert content[:2] == b"PK"


class TestPrepareCutRecords:

    @pytest.fixture
    def processor(self):
        return SettlementProcessor()

    def test_records_for_upsert(self, processor):
        records = processor.prepare_cut_records({
            "tour_id": "t1",
            "actor_role": "owner",
            "cuts": [
                {"id": "c1", "band_member_id": "m1", "cut_percent": "33.333", "email": "a@example.com"},
                {"band_member_id": "m2", "cut_percent": 66.67, "member_name": "Bob"},
            ],
        })

        assert records[0] == {
            "tour_id": "t1",
            "band_member_id": "m1",
            "cut_percent": 33.33,
            "percent": 33.33,
            "label": "a@example.com",
            "is_active": True,
            "id": "c1",
        }
        assert records[1]["label"] == "Bob"
        assert "id" not in records[1]

    def test_cut_rows_must_be_objects(self, processor):
        with pytest.raises(ValueError, match="cuts must be a list of objects"):
            processor.prepare_cut_records({"tour_id": "t1", "actor_role": "owner", "cuts": [1, 2]})

    def test_cuts_must_total_100(self, processor):
        with pytest.raises(ValueError, match="Cuts must total 100.00%"):
            processor.prepare_cut_records({
                "tour_id": "t1",
                "cuts": [{"band_member_id": "m1", "cut_percent": 90}],
            })

    def test_member_role_rejected(self, processor):
        with pytest.raises(ValueError, match="Only owners/managers"):
            processor.prepare_cut_records({
                "tour_id": "t1",
                "actor_role": "member",
                "cuts": [{"band_member_id": "m1", "cut_percent": 100}],
            })

    def test_tour_required(self, processor):
        with pytest.raises(ValueError, match="tour_id is required"):
            processor.prepare_cut_records({"cuts": []})


class TestPrepareFinanceSettings:

    @pytest.fixture
    def processor(self):
        return SettlementProcessor()

    def test_record_for_upsert(self, processor):
        record = processor.prepare_finance_settings({
            "band_id": "b1",
            "actor_role": "manager",
            "savings_percent": "12.5",
            "manager_percent": 15,
            "agent_percent": None,
        })

        assert record == {
            "band_id": "b1",
            "savings_percent": 12.5,
            "manager_percent": 15.0,
            "agent_percent": 0.0,
        }

    def test_non_numeric_rejected(self, processor):
        with pytest.raises(ValueError, match="Manager % must be numeric"):
            processor.prepare_finance_settings({"band_id": "b1", "manager_percent": "lots"})

    def test_out_of_range_rejected(self, processor):
        with pytest.raises(ValueError, match="Savings Withhold % must be between 0 and 100"):
            processor.prepare_finance_settings({"band_id": "b1", "savings_percent": 101})

    def test_band_required(self, processor):
        with pytest.raises(ValueError, match="band_id is required"):
            processor.prepare_finance_settings({"savings_percent": 10})


class TestConvenienceFunctions:

    def test_process_settlement_from_dict(self, settlement_payload):
        result = process_settlement_from_dict(settlement_payload)
        assert result["calculations"]["distributable_net"]["cents"] == 58500

    def test_process_settlement_from_json(self, settlement_payload):
        result = json.loads(process_settlement_from_json(json.dumps(settlement_payload)))
        assert result["cut_summary"]["is_valid"] is True

    def test_validation_failure_reported(self, settlement_payload):
        settlement_payload["ledger_entries"][0]["entry_type"] = "refund"
        result = json.loads(process_settlement_from_json(json.dumps(settlement_payload)))

        assert result["status"] == "validation_failed"
        assert "entry_type" in result["error"]
