"""Unit tests for derived-field computation and trade lifecycle helpers."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from trade_journal.schema import Setup
from trade_journal.trade_math import (
    ChecklistIncompleteError,
    build_trade,
    compute_derived,
    delete_trade,
    edit_trade,
    log_trade,
    missing_checklist_items,
    parse_number,
    replace_trade,
)


class TestParseNumber:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (12, 12.0),
            ("12.5", 12.5),
            (" -3.5", -3.5),
            ("12abc", 12.0),
            (".5", 0.5),
            ("1e2", 100.0),
        ],
    )
    def test_reads_leading_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "-", float("nan"), float("inf"), True])
    def test_unusable_input_is_absent(self, value):
        assert parse_number(value) is None


class TestComputeDerived:
    def test_long_winner(self):
        """entry=100, exit=105, stop=98 -> pnl 5, risk 2, reward 5, 2.5R WIN."""
        d = compute_derived("Long", 100, 105, 98, quantity=1, tick_value=1, tick_size=1, commissions=0)
        assert d.pnl == 5
        assert d.risk_per_unit == 2
        assert d.reward_per_unit == 5
        assert d.r_multiple == 2.5
        assert d.result == "WIN"

    def test_short_loser(self):
        """Short 100 -> 103 with stop 98: risk is still |100-98| = 2."""
        d = compute_derived("Short", 100, 103, 98, quantity=1, tick_value=1, tick_size=1, commissions=0)
        assert d.pnl == -3
        assert d.risk_per_unit == 2
        assert d.r_multiple == -1.5
        assert d.result == "LOSS"

    def test_breakeven(self):
        d = compute_derived("Long", 100, 100, 98, tick_value=1, tick_size=1)
        assert d.pnl == 0
        assert d.r_multiple == 0
        assert d.result == "BREAKEVEN"

    def test_commission_turns_flat_trade_into_loss(self):
        d = compute_derived("Long", 100, 100, 98, tick_value=1, tick_size=1, commissions=2)
        assert d.pnl == -2
        assert d.result == "LOSS"

    def test_tick_scaling_and_quantity(self):
        """MES: 2 points = 8 ticks * 1.25 * 3 contracts - 1.82."""
        d = compute_derived("Long", 5000, 5002, 4998, quantity=3, tick_value=1.25, tick_size=0.25, commissions=1.82)
        assert d.pnl == pytest.approx(8 * 1.25 * 3 - 1.82)
        assert d.r_multiple == 1.0

    def test_zero_tick_size_uses_default(self):
        d = compute_derived("Long", 100, 101, 99, tick_value=1.25, tick_size=0)
        assert d.pnl == pytest.approx(5.0)

    def test_custom_default_tick_size(self):
        d = compute_derived("Long", 100, 101, 99, tick_value=1, tick_size=None, default_tick_size=0.5)
        assert d.pnl == pytest.approx(2.0)

    @pytest.mark.parametrize("quantity", [None, 0, -2, "", "abc"])
    def test_quantity_defaults_to_one(self, quantity):
        d = compute_derived("Long", 100, 101, 99, quantity=quantity, tick_value=1, tick_size=1)
        assert d.pnl == 1

    def test_garbage_stop_loss_is_zero(self):
        d = compute_derived("Long", 100, 101, "oops", tick_value=1, tick_size=1)
        assert d.risk_per_unit == 100
        assert d.r_multiple == pytest.approx(0.01)

    def test_zero_risk_gives_zero_r(self):
        d = compute_derived("Long", 100, 110, 100, tick_value=1, tick_size=1)
        assert d.pnl == 10
        assert d.r_multiple == 0

    def test_mfe_points_long(self):
        d = compute_derived("Long", 100, 105, 98, tick_value=1, tick_size=1, mfe_price=108)
        assert d.max_move_points == 8

    def test_mfe_points_short(self):
        d = compute_derived("Short", 100, 97, 102, tick_value=1, tick_size=1, mfe_price=96)
        assert d.max_move_points == 4

    def test_adverse_mfe_is_clamped(self):
        d = compute_derived("Long", 100, 99, 98, tick_value=1, tick_size=1, mfe_price=95)
        assert d.max_move_points == 0

    def test_missing_mfe_gives_zero_points(self):
        d = compute_derived("Long", 100, 105, 98, tick_value=1, tick_size=1)
        assert d.max_move_points == 0

    def test_recomputation_is_identical(self):
        args = ("Short", "4012.25", "4003.5", "4016", 2, 12.5, 0.25, 4.02, "4001")
        assert compute_derived(*args) == compute_derived(*args)

    @pytest.mark.parametrize("direction", ["Long", "Short"])
    @pytest.mark.parametrize("exit_price", [90, 97.5, 99.9, 100.1, 104, 130])
    def test_r_sign_matches_pnl_sign(self, direction, exit_price):
        d = compute_derived(direction, 100, exit_price, 98, tick_value=1, tick_size=1)
        assert math.copysign(1, d.pnl) == math.copysign(1, d.r_multiple)
        assert (d.result == "WIN") == (d.pnl > 0)
        assert (d.result == "LOSS") == (d.pnl < 0)


class TestBuildTrade:
    def test_assigns_id(self, make_trade):
        trade = make_trade()
        assert trade.id
        assert make_trade().id != trade.id

    def test_keeps_supplied_id(self, make_trade):
        assert make_trade(id="abc").id == "abc"

    def test_derived_fields(self, make_trade):
        trade = make_trade()
        assert trade.pnl == 5
        assert trade.r_multiple == 2.5
        assert trade.result == "WIN"

    def test_string_inputs(self):
        trade = build_trade(
            {
                "date": "2024-03-04",
                "time": "10:15",
                "direction": "Short",
                "entry": "100",
                "exit": "103",
                "stop_loss": "98",
                "tick_size": "1",
                "tick_value": "1",
                "quantity": "1",
                "commissions": "",
            }
        )
        assert trade.pnl == -3
        assert trade.r_multiple == -1.5
        assert trade.commissions == 0

    def test_known_instrument_fills_tick_economics(self):
        trade = build_trade({"date": "2024-03-04", "symbol": "es", "entry": 4000, "exit": 4001, "stop_loss": 3998})
        assert trade.symbol == "ES"
        assert trade.tick_size == 0.25
        assert trade.tick_value == 12.5
        assert trade.commissions == 4.02
        assert trade.pnl == pytest.approx(4 * 12.5 - 4.02)

    def test_explicit_values_override_instrument(self):
        trade = build_trade(
            {"date": "2024-03-04", "symbol": "ES", "entry": 4000, "exit": 4001, "stop_loss": 3998,
             "tick_size": 1, "tick_value": 1, "commissions": 0}
        )
        assert trade.pnl == 1

    def test_unknown_instrument_uses_defaults(self):
        trade = build_trade({"date": "2024-03-04", "symbol": "XYZ", "entry": 100, "exit": 101, "stop_loss": 99})
        assert trade.tick_size == 0.25
        assert trade.tick_value == 1.25
        assert trade.pnl == pytest.approx(5.0)

    def test_zero_mfe_is_absent(self, make_trade):
        assert make_trade(mfe_price=0).mfe_price is None

    def test_record_is_frozen(self, make_trade):
        trade = make_trade()
        with pytest.raises(ValidationError):
            trade.pnl = 1000

    def test_rebuild_from_raw_inputs_is_identical(self, make_trade):
        trade = make_trade(direction="Short", entry=50.5, exit=48.25, stop_loss=51, mfe_price=47, quantity=2)
        assert build_trade(trade.raw_input()) == trade


class TestLifecycle:
    def test_edit_recomputes_and_keeps_id(self, make_trade):
        trade = make_trade()
        edited = edit_trade(trade, {"exit": 95})
        assert edited.id == trade.id
        assert edited.pnl == -5
        assert edited.result == "LOSS"
        assert edited.r_multiple == -2.5

    def test_edit_cannot_set_derived_fields(self, make_trade):
        trade = make_trade()
        edited = edit_trade(trade, {"notes": "late entry"})
        assert edited.notes == "late entry"
        assert edited.pnl == trade.pnl

    def test_replace_keeps_position(self, make_trade):
        trades = [make_trade(id="a"), make_trade(id="b"), make_trade(id="c")]
        edited = edit_trade(trades[1], {"exit": 90})
        replaced = replace_trade(trades, edited)
        assert [t.id for t in replaced] == ["a", "b", "c"]
        assert replaced[1].result == "LOSS"

    def test_delete_by_id(self, make_trade):
        trades = [make_trade(id="a"), make_trade(id="b")]
        assert [t.id for t in delete_trade(trades, "a")] == ["b"]
        assert len(delete_trade(trades, "missing")) == 2


# ── Checklist gate ───────────────────────────────────────────────────────────

@pytest.fixture
def pullback():
    return Setup(id="pullback", name="Pullback", checklist=["Price at EMA20", "Stop Loss Defined"])


@pytest.fixture
def payload():
    return {
        "date": "2024-03-04",
        "entry": 100,
        "exit": 105,
        "stop_loss": 98,
        "tick_size": 1,
        "tick_value": 1,
        "commissions": 0,
        "setup_id": "pullback",
    }


class TestMissingChecklistItems:
    def test_complete(self, pullback):
        assert missing_checklist_items(pullback, ["Stop Loss Defined", "Price at EMA20"]) == []

    def test_incomplete_keeps_checklist_order(self, pullback):
        assert missing_checklist_items(pullback, ["Extra item"]) == ["Price at EMA20", "Stop Loss Defined"]

    def test_items_match_exactly(self, pullback):
        assert missing_checklist_items(pullback, ["price at ema20", "Stop Loss Defined"]) == ["Price at EMA20"]

    def test_no_setup(self):
        assert missing_checklist_items(None, []) == []

    def test_empty_checklist(self):
        assert missing_checklist_items(Setup(id="s", name="S"), []) == []


class TestLogTrade:
    def test_complete_checklist_logs_trade(self, pullback, payload):
        trade = log_trade(payload, [pullback], ["Price at EMA20", "Stop Loss Defined"])
        assert trade.setup_id == "pullback"
        assert trade.pnl == 5

    def test_incomplete_checklist_refused(self, pullback, payload):
        with pytest.raises(ChecklistIncompleteError) as exc_info:
            log_trade(payload, [pullback], ["Price at EMA20"])
        assert exc_info.value.setup_id == "pullback"
        assert exc_info.value.missing == ["Stop Loss Defined"]

    def test_orphaned_setup_id_passes(self, pullback, payload):
        trade = log_trade({**payload, "setup_id": "deleted"}, [pullback])
        assert trade.setup_id == "deleted"

    def test_no_setup_passes(self, pullback, payload):
        assert log_trade({**payload, "setup_id": ""}, [pullback]).result == "WIN"
