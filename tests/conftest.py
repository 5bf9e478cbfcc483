"""Shared fixtures for journal analytics tests."""

from __future__ import annotations

import pytest

from trade_journal.trade_math import build_trade


def _trade(**overrides):
    data = {
        "date": "2024-03-04",
        "time": "09:30",
        "symbol": "TEST",
        "direction": "Long",
        "entry": 100,
        "exit": 105,
        "stop_loss": 98,
        "tick_size": 1,
        "tick_value": 1,
        "quantity": 1,
        "commissions": 0,
    }
    data.update(overrides)
    return build_trade(data)


@pytest.fixture
def make_trade():
    """Factory for TradeRecords with 1:1 tick economics (pnl == price diff)."""
    return _trade


@pytest.fixture
def win():
    """Factory for a +10 WIN (2R)."""
    def _win(**overrides):
        return _trade(**{"entry": 100, "exit": 110, "stop_loss": 95, **overrides})
    return _win


@pytest.fixture
def loss():
    """Factory for a -5 LOSS (-1R)."""
    def _loss(**overrides):
        return _trade(**{"entry": 100, "exit": 95, "stop_loss": 95, **overrides})
    return _loss
