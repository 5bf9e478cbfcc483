"""Session, frequency and streak analytics over a filtered working set."""

from __future__ import annotations

import datetime as dt
import math
from typing import Iterable

from .edge import edge_sweep
from .filters import sort_newest_first
from .schema import SessionStats, SetupAnalytics, Streak, TradeFrequency, TradeRecord

# (key, display name, start HHMM, end HHMM), both ends inclusive
SESSIONS: tuple[tuple[str, str, int, int], ...] = (
    ("LON", "London", 300, 1130),
    ("NY", "New York", 830, 1700),
)
RECENT_FORM_SIZE = 5


def _hhmm(t: dt.time) -> int:
    return t.hour * 100 + t.minute


def session_performance(trades: Iterable[TradeRecord]) -> dict[str, SessionStats]:
    """Per-session totals; a trade in the London/New York overlap counts in both."""
    sessions = {key: SessionStats(name=name) for key, name, _, _ in SESSIONS}
    for trade in trades:
        clock = _hhmm(trade.time)
        for key, _, start, end in SESSIONS:
            if start <= clock <= end:
                stats = sessions[key]
                stats.total += 1
                stats.pnl += trade.pnl
                if trade.result == "WIN":
                    stats.wins += 1
    return sessions


def trade_frequency(trades: Iterable[TradeRecord]) -> TradeFrequency:
    trades = list(trades)
    dates = {t.date for t in trades}
    if not dates:
        return TradeFrequency(trading_days=0, total_weeks=1, trades_per_week=0.0)
    span_days = (max(dates) - min(dates)).days
    weeks = max(1, math.ceil(span_days / 7))
    return TradeFrequency(
        trading_days=len(dates),
        total_weeks=weeks,
        trades_per_week=len(trades) / weeks,
    )


def current_streak(trades: Iterable[TradeRecord]) -> Streak:
    """Run length of the newest result; a BREAKEVEN head yields a count of 0."""
    count = 0
    streak_type = None
    for trade in sort_newest_first(trades):
        if streak_type is None:
            streak_type = trade.result
        if trade.result == streak_type and streak_type != "BREAKEVEN":
            count += 1
        else:
            break
    return Streak(count=count, type=streak_type)


def recent_form(trades: Iterable[TradeRecord], size: int = RECENT_FORM_SIZE) -> list[str]:
    return [t.result for t in sort_newest_first(trades)[:size]]


def analyze_setup(trades: Iterable[TradeRecord]) -> SetupAnalytics | None:
    trades = list(trades)
    if not trades:
        return None

    sweep = edge_sweep(trades)
    frequency = trade_frequency(trades)
    return SetupAnalytics(
        sessions=session_performance(trades),
        edge_curve=sweep.curve,
        best_edge=sweep.best_edge,
        trades_per_week=frequency.trades_per_week,
        total_weeks=frequency.total_weeks,
        current_streak=current_streak(trades),
        recent_form=recent_form(trades),
    )
