"""
Aggregate journal statistics.

calculate_stats is the single reduction behind both the "current" numbers
(the filtered working set) and the per-setup baseline; empty inputs resolve
to zero sentinels rather than NaN.
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from .filters import filter_by_setup, sort_oldest_first
from .schema import AggregateStats, EquityPoint, HourlyBucket, TradeRecord

NO_DOWNSIDE_PROFIT_FACTOR = 999.0

FRAME_COLUMNS = ["id", "date", "time", "setup_id", "direction", "result", "pnl", "r_multiple"]


def trades_to_frame(trades: Iterable[TradeRecord]) -> pd.DataFrame:
    """Flatten trades into a DataFrame with an opened_at timestamp and hour label."""
    rows = [
        {
            "id": t.id,
            "date": t.date,
            "time": t.time,
            "opened_at": t.opened_at,
            "hour": f"{t.time.hour:02d}:00",
            "setup_id": t.setup_id,
            "direction": t.direction,
            "result": t.result,
            "pnl": t.pnl,
            "r_multiple": t.r_multiple,
        }
        for t in trades
    ]
    if not rows:
        return pd.DataFrame(columns=[*FRAME_COLUMNS, "opened_at", "hour"])
    return pd.DataFrame(rows)


def calculate_stats(trades: Iterable[TradeRecord]) -> AggregateStats:
    df = trades_to_frame(trades)
    total = len(df)
    if total == 0:
        return AggregateStats()

    winners = df[df["result"] == "WIN"]
    losers = df[df["result"] == "LOSS"]
    wins, losses = len(winners), len(losers)

    gross_win = float(winners["pnl"].sum())
    gross_loss = abs(float(losers["pnl"].sum()))
    if gross_loss > 0:
        profit_factor = gross_win / gross_loss
    else:
        profit_factor = NO_DOWNSIDE_PROFIT_FACTOR if wins > 0 else 0.0

    return AggregateStats(
        total_trades=total,
        wins=wins,
        losses=losses,
        win_rate=wins / total * 100,
        total_pnl=float(df["pnl"].sum()),
        avg_r=float(df["r_multiple"].mean()),
        avg_win_r=float(winners["r_multiple"].mean()) if wins else 0.0,
        avg_loss_r=float(losers["r_multiple"].abs().mean()) if losses else 0.0,
        profit_factor=profit_factor,
    )


def setup_baseline_stats(trades: Iterable[TradeRecord], setup_id: str) -> AggregateStats | None:
    """Stats over every trade of one setup, ignoring date and criteria filters."""
    if setup_id == "all":
        return None
    return calculate_stats(filter_by_setup(trades, setup_id))


def equity_curve(trades: Iterable[TradeRecord]) -> list[EquityPoint]:
    ordered = sort_oldest_first(trades)
    if not ordered:
        return []
    equity = pd.Series([t.pnl for t in ordered], dtype=float).cumsum()
    return [
        EquityPoint(date=t.date, equity=float(eq), pnl=t.pnl)
        for t, eq in zip(ordered, equity)
    ]


def hourly_buckets(trades: Iterable[TradeRecord]) -> list[HourlyBucket]:
    """P&L and win/loss counts per hour of day; anything but a WIN counts as a loss."""
    df = trades_to_frame(trades)
    if df.empty:
        return []

    df["is_win"] = df["result"] == "WIN"
    hourly = (
        df.groupby("hour")
        .agg(pnl=("pnl", "sum"), wins=("is_win", "sum"), total=("result", "count"))
        .reset_index()
        .sort_values("hour")
    )
    return [
        HourlyBucket(
            hour=row["hour"],
            pnl=float(row["pnl"]),
            wins=int(row["wins"]),
            losses=int(row["total"] - row["wins"]),
            total=int(row["total"]),
        )
        for _, row in hourly.iterrows()
    ]
