"""Journal milestones unlocked from the trade history."""

from __future__ import annotations

import datetime as dt
from typing import Iterable

from .filters import sort_newest_first
from .schema import Achievement, TradeRecord

HAT_TRICK_WINS = 3
SNIPER_MIN_TRADES = 20
SNIPER_WIN_RATE = 0.6

DEFAULT_ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(id="first_blood", title="First Blood", description="Log your first trade", icon="🩸"),
    Achievement(id="in_the_green", title="In The Green", description="Log your first winning trade", icon="💵"),
    Achievement(id="hat_trick", title="Hat Trick", description="Win 3 trades in a row", icon="🎩"),
    Achievement(
        id="sniper", title="Sniper", description="Achieve > 60% Win Rate (min 20 trades)", icon="🎯"
    ),
    # hold-time milestones; no exit time is journaled so these stay locked
    Achievement(id="iron_hand", title="Iron Hand", description="Hold a winning trade for > 60 mins", icon="✊"),
    Achievement(
        id="diamond_hands", title="Diamond Hands", description="Hold a winning trade for > 4 hours", icon="💎"
    ),
)


def _has_win_run(trades: list[TradeRecord], length: int) -> bool:
    run = 0
    for trade in sort_newest_first(trades):
        run = run + 1 if trade.result == "WIN" else 0
        if run >= length:
            return True
    return False


def earned_achievements(trades: Iterable[TradeRecord]) -> set[str]:
    trades = list(trades)
    if not trades:
        return set()

    earned = {"first_blood"}
    wins = sum(1 for t in trades if t.result == "WIN")
    if wins:
        earned.add("in_the_green")
    if _has_win_run(trades, HAT_TRICK_WINS):
        earned.add("hat_trick")
    if len(trades) >= SNIPER_MIN_TRADES and wins / len(trades) >= SNIPER_WIN_RATE:
        earned.add("sniper")
    return earned


def evaluate_achievements(
    trades: Iterable[TradeRecord],
    achievements: Iterable[Achievement] = DEFAULT_ACHIEVEMENTS,
    now: dt.datetime | None = None,
) -> list[Achievement]:
    """Return achievements with newly earned ones unlocked and stamped with now."""
    earned = earned_achievements(trades)
    stamp = (now or dt.datetime.now(dt.timezone.utc)).isoformat()
    updated = []
    for achievement in achievements:
        if achievement.id in earned and not achievement.unlocked:
            achievement = achievement.model_copy(update={"unlocked": True, "date": stamp})
        updated.append(achievement)
    return updated
