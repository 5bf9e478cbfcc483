"""
R-target edge optimization.

Replays the working set against fixed take-profit targets: had every trade
been closed once its favorable excursion reached target_r, what win rate and
expectancy would the history have produced? All targets are evaluated at
once by broadcasting the per-trade excursion against the target grid.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .schema import EdgePoint, EdgeSweep, TradeRecord

TARGET_MIN_R = 0.5
TARGET_MAX_R = 10.0
TARGET_STEP_R = 0.5
# excursion below this is scored as a loss even when the trade was not a LOSS
LOSS_EXCURSION_R = 0.2


def target_grid() -> np.ndarray:
    steps = int(round((TARGET_MAX_R - TARGET_MIN_R) / TARGET_STEP_R)) + 1
    return TARGET_MIN_R + TARGET_STEP_R * np.arange(steps)


def favorable_excursion_r(trade: TradeRecord) -> float | None:
    """Favorable move in R; None for zero-risk trades.

    Without a recorded MFE price, the exit stands in for a WIN and the
    entry (no excursion) for anything else.
    """
    risk = abs(trade.entry - trade.stop_loss)
    if risk == 0:
        return None
    if trade.mfe_price:
        mfe = trade.mfe_price
    else:
        mfe = trade.exit if trade.result == "WIN" else trade.entry
    move = mfe - trade.entry if trade.direction == "Long" else trade.entry - mfe
    return max(0.0, move) / risk


def edge_sweep(trades: Iterable[TradeRecord]) -> EdgeSweep:
    excursions: list[float] = []
    is_loss: list[bool] = []
    for trade in trades:
        mfe_r = favorable_excursion_r(trade)
        if mfe_r is None:
            continue
        excursions.append(mfe_r)
        is_loss.append(trade.result == "LOSS")

    if not excursions:
        return EdgeSweep()

    targets = target_grid()
    mfe_r = np.asarray(excursions)[:, None]
    loss_flag = np.asarray(is_loss)[:, None]

    hit = mfe_r >= targets
    lost = ~hit & (loss_flag | (mfe_r < LOSS_EXCURSION_R))

    total = len(excursions)
    win_frac = hit.sum(axis=0) / total
    loss_frac = lost.sum(axis=0) / total
    expectancy = win_frac * targets - loss_frac

    curve = [
        EdgePoint(target_r=float(t), win_rate=float(w * 100), expectancy=float(e))
        for t, w, e in zip(targets, win_frac, expectancy)
    ]
    best = curve[int(np.argmax(expectancy))]
    return EdgeSweep(curve=curve, best_edge=best)
