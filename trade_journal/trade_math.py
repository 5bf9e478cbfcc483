"""
Derived-field computation for journal trades.

Every numeric input goes through parse_number, which reads a leading number
the way a form field is parsed and turns anything unreadable into "absent".
Absent prices count as 0; absent or zero tick economics fall back to the
defaults; quantity falls back to 1.
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from typing import Any, Iterable, NamedTuple

from .instruments import DEFAULT_TICK_SIZE, DEFAULT_TICK_VALUE, instrument_defaults
from .schema import Setup, TradeInput, TradeRecord

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class Derived(NamedTuple):
    pnl: float
    r_multiple: float
    result: str
    max_move_points: float
    risk_per_unit: float
    reward_per_unit: float


def parse_number(value: Any) -> float | None:
    """Parse a leading number out of value; None when nothing usable is there."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        numeric = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            if str(value).strip():
                logger.debug("Unparseable numeric input %r coerced to absent", value)
            return None
        numeric = float(match.group(0))
    if not math.isfinite(numeric):
        return None
    return numeric


def _or_default(value: Any, default: float) -> float:
    numeric = parse_number(value)
    return numeric if numeric else default


def compute_derived(
    direction: str,
    entry: Any,
    exit: Any,
    stop_loss: Any,
    quantity: Any = 1,
    tick_value: Any = None,
    tick_size: Any = None,
    commissions: Any = 0,
    mfe_price: Any = None,
    *,
    default_tick_size: float = DEFAULT_TICK_SIZE,
    default_tick_value: float = DEFAULT_TICK_VALUE,
) -> Derived:
    """Compute P&L, R-multiple, result and MFE points from raw trade inputs.

    R-multiple is the raw price reward over the raw price risk, signed by
    P&L. It is not derived from the tick-scaled P&L.
    """
    entry = _or_default(entry, 0.0)
    exit = _or_default(exit, 0.0)
    stop_loss = _or_default(stop_loss, 0.0)
    tick_size = _or_default(tick_size, default_tick_size)
    tick_value = _or_default(tick_value, default_tick_value)
    commissions = _or_default(commissions, 0.0)
    quantity = parse_number(quantity)
    if quantity is None or quantity <= 0:
        quantity = 1.0

    price_diff = exit - entry if direction == "Long" else entry - exit
    pnl = (price_diff / tick_size) * tick_value * quantity - commissions

    risk_per_unit = abs(entry - stop_loss)
    reward_per_unit = abs(price_diff)
    r_multiple = reward_per_unit / risk_per_unit if risk_per_unit > 0 else 0.0
    if pnl < 0:
        r_multiple = -r_multiple

    if pnl > 0:
        result = "WIN"
    elif pnl < 0:
        result = "LOSS"
    else:
        result = "BREAKEVEN"

    max_move_points = 0.0
    mfe = parse_number(mfe_price)
    if mfe:
        move = mfe - entry if direction == "Long" else entry - mfe
        max_move_points = max(0.0, move)

    return Derived(pnl, r_multiple, result, max_move_points, risk_per_unit, reward_per_unit)


def build_trade(
    raw: TradeInput | dict,
    *,
    default_tick_size: float = DEFAULT_TICK_SIZE,
    default_tick_value: float = DEFAULT_TICK_VALUE,
) -> TradeRecord:
    """Create a TradeRecord from a raw payload, computing every derived field."""
    if isinstance(raw, dict):
        raw = TradeInput.model_validate(raw)

    tick_value, tick_size, commissions = raw.tick_value, raw.tick_size, raw.commissions
    known = instrument_defaults(raw.symbol)
    if known:
        if tick_value is None:
            tick_value = known["tick_value"]
        if tick_size is None:
            tick_size = known["tick_size"]
        if commissions is None:
            commissions = known["commissions"]

    quantity = parse_number(raw.quantity)
    if quantity is None or quantity <= 0:
        quantity = 1.0
    tick_size = _or_default(tick_size, default_tick_size)
    tick_value = _or_default(tick_value, default_tick_value)
    commissions = _or_default(commissions, 0.0)
    mfe_price = parse_number(raw.mfe_price) or None

    derived = compute_derived(
        raw.direction,
        raw.entry,
        raw.exit,
        raw.stop_loss,
        quantity=quantity,
        tick_value=tick_value,
        tick_size=tick_size,
        commissions=commissions,
        mfe_price=mfe_price,
    )

    return TradeRecord(
        id=raw.id or uuid.uuid4().hex,
        date=raw.date,
        time=raw.time,
        symbol=raw.symbol.strip().upper(),
        direction=raw.direction,
        entry=_or_default(raw.entry, 0.0),
        exit=_or_default(raw.exit, 0.0),
        stop_loss=_or_default(raw.stop_loss, 0.0),
        take_profit=_or_default(raw.take_profit, 0.0),
        mfe_price=mfe_price,
        quantity=quantity,
        tick_value=tick_value,
        tick_size=tick_size,
        commissions=commissions,
        pnl=derived.pnl,
        r_multiple=derived.r_multiple,
        result=derived.result,
        max_move_points=derived.max_move_points,
        setup_id=raw.setup_id,
        criteria_used=raw.criteria_used,
        images=raw.images,
        notes=raw.notes,
    )


class ChecklistIncompleteError(ValueError):
    """Raised when a trade is logged before its setup checklist is ticked off."""

    def __init__(self, setup_id: str, missing: list[str]):
        self.setup_id = setup_id
        self.missing = missing
        super().__init__(f"Checklist for setup {setup_id!r} is incomplete: {', '.join(missing)}")


def missing_checklist_items(setup: Setup | None, progress: Iterable[str]) -> list[str]:
    """Checklist items of setup not present in progress, in checklist order."""
    if setup is None or not setup.checklist:
        return []
    ticked = set(progress)
    return [item for item in setup.checklist if item not in ticked]


def log_trade(
    raw: TradeInput | dict,
    setups: Iterable[Setup] = (),
    checklist_progress: Iterable[str] = (),
) -> TradeRecord:
    """Create a trade, refusing it while its setup checklist is incomplete.

    A trade with no setup, an orphaned setup id or a setup without a
    checklist is always accepted.
    """
    if isinstance(raw, dict):
        raw = TradeInput.model_validate(raw)

    setup = next((s for s in setups if s.id == raw.setup_id), None)
    missing = missing_checklist_items(setup, checklist_progress)
    if missing:
        raise ChecklistIncompleteError(raw.setup_id, missing)
    return build_trade(raw)


def edit_trade(record: TradeRecord, changes: dict) -> TradeRecord:
    """Apply raw-input changes and recompute all derived fields, keeping the id."""
    data = record.raw_input().model_dump()
    data.update(changes)
    data["id"] = record.id
    return build_trade(data)


def replace_trade(trades: list[TradeRecord], record: TradeRecord) -> list[TradeRecord]:
    """Return a new list with the trade sharing record.id replaced in place."""
    return [record if t.id == record.id else t for t in trades]


def delete_trade(trades: list[TradeRecord], trade_id: str) -> list[TradeRecord]:
    return [t for t in trades if t.id != trade_id]
