"""
Ingestion-boundary upgrades for stored journal payloads.

Older journal exports keep criteria and images as flat lists, may lack a
direction, and record the favorable excursion as points ("maxMove") instead
of a price. Table rows use snake_case column names with JSON-encoded
columns. Everything here maps those shapes onto TradeInput / Setup fields so
the analytics never see a legacy shape.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .schema import BUCKETS, CriteriaLibrary, Setup, TradeRecord
from .trade_math import parse_number

logger = logging.getLogger(__name__)

# TradeInput field -> accepted source keys, first match wins
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "date": ("date", "entry_date"),
    "time": ("time", "entry_time"),
    "symbol": ("symbol",),
    "direction": ("direction",),
    "entry": ("entry", "entry_price"),
    "exit": ("exit", "exit_price"),
    "stop_loss": ("stop_loss", "stopLoss"),
    "take_profit": ("take_profit", "takeProfit"),
    "mfe_price": ("mfe_price", "mfePrice"),
    "quantity": ("quantity",),
    "tick_value": ("tick_value", "tickValue"),
    "tick_size": ("tick_size", "tickSize"),
    "commissions": ("commissions", "commission"),
    "setup_id": ("setup_id", "setupId"),
    "criteria_used": ("criteria_used", "criteriaUsed"),
    "images": ("images",),
    "notes": ("notes",),
}


def _pick(raw: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _maybe_json(value: Any) -> Any:
    if isinstance(value, str) and value.strip()[:1] in ("[", "{"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def upgrade_criteria(value: Any) -> dict[str, list[str]]:
    """Flat criteria lists become the higher-timeframe bucket."""
    value = _maybe_json(value)
    if isinstance(value, list):
        return {"htf": [str(v) for v in value], "ltf": [], "etf": []}
    if isinstance(value, dict):
        return {b: [str(v) for v in (value.get(b) or [])] for b in BUCKETS}
    return {b: [] for b in BUCKETS}


def upgrade_images(value: Any) -> dict[str, str | None]:
    """Image lists map by position onto htf/ltf/etf; a lone image goes to htf."""
    value = _maybe_json(value)
    if isinstance(value, list):
        padded = list(value[:3]) + [None] * (3 - len(value[:3]))
        return {b: (img or None) for b, img in zip(BUCKETS, padded)}
    if isinstance(value, dict):
        return {b: (value.get(b) or None) for b in BUCKETS}
    if isinstance(value, str) and value:
        return {"htf": value, "ltf": None, "etf": None}
    return {b: None for b in BUCKETS}


def infer_direction(direction: Any, entry: Any, stop_loss: Any) -> str:
    """Keep a valid direction; otherwise a stop below entry means Long."""
    if isinstance(direction, str) and direction.strip().lower() in ("long", "short"):
        return direction.strip().capitalize()
    entry_price = parse_number(entry)
    stop_price = parse_number(stop_loss)
    if entry_price and stop_price:
        return "Long" if stop_price < entry_price else "Short"
    return "Long"


def _normalize_time(value: Any) -> str:
    if not value:
        return "00:00"
    text = str(value).strip()
    parts = text.split(":")
    if len(parts) >= 2:
        return f"{parts[0].zfill(2)}:{parts[1][:2].zfill(2)}"
    return "00:00"


def _normalize_date(value: Any) -> Any:
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


def upgrade_entry(raw: dict) -> dict:
    """Map a stored entry (local-storage or table-row shape) onto TradeInput fields."""
    data = {field: _pick(raw, keys) for field, keys in FIELD_ALIASES.items()}

    data["date"] = _normalize_date(data["date"])
    data["time"] = _normalize_time(data["time"])
    data["direction"] = infer_direction(data["direction"], data["entry"], data["stop_loss"])
    data["criteria_used"] = upgrade_criteria(data["criteria_used"])
    data["images"] = upgrade_images(data["images"])
    for field in ("id", "symbol", "setup_id", "notes"):
        data[field] = "" if data[field] is None else str(data[field])
    if not data["id"]:
        data["id"] = None

    if not parse_number(data["mfe_price"]) and "maxMove" in raw:
        points = parse_number(raw["maxMove"])
        entry = parse_number(data["entry"]) or 0.0
        if points:
            data["mfe_price"] = entry + points if data["direction"] == "Long" else entry - points
            logger.debug("Upgraded legacy maxMove=%s to mfe_price=%s", points, data["mfe_price"])

    return data


# columns whose presence means the row carries its own tick economics
TICK_ECONOMICS_FIELDS = ("tick_value", "tick_size", "commissions")


def stored_derived(raw: dict) -> dict | None:
    """Saved pnl / r_multiple / result of a row that lacks tick economics.

    Returns None when the row has tick or commission columns, or no usable
    saved pnl. The result always follows the sign of the saved pnl.
    """
    if any(_pick(raw, FIELD_ALIASES[field]) is not None for field in TICK_ECONOMICS_FIELDS):
        return None
    pnl = parse_number(_pick(raw, ("pnl",)))
    if pnl is None:
        return None

    stored = {"pnl": pnl, "result": "WIN" if pnl > 0 else "LOSS" if pnl < 0 else "BREAKEVEN"}
    r_multiple = parse_number(_pick(raw, ("r_multiple", "rMultiple")))
    if r_multiple is not None:
        stored["r_multiple"] = r_multiple
    return stored


def upgrade_setup(raw: dict) -> Setup:
    return Setup(
        id=str(raw.get("id", "")),
        name=str(raw.get("name") or "Unnamed"),
        color=str(raw.get("color") or "blue"),
        criteria=upgrade_criteria(raw.get("criteria")),
        checklist=[str(item) for item in (_maybe_json(raw.get("checklist")) or [])],
    )


def upgrade_criteria_library(raw: Any) -> CriteriaLibrary:
    return CriteriaLibrary(**upgrade_criteria(raw))


def trade_to_row(record: TradeRecord) -> dict:
    """Render a trade in the snake_case table-row shape."""
    return {
        "id": record.id,
        "entry_date": record.date.isoformat(),
        "entry_time": record.time.strftime("%H:%M"),
        "symbol": record.symbol,
        "direction": record.direction,
        "result": record.result,
        "pnl": record.pnl,
        "r_multiple": record.r_multiple,
        "entry_price": record.entry,
        "exit_price": record.exit,
        "stop_loss": record.stop_loss,
        "take_profit": record.take_profit,
        "mfe_price": record.mfe_price,
        "quantity": record.quantity,
        "tick_value": record.tick_value,
        "tick_size": record.tick_size,
        "commissions": record.commissions,
        "setup_id": record.setup_id or None,
        "criteria_used": json.dumps(record.criteria_used.model_dump()),
        "images": json.dumps(record.images.model_dump()),
        "notes": record.notes,
    }
