"""Known futures contracts and the journal's default tick economics."""

from __future__ import annotations

DEFAULT_TICK_SIZE = 0.25
DEFAULT_TICK_VALUE = 1.25
DEFAULT_SYMBOL = "MES"

# point_value: currency per 1.0 of price, commission: round turn per contract
FUTURES_SYMBOLS: dict[str, dict[str, float]] = {
    "MES": {"point_value": 5, "tick_size": 0.25, "commission": 1.82},
    "ES": {"point_value": 50, "tick_size": 0.25, "commission": 4.02},
    "MNQ": {"point_value": 2, "tick_size": 0.25, "commission": 1.82},
    "NQ": {"point_value": 20, "tick_size": 0.25, "commission": 4.02},
    "MYM": {"point_value": 0.5, "tick_size": 1.0, "commission": 1.82},
    "YM": {"point_value": 5, "tick_size": 1.0, "commission": 4.02},
    "M2K": {"point_value": 5, "tick_size": 0.1, "commission": 1.82},
    "RTY": {"point_value": 50, "tick_size": 0.1, "commission": 4.02},
    "CL": {"point_value": 1000, "tick_size": 0.01, "commission": 4.02},
    "MCL": {"point_value": 100, "tick_size": 0.01, "commission": 1.82},
    "GC": {"point_value": 100, "tick_size": 0.1, "commission": 4.02},
    "MGC": {"point_value": 10, "tick_size": 0.1, "commission": 1.82},
}


def instrument_defaults(symbol: str | None) -> dict[str, float] | None:
    """Tick value, tick size and commission for a known symbol, else None."""
    if not symbol:
        return None
    config = FUTURES_SYMBOLS.get(symbol.strip().upper())
    if config is None:
        return None
    return {
        "tick_value": round(config["point_value"] * config["tick_size"], 6),
        "tick_size": config["tick_size"],
        "commissions": config["commission"],
    }
