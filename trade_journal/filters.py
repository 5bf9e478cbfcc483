"""
Working-set selection: setup filter, date range, criteria selectors.

Criteria selectors are "bucket:name" strings. By default a trade matches when
every selected criterion is present in its bucket (contains-all). Isolation
mode, used for per-setup edge analysis, also requires the trade to record
exactly as many criteria as were selected.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, NamedTuple

from .schema import Setup, TradeRecord

UNKNOWN_SETUP = "Unknown"


class CriterionSelector(NamedTuple):
    bucket: str
    name: str


def sort_newest_first(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    return sorted(trades, key=lambda t: t.opened_at, reverse=True)


def sort_oldest_first(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    return sorted(trades, key=lambda t: t.opened_at)


def setup_name(setups: Iterable[Setup], setup_id: str) -> str:
    for setup in setups:
        if setup.id == setup_id:
            return setup.name
    return UNKNOWN_SETUP


def filter_by_setup(trades: Iterable[TradeRecord], setup_id: str = "all") -> list[TradeRecord]:
    if setup_id == "all":
        return list(trades)
    return [t for t in trades if t.setup_id == setup_id]


def _range_start(date_range: str, today: dt.date) -> dt.date | None:
    if date_range == "today":
        return today
    if date_range == "wtd":
        return today - dt.timedelta(days=today.weekday())
    if date_range == "mtd":
        return today.replace(day=1)
    return None


def filter_by_date_range(
    trades: Iterable[TradeRecord],
    date_range: str = "all",
    today: dt.date | None = None,
) -> list[TradeRecord]:
    """Keep trades from today / week-to-date (Monday start) / month-to-date."""
    trades = list(trades)
    if date_range == "all":
        return trades
    today = today or dt.date.today()
    if date_range == "today":
        return [t for t in trades if t.date == today]
    start = _range_start(date_range, today)
    if start is None:
        return trades
    return [t for t in trades if t.date >= start]


def parse_selector(selector: str) -> CriterionSelector:
    bucket, _, name = selector.partition(":")
    return CriterionSelector(bucket.strip().lower(), name)


def _normalize_name(name: str) -> str:
    return name.strip().lower()


def matches_criteria(
    trade: TradeRecord,
    selectors: Iterable[str | CriterionSelector],
    isolation: bool = False,
) -> bool:
    parsed = [s if isinstance(s, CriterionSelector) else parse_selector(s) for s in selectors]
    if isolation and trade.criteria_used.total() != len(parsed):
        return False
    for selector in parsed:
        wanted = _normalize_name(selector.name)
        recorded = trade.criteria_used.get(selector.bucket)
        if not any(_normalize_name(c) == wanted for c in recorded):
            return False
    return True


def filter_by_criteria(
    trades: Iterable[TradeRecord],
    selectors: Iterable[str],
    isolation: bool = False,
) -> list[TradeRecord]:
    parsed = [parse_selector(s) for s in selectors]
    if not parsed:
        return list(trades)
    return [t for t in trades if matches_criteria(t, parsed, isolation=isolation)]


def filter_trades(
    trades: Iterable[TradeRecord],
    setup_id: str = "all",
    date_range: str = "all",
    criteria: Iterable[str] = (),
    isolation: bool = False,
    today: dt.date | None = None,
) -> list[TradeRecord]:
    """Newest-first working set after setup, date-range and criteria filters."""
    filtered = sort_newest_first(trades)
    filtered = filter_by_setup(filtered, setup_id)
    filtered = filter_by_date_range(filtered, date_range, today=today)
    return filter_by_criteria(filtered, criteria, isolation=isolation)
