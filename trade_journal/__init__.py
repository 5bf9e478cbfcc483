"""Trade journal performance analytics."""

from .filters import filter_trades
from .schema import AggregateStats, Setup, TradeInput, TradeRecord
from .setup_analytics import analyze_setup
from .stats import calculate_stats
from .trade_math import build_trade, compute_derived, edit_trade, log_trade

__all__ = [
    "AggregateStats",
    "Setup",
    "TradeInput",
    "TradeRecord",
    "analyze_setup",
    "build_trade",
    "calculate_stats",
    "compute_derived",
    "edit_trade",
    "filter_trades",
    "log_trade",
]
