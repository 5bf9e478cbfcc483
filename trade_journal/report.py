"""
Trade Journal Report

Loads a journal export or database, applies the setup / date-range /
criteria filters and computes: current and baseline stats, equity curve,
hourly breakdown, setup analytics (sessions, R-target edge, frequency,
streak, recent form) and achievements.

Usage:
    python -m trade_journal.report --input data/journal.json [--setup pullback]
        [--range wtd] [--criteria htf:Trend\\ Direction ...] [--isolate]
        [--output output/journal_report.json]
"""

from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
from pathlib import Path

from .achievements import evaluate_achievements
from .filters import filter_trades, setup_name
from .journal_loader import JSON_PATH, PROJECT_ROOT, Journal, load_journal
from .setup_analytics import analyze_setup
from .stats import calculate_stats, equity_curve, hourly_buckets, setup_baseline_stats

logger = logging.getLogger(__name__)

OUTPUT_DIR = PROJECT_ROOT / "output"
REPORT_PATH = OUTPUT_DIR / "journal_report.json"
DATE_RANGES = ("all", "today", "wtd", "mtd")


def run_report(
    journal: Journal,
    setup_id: str = "all",
    date_range: str = "all",
    criteria: list[str] | None = None,
    isolation: bool = False,
    today: dt.date | None = None,
) -> dict:
    """Run the full analytics suite over one filter selection."""
    criteria = criteria or []
    filtered = filter_trades(
        journal.trades,
        setup_id=setup_id,
        date_range=date_range,
        criteria=criteria,
        isolation=isolation,
        today=today,
    )
    logger.debug("Filtered %d of %d trades", len(filtered), len(journal.trades))
    baseline = setup_baseline_stats(journal.trades, setup_id)
    analytics = analyze_setup(filtered)

    return {
        "metadata": {
            "generated_at": dt.datetime.now(dt.timezone.utc).isoformat(),
            "setup_id": setup_id,
            "setup_name": "All setups" if setup_id == "all" else setup_name(journal.setups, setup_id),
            "date_range": date_range,
            "criteria": criteria,
            "isolation": isolation,
            "total_trades": len(journal.trades),
            "filtered_trades": len(filtered),
        },
        "stats": calculate_stats(filtered).model_dump(),
        "baseline": baseline.model_dump() if baseline else None,
        "equity_curve": [p.model_dump(mode="json") for p in equity_curve(filtered)],
        "by_hour": [b.model_dump() for b in hourly_buckets(filtered)],
        "setup_analytics": analytics.model_dump(mode="json") if analytics else None,
        "achievements": [a.model_dump() for a in evaluate_achievements(journal.trades)],
    }


def print_summary(report: dict) -> None:
    meta = report["metadata"]
    stats = report["stats"]
    print(f"\n{'='*60}")
    print(f"  JOURNAL REPORT — {meta['setup_name']} ({meta['date_range']})")
    print(f"{'='*60}")
    print(f"  Trades:        {stats['total_trades']:,} of {meta['total_trades']:,}")
    print(f"  Win Rate:      {stats['win_rate']:.1f}%  ({stats['wins']}W / {stats['losses']}L)")
    print(f"  Total P&L:     ${stats['total_pnl']:,.2f}")
    print(f"  Profit Factor: {stats['profit_factor']:.2f}")
    print(f"  Avg R:         {stats['avg_r']:+.2f}R  (win {stats['avg_win_r']:.2f}R / loss {stats['avg_loss_r']:.2f}R)")

    baseline = report.get("baseline")
    if baseline:
        print(f"\n  Setup baseline: {baseline['win_rate']:.1f}% WR, ${baseline['total_pnl']:,.2f} "
              f"({baseline['total_trades']} trades)")

    analytics = report.get("setup_analytics")
    if analytics:
        print("\n  Sessions:")
        for session in analytics["sessions"].values():
            print(f"    {session['name']:9s}: {session['total']} trades, {session['wins']} wins, "
                  f"${session['pnl']:,.2f}")
        best = analytics.get("best_edge")
        if best:
            print(f"\n  Best edge: {best['target_r']:.1f}R target, {best['win_rate']:.1f}% WR, "
                  f"expectancy {best['expectancy']:+.2f}R")
        streak = analytics["current_streak"]
        print(f"  Frequency: {analytics['trades_per_week']:.1f} trades/week over {analytics['total_weeks']} weeks")
        print(f"  Streak:    {streak['count']} x {streak['type']}")
        print(f"  Form:      {' '.join(analytics['recent_form'])}")

    unlocked = [a["title"] for a in report["achievements"] if a["unlocked"]]
    if unlocked:
        print(f"\n  Achievements: {', '.join(unlocked)}")
    print(f"{'='*60}")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trade journal analytics report")
    parser.add_argument("--input", type=str, default=str(JSON_PATH), help="Journal JSON export or SQLite DB")
    parser.add_argument("--setup", type=str, default="all", help="Setup id (default: all)")
    parser.add_argument("--range", dest="date_range", choices=DATE_RANGES, default="all", help="Date range")
    parser.add_argument("--criteria", nargs="*", default=[], help="Criteria selectors as bucket:name")
    parser.add_argument("--isolate", action="store_true", help="Exact-set criteria matching")
    parser.add_argument("--output", type=str, default=None, help="Output JSON path")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Journal not found: {input_path}")
        return 1

    journal = load_journal(input_path)
    report = run_report(
        journal,
        setup_id=args.setup,
        date_range=args.date_range,
        criteria=args.criteria,
        isolation=args.isolate,
    )
    print_summary(report)

    output_path = Path(args.output) if args.output else REPORT_PATH
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, default=str)
    print(f"\nFull report saved to: {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
