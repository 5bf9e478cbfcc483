"""
Journal loader for trade analytics.

Reads a journal from either a JSON export (browser local-storage dump or an
{entries, setups, criteria} document) or the SQLite journal database, and
returns normalized TradeRecords ready for analysis. All analytics entry
points should load through here.

Usage:
    from trade_journal.journal_loader import load_journal
    journal = load_journal("data/journal.json")
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .normalize import stored_derived, upgrade_criteria_library, upgrade_entry, upgrade_setup
from .schema import CriteriaLibrary, Setup, TradeRecord
from .trade_math import build_trade

logger = logging.getLogger(__name__)


# ── Paths ────────────────────────────────────────────────────────────────────

PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_DIR.parent
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = DATA_DIR / "journal.db"
JSON_PATH = DATA_DIR / "journal.json"

DB_SUFFIXES = (".db", ".sqlite", ".sqlite3")

# local-storage keys used by the browser journal
ENTRIES_KEY = "tradingJournalEntries"
SETUPS_KEY = "tradingJournalSetups"
CRITERIA_KEY = "tradingJournalCriteria"


# ── Defaults ─────────────────────────────────────────────────────────────────

DEFAULT_SETUPS: tuple[Setup, ...] = (
    Setup(
        id="pullback",
        name="Pullback",
        color="blue",
        criteria={"htf": ["HTF EMA20 Price", "HTF Trend Direction"]},
        checklist=["Price at EMA20", "Trend Alignment Verified", "Stop Loss Defined"],
    ),
    Setup(
        id="fakeout",
        name="Fakeout",
        color="purple",
        criteria={"htf": ["HTF VWAP Price"], "ltf": ["LTF Volume Spike"]},
        checklist=["Trapped Traders Identified", "Volume Spike confirmed", "Safe Target Identified"],
    ),
    Setup(
        id="breakout",
        name="Breakout",
        color="emerald",
        criteria={"ltf": ["Key Level Break"], "etf": ["Volume Confirmation"]},
        checklist=["Clean Breakout Level", "Volume Expansion", "Retest Observed (optional)"],
    ),
)

DEFAULT_CRITERIA = CriteriaLibrary(
    htf=["Trend Direction", "EMA 20 Context", "VWAP Context", "Volume Profile"],
    ltf=["Opening Range", "Key Level Break"],
    etf=["CVD Divergence"],
)


class Journal(BaseModel):
    trades: list[TradeRecord] = Field(default_factory=list)
    setups: list[Setup] = Field(default_factory=lambda: list(DEFAULT_SETUPS))
    criteria: CriteriaLibrary = Field(default_factory=lambda: DEFAULT_CRITERIA.model_copy())


# ── Normalization ────────────────────────────────────────────────────────────

def _decode(value: Any) -> Any:
    """Local-storage values are JSON strings; table exports are already decoded."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Skipping undecodable journal value: %.40s", value)
            return None
    return value


def restore_trade(raw: dict) -> TradeRecord:
    """Rebuild a stored entry, keeping its saved pnl / R / result when the
    row has no tick economics to recompute them from."""
    trade = build_trade(upgrade_entry(raw))
    stored = stored_derived(raw)
    if stored:
        trade = trade.model_copy(update=stored)
    return trade


def build_trades(raw_entries: list[dict]) -> list[TradeRecord]:
    """Upgrade stored entries into TradeRecords; bad rows are skipped."""
    trades = []
    for raw in raw_entries or []:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object journal entry: %.40r", raw)
            continue
        try:
            trades.append(restore_trade(raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed journal entry %s: %s", raw.get("id", "?"), exc.errors()[0]["msg"])
    return trades


def build_journal(entries: Any, setups: Any = None, criteria: Any = None) -> Journal:
    entries, setups, criteria = _decode(entries), _decode(setups), _decode(criteria)
    journal = Journal(trades=build_trades(entries or []))
    if setups:
        journal.setups = [upgrade_setup(s) for s in setups]
    if criteria:
        journal.criteria = upgrade_criteria_library(criteria)
    logger.info("Loaded %d trades, %d setups", len(journal.trades), len(journal.setups))
    return journal


# ── JSON export ──────────────────────────────────────────────────────────────

def load_journal_json(path: Path | str = JSON_PATH) -> Journal:
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, list):
        return build_journal(payload)
    if ENTRIES_KEY in payload:
        return build_journal(payload.get(ENTRIES_KEY), payload.get(SETUPS_KEY), payload.get(CRITERIA_KEY))
    return build_journal(payload.get("entries"), payload.get("setups"), payload.get("criteria"))


# ── SQLite ───────────────────────────────────────────────────────────────────

def _connect(db_path: Path) -> sqlite3.Connection:
    """Open a read-only connection to the journal SQLite DB."""
    if not db_path.exists():
        raise FileNotFoundError(f"Journal database not found at {db_path}.")
    conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def _fetch_rows(conn: sqlite3.Connection, query: str) -> list[dict]:
    try:
        return [dict(row) for row in conn.execute(query).fetchall()]
    except sqlite3.OperationalError as exc:
        logger.warning("Failed to query journal table: %s", exc)
        return []


def load_journal_db(path: Path | str = DB_PATH) -> Journal:
    conn = _connect(Path(path))
    try:
        entries = _fetch_rows(conn, "SELECT * FROM trade_journal ORDER BY entry_date DESC, entry_time DESC")
        setups = _fetch_rows(conn, "SELECT * FROM trade_setups")
        settings = _fetch_rows(conn, "SELECT criteria_library FROM user_settings LIMIT 1")
    finally:
        conn.close()

    criteria = settings[0]["criteria_library"] if settings else None
    return build_journal(entries, setups, criteria)


def load_journal(path: Path | str) -> Journal:
    """Load a journal, choosing the reader by file suffix."""
    path = Path(path)
    if path.suffix.lower() in DB_SUFFIXES:
        return load_journal_db(path)
    return load_journal_json(path)
