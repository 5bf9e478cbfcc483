"""
Pydantic models for journal trades, setups and computed analytics.

Raw form payloads arrive as TradeInput (any field may be blank or garbage);
TradeRecord is the frozen, fully derived trade that every analytics function
consumes.
"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Direction = Literal["Long", "Short"]
Result = Literal["WIN", "LOSS", "BREAKEVEN"]
Bucket = Literal["htf", "ltf", "etf"]
DateRange = Literal["all", "today", "wtd", "mtd"]

BUCKETS: tuple[str, ...] = ("htf", "ltf", "etf")


class CriteriaBuckets(BaseModel):
    model_config = ConfigDict(frozen=True)

    htf: list[str] = Field(default_factory=list)
    ltf: list[str] = Field(default_factory=list)
    etf: list[str] = Field(default_factory=list)

    def get(self, bucket: str) -> list[str]:
        if bucket not in BUCKETS:
            return []
        return getattr(self, bucket)

    def total(self) -> int:
        return len(self.htf) + len(self.ltf) + len(self.etf)


class ImageRefs(BaseModel):
    model_config = ConfigDict(frozen=True)

    htf: Optional[str] = None
    ltf: Optional[str] = None
    etf: Optional[str] = None


class TradeInput(BaseModel):
    """Raw trade payload as typed into the journal form."""

    id: Optional[str] = None
    date: dt.date
    time: dt.time = dt.time(0, 0)
    symbol: str = ""
    direction: Direction = "Long"
    entry: Optional[float | str] = None
    exit: Optional[float | str] = None
    stop_loss: Optional[float | str] = None
    take_profit: Optional[float | str] = None
    mfe_price: Optional[float | str] = None
    quantity: Optional[float | str] = None
    tick_value: Optional[float | str] = None
    tick_size: Optional[float | str] = None
    commissions: Optional[float | str] = None
    setup_id: str = ""
    criteria_used: CriteriaBuckets = Field(default_factory=CriteriaBuckets)
    images: ImageRefs = Field(default_factory=ImageRefs)
    notes: str = ""


class TradeRecord(BaseModel):
    """A logged trade with its derived P&L, R-multiple and result."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: dt.date
    time: dt.time
    symbol: str
    direction: Direction
    entry: float
    exit: float
    stop_loss: float
    take_profit: float
    mfe_price: Optional[float]
    quantity: float
    tick_value: float
    tick_size: float
    commissions: float
    pnl: float
    r_multiple: float
    result: Result
    max_move_points: float
    setup_id: str
    criteria_used: CriteriaBuckets
    images: ImageRefs
    notes: str

    @property
    def opened_at(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.time)

    def raw_input(self) -> TradeInput:
        """Return the raw inputs this record was derived from."""
        return TradeInput(**self.model_dump(exclude={"pnl", "r_multiple", "result", "max_move_points"}))


class Setup(BaseModel):
    id: str
    name: str
    color: str = "blue"
    criteria: CriteriaBuckets = Field(default_factory=CriteriaBuckets)
    checklist: list[str] = Field(default_factory=list)


class CriteriaLibrary(BaseModel):
    htf: list[str] = Field(default_factory=list)
    ltf: list[str] = Field(default_factory=list)
    etf: list[str] = Field(default_factory=list)


class Achievement(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    unlocked: bool = False
    date: Optional[str] = None


# ── Computed results ─────────────────────────────────────────────────────────

class AggregateStats(BaseModel):
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    avg_r: float = 0.0
    avg_win_r: float = 0.0
    avg_loss_r: float = 0.0
    profit_factor: float = 0.0


class EquityPoint(BaseModel):
    date: dt.date
    equity: float
    pnl: float


class HourlyBucket(BaseModel):
    hour: str
    pnl: float
    wins: int
    losses: int
    total: int


class SessionStats(BaseModel):
    name: str
    pnl: float = 0.0
    total: int = 0
    wins: int = 0


class EdgePoint(BaseModel):
    target_r: float
    win_rate: float
    expectancy: float


class EdgeSweep(BaseModel):
    curve: list[EdgePoint] = Field(default_factory=list)
    best_edge: Optional[EdgePoint] = None


class TradeFrequency(BaseModel):
    trading_days: int
    total_weeks: int
    trades_per_week: float


class Streak(BaseModel):
    count: int = 0
    type: Optional[Result] = None


class SetupAnalytics(BaseModel):
    sessions: dict[str, SessionStats]
    edge_curve: list[EdgePoint]
    best_edge: Optional[EdgePoint]
    trades_per_week: float
    total_weeks: int
    current_streak: Streak
    recent_form: list[Result]
