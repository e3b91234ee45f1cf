"""
Journal performance statistics.

Loads logged trades into a pandas DataFrame and computes the figures a
funded-account trader reviews at the end of a session: win rate, average
R, expectancy, drawdown of the realised equity curve and P&L per day,
ISO week, month and symbol.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable

import pandas as pd

from trade_discipline.funded_account.journal import LoggedTrade
from trade_discipline.funded_account.trade_repository import CSV_FIELDNAMES

NUMERIC_COLUMNS = [
    "entry_price",
    "stop_loss",
    "take_profit1",
    "take_profit2",
    "take_profit3",
    "position_size",
    "risk_amount",
    "risk_reward",
    "pnl",
    "r_multiple",
]


@dataclass
class JournalSummary:
    """Aggregate statistics over a set of logged trades."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    average_r: float = 0.0
    expectancy: float = 0.0
    profit_factor: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    max_drawdown: float = 0.0
    daily_pnl: Dict[str, float] = field(default_factory=dict)
    weekly_pnl: Dict[str, float] = field(default_factory=dict)
    monthly_pnl: Dict[str, float] = field(default_factory=dict)
    pnl_by_symbol: Dict[str, float] = field(default_factory=dict)


def _prepare_frame(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df.sort_values("timestamp").reset_index(drop=True)


def journal_to_frame(trades: Iterable[LoggedTrade]) -> pd.DataFrame:
    """One row per trade, oldest first, with typed timestamp and numeric columns."""
    records = [trade.to_record() for trade in trades]
    if not records:
        return pd.DataFrame(columns=CSV_FIELDNAMES)
    return _prepare_frame(pd.DataFrame.from_records(records, columns=CSV_FIELDNAMES))


def load_journal_csv(csv_path: str) -> pd.DataFrame:
    """Read a CSV journal written by CsvTradeRepository."""
    df = pd.read_csv(csv_path)
    if df.empty:
        return pd.DataFrame(columns=CSV_FIELDNAMES)
    return _prepare_frame(df)


def _period_totals(df: pd.DataFrame, keys: pd.Series) -> Dict[str, float]:
    return {str(k): float(v) for k, v in df.groupby(keys)["pnl"].sum().items()}


def summarize_frame(df: pd.DataFrame) -> JournalSummary:
    """Compute a JournalSummary from a prepared journal DataFrame."""
    if df.empty:
        return JournalSummary()

    pnl = df["pnl"]
    wins = pnl[pnl > 0]
    losses = pnl[pnl < 0]

    total_trades = len(df)
    win_rate = len(wins) / total_trades * 100
    avg_win = wins.mean() if not wins.empty else 0.0
    avg_loss = losses.mean() if not losses.empty else 0.0
    expectancy = (win_rate / 100 * avg_win) + ((100 - win_rate) / 100 * avg_loss)

    gross_loss = abs(losses.sum())
    profit_factor = wins.sum() / gross_loss if gross_loss > 0 else float("inf")

    equity = pnl.cumsum()
    drawdown = equity - equity.cummax().clip(lower=0)
    max_drawdown = float(-drawdown.min()) if drawdown.min() < 0 else 0.0

    timestamps = df["timestamp"]
    iso = timestamps.dt.isocalendar()
    week_keys = iso["year"].astype(str) + "-W" + iso["week"].astype(str).str.zfill(2)

    return JournalSummary(
        total_trades=total_trades,
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=float(win_rate),
        total_pnl=float(pnl.sum()),
        average_r=float(df["r_multiple"].mean()),
        expectancy=float(expectancy),
        profit_factor=float(profit_factor),
        largest_win=float(pnl.max()),
        largest_loss=float(pnl.min()),
        max_drawdown=max_drawdown,
        daily_pnl=_period_totals(df, timestamps.dt.strftime("%Y-%m-%d")),
        weekly_pnl=_period_totals(df, week_keys),
        monthly_pnl=_period_totals(df, timestamps.dt.strftime("%Y-%m")),
        pnl_by_symbol=_period_totals(df, df["symbol"]),
    )


def summarize_journal(trades: Iterable[LoggedTrade]) -> JournalSummary:
    """Compute a JournalSummary from logged trades."""
    return summarize_frame(journal_to_frame(trades))
