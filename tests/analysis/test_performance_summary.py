"""
Unit tests for journal performance statistics.
"""

from datetime import datetime, timezone

import pandas as pd
import pytest

from trade_discipline.analysis.performance_summary import (
    JournalSummary,
    journal_to_frame,
    load_journal_csv,
    summarize_frame,
    summarize_journal,
)
from trade_discipline.funded_account.journal import LoggedTrade, TradeOutcome
from trade_discipline.funded_account.trade_repository import CsvTradeRepository
from trade_discipline.trades.trade import TradeSide


def logged(when, symbol, pnl, r_multiple, outcome):
    return LoggedTrade(
        symbol=symbol,
        side=TradeSide.LONG,
        entry_price=100.0,
        stop_loss=95.0,
        take_profit1=105.0,
        take_profit2=110.0,
        take_profit3=120.0,
        outcome=outcome,
        position_size=100.0,
        risk_amount=500.0,
        risk_reward=1.0,
        pnl=pnl,
        r_multiple=r_multiple,
        timestamp=when,
    )


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def trades():
    # listed out of order on purpose; the frame sorts by timestamp
    return [
        logged(utc(2024, 1, 2, 9), "BTCUSDT", 950.0, 1.9, TradeOutcome.TP3),
        logged(utc(2024, 1, 1, 10), "BTCUSDT", 250.0, 0.5, TradeOutcome.TP1),
        logged(utc(2024, 1, 1, 14), "ETHUSDT", -500.0, -1.0, TradeOutcome.SL),
        logged(utc(2024, 1, 8, 11), "BTCUSDT", -500.0, -1.0, TradeOutcome.SL),
        logged(utc(2024, 2, 1, 16), "ETHUSDT", 550.0, 1.1, TradeOutcome.TP2),
    ]


class TestJournalToFrame:
    def test_sorted_and_typed(self, trades):
        df = journal_to_frame(trades)

        assert len(df) == 5
        assert df["timestamp"].is_monotonic_increasing
        assert pd.api.types.is_datetime64_any_dtype(df["timestamp"])
        assert pd.api.types.is_float_dtype(df["pnl"])
        assert df.iloc[0]["pnl"] == 250.0

    def test_empty(self):
        df = journal_to_frame([])
        assert df.empty
        assert "pnl" in df.columns


class TestSummarizeJournal:
    """Test cases for summarize_journal."""

    def test_headline_statistics(self, trades):
        summary = summarize_journal(trades)

        assert summary.total_trades == 5
        assert summary.winning_trades == 3
        assert summary.losing_trades == 2
        assert summary.win_rate == pytest.approx(60.0)
        assert summary.total_pnl == pytest.approx(750.0)
        assert summary.average_r == pytest.approx(0.3)
        assert summary.expectancy == pytest.approx(150.0)
        assert summary.profit_factor == pytest.approx(1.75)
        assert summary.largest_win == 950.0
        assert summary.largest_loss == -500.0

    def test_max_drawdown(self, trades):
        """Equity runs 250, -250, 700, 200, 750 for two 500 drawdowns."""
        assert summarize_journal(trades).max_drawdown == pytest.approx(500.0)

    def test_drawdown_counts_opening_loss(self):
        summary = summarize_journal(
            [logged(utc(2024, 3, 1, 9), "BTCUSDT", -500.0, -1.0, TradeOutcome.SL)]
        )
        assert summary.max_drawdown == pytest.approx(500.0)

    def test_period_breakdowns(self, trades):
        summary = summarize_journal(trades)

        assert summary.daily_pnl == pytest.approx(
            {"2024-01-01": -250.0, "2024-01-02": 950.0, "2024-01-08": -500.0, "2024-02-01": 550.0}
        )
        assert summary.weekly_pnl == pytest.approx(
            {"2024-W01": 700.0, "2024-W02": -500.0, "2024-W05": 550.0}
        )
        assert summary.monthly_pnl == pytest.approx({"2024-01": 200.0, "2024-02": 550.0})
        assert summary.pnl_by_symbol == pytest.approx({"BTCUSDT": 700.0, "ETHUSDT": 50.0})

    def test_no_losses_profit_factor(self):
        summary = summarize_journal(
            [logged(utc(2024, 3, 1, 9), "BTCUSDT", 250.0, 0.5, TradeOutcome.TP1)]
        )
        assert summary.profit_factor == float("inf")
        assert summary.max_drawdown == 0.0

    def test_empty_journal(self):
        assert summarize_journal([]) == JournalSummary()


class TestLoadJournalCsv:
    def test_summarizes_csv_journal(self, tmp_path, trades):
        path = str(tmp_path / "journal.csv")
        repository = CsvTradeRepository(path)
        for trade in trades:
            repository.add(trade)

        summary = summarize_frame(load_journal_csv(path))

        assert summary.total_trades == 5
        assert summary.total_pnl == pytest.approx(750.0)
        assert summary.monthly_pnl == pytest.approx({"2024-01": 200.0, "2024-02": 550.0})

    def test_header_only_journal(self, tmp_path):
        path = str(tmp_path / "journal.csv")
        CsvTradeRepository(path)

        assert summarize_frame(load_journal_csv(path)).total_trades == 0
