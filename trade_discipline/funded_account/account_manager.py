"""
Funded (prop-firm) account bookkeeping.

This module tracks the balance and period P&L of an evaluation account
as closed trades are journaled, and enforces the firm's discipline
rules:

- no new trades once the daily profit goal is reached
- a fixed number of trades per day
- a daily loss limit and a total drawdown limit
- risk per trade kept inside the firm's bounds

Account state is an immutable value replaced on every change.
"""

from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from trade_discipline.core.config_manager import ConfigManager
from trade_discipline.core.event_hub import EventHub, EventType
from trade_discipline.core.logger import get_module_logger
from trade_discipline.funded_account.journal import (
    JournalEntry,
    LoggedTrade,
    evaluate_trade_outcome,
)
from trade_discipline.funded_account.trade_repository import (
    CsvTradeRepository,
    InMemoryTradeRepository,
    TradeRepository,
)


class FundedAccountError(Exception):
    """Base exception for funded account rule violations."""


class DailyGoalReachedError(FundedAccountError):
    """Raised when logging a trade after the daily goal was reached."""


class TradeLimitReachedError(FundedAccountError):
    """Raised when the daily trade allowance is used up."""


class RiskLimitBreachedError(FundedAccountError):
    """Raised when the daily loss or total drawdown limit is exhausted."""


class InvalidLoggedTradeError(FundedAccountError):
    """Raised when a journal entry cannot be sized or evaluated."""


class InvalidRiskSettingError(FundedAccountError):
    """Raised for risk-per-trade values outside the firm's bounds."""


@dataclass(frozen=True)
class PropFirmRules:
    """Evaluation rules of the funded account.

    Attributes:
        starting_balance: Initial account balance
        risk_per_trade: Initial risk per trade, percent of balance
        daily_goal: Profit after which trading stops for the day
        max_daily_loss: Loss allowed in a single day
        max_total_drawdown: Loss allowed over the account's life
        profit_target: Total profit that passes the evaluation
        max_trades_per_day: Trades allowed per day
        min_risk_per_trade: Lowest selectable risk percent
        max_risk_per_trade: Highest selectable risk percent
    """

    starting_balance: float = 100000.0
    risk_per_trade: float = 0.5
    daily_goal: float = 1000.0
    max_daily_loss: float = 5000.0
    max_total_drawdown: float = 10000.0
    profit_target: float = 50000.0
    max_trades_per_day: int = 10
    min_risk_per_trade: float = 0.1
    max_risk_per_trade: float = 2.0

    def __post_init__(self) -> None:
        if self.starting_balance <= 0:
            raise FundedAccountError("Starting balance must be positive")
        if self.daily_goal <= 0 or self.profit_target <= 0:
            raise FundedAccountError("Profit goals must be positive")
        if self.max_daily_loss <= 0 or self.max_total_drawdown <= 0:
            raise FundedAccountError("Loss limits must be positive")
        if self.max_trades_per_day <= 0:
            raise FundedAccountError("Max trades per day must be positive")
        if not 0 < self.min_risk_per_trade <= self.max_risk_per_trade:
            raise FundedAccountError("Risk per trade bounds are inconsistent")
        if not self.min_risk_per_trade <= self.risk_per_trade <= self.max_risk_per_trade:
            raise InvalidRiskSettingError(
                f"Risk per trade must be between {self.min_risk_per_trade}% "
                f"and {self.max_risk_per_trade}%"
            )

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> "PropFirmRules":
        prop = config_manager.get_prop_firm_config()
        return cls(
            starting_balance=prop["starting_balance"],
            risk_per_trade=prop["risk_per_trade"],
            daily_goal=prop["daily_goal"],
            max_daily_loss=prop["max_daily_loss"],
            max_total_drawdown=prop["max_total_drawdown"],
            profit_target=prop["profit_target"],
            max_trades_per_day=prop["max_trades_per_day"],
        )


@dataclass(frozen=True)
class AccountState:
    """Snapshot of the funded account."""

    balance: float
    risk_per_trade: float
    trades_left: int
    daily_pnl: float = 0.0
    weekly_pnl: float = 0.0
    monthly_pnl: float = 0.0
    total_pnl: float = 0.0
    daily_goal_reached: bool = False

    @classmethod
    def initial(cls, rules: PropFirmRules) -> "AccountState":
        return cls(
            balance=rules.starting_balance,
            risk_per_trade=rules.risk_per_trade,
            trades_left=rules.max_trades_per_day,
        )


class FundedAccountManager:
    """Journals closed trades and keeps the account inside the firm's rules.

    State is rebuilt from the repository's journal on construction, so a
    persistent journal carries the limits across restarts.

    Attributes:
        _rules: Prop firm rules in force
        _state: Current account snapshot
        _repository: Journal storage
        _event_hub: Optional hub for journal and limit events
    """

    def __init__(
        self,
        rules: Optional[PropFirmRules] = None,
        repository: Optional[TradeRepository] = None,
        event_hub: Optional[EventHub] = None,
    ) -> None:
        self._rules = rules or PropFirmRules()
        self._repository = repository or InMemoryTradeRepository()
        self._event_hub = event_hub
        self._logger = get_module_logger("funded_account")
        self._state = self._restore_state(self._repository.list_recent(None))

        self._logger.info(
            f"Funded account opened with balance {self._state.balance}, "
            f"risk {self._state.risk_per_trade}% per trade"
        )

    @property
    def rules(self) -> PropFirmRules:
        return self._rules

    @property
    def state(self) -> AccountState:
        return self._state

    @property
    def max_risk_amount(self) -> float:
        """Currency risked by the next trade at the current setting."""
        return self._state.balance * self._state.risk_per_trade / 100

    @property
    def remaining_daily_loss(self) -> float:
        return self._rules.max_daily_loss + self._state.daily_pnl

    @property
    def remaining_drawdown(self) -> float:
        return self._rules.max_total_drawdown + self._state.total_pnl

    @property
    def profit_target_progress(self) -> float:
        """Percent of the profit target earned, never below zero."""
        return max(0.0, self._state.total_pnl / self._rules.profit_target * 100)

    def is_trading_allowed(self) -> bool:
        return (
            not self._state.daily_goal_reached
            and self._state.trades_left > 0
            and self.remaining_daily_loss > 0
            and self.remaining_drawdown > 0
        )

    def log_trade(self, entry: JournalEntry) -> LoggedTrade:
        """Evaluate a closed trade, journal it and update the account.

        Args:
            entry: The closed trade as entered by the trader

        Returns:
            LoggedTrade: The journaled record

        Raises:
            DailyGoalReachedError: If the daily goal was already reached
            RiskLimitBreachedError: If a loss limit is exhausted
            TradeLimitReachedError: If no trades are left today
            InvalidLoggedTradeError: If the entry cannot be evaluated
        """
        self._check_can_trade()

        evaluation = evaluate_trade_outcome(
            balance=self._state.balance,
            risk_per_trade=self._state.risk_per_trade,
            entry_price=entry.entry_price,
            stop_loss=entry.stop_loss,
            take_profit1=entry.take_profit1,
            take_profit2=entry.take_profit2,
            take_profit3=entry.take_profit3,
            outcome=entry.outcome,
        )
        if evaluation is None:
            self._logger.warning(f"Rejected journal entry for {entry.symbol}: invalid prices")
            raise InvalidLoggedTradeError(
                "Please check your entry, stop loss, and take profit values"
            )

        logged = LoggedTrade(
            symbol=entry.symbol.upper(),
            side=entry.side,
            entry_price=entry.entry_price,
            stop_loss=entry.stop_loss,
            take_profit1=entry.take_profit1,
            take_profit2=entry.take_profit2 or 0.0,
            take_profit3=entry.take_profit3 or 0.0,
            outcome=entry.outcome,
            position_size=evaluation.position_size,
            risk_amount=evaluation.risk_amount,
            risk_reward=evaluation.risk_reward,
            pnl=evaluation.pnl,
            r_multiple=evaluation.r_multiple,
        )
        self._repository.add(logged)
        self._apply_pnl(logged)

        self._logger.info(
            f"Logged {logged.side.value.upper()} {logged.symbol} "
            f"{logged.outcome.value}: P&L {logged.pnl:.2f} ({logged.r_multiple:+.1f}R)",
            extra={"trade_id": logged.id},
        )
        self._publish(EventType.TRADE_LOGGED, {"trade": logged, "account": self._state})
        return logged

    def update_risk_per_trade(self, risk_per_trade: float) -> None:
        """Change the risk percent used for subsequent trades.

        Raises:
            InvalidRiskSettingError: If outside the firm's bounds
        """
        low, high = self._rules.min_risk_per_trade, self._rules.max_risk_per_trade
        if not low <= risk_per_trade <= high:
            raise InvalidRiskSettingError(
                f"Risk per trade must be between {low}% and {high}%"
            )

        previous = self._state.risk_per_trade
        self._state = replace(self._state, risk_per_trade=risk_per_trade)
        self._logger.info(f"Risk per trade changed {previous}% -> {risk_per_trade}%")
        self._publish(
            EventType.RISK_SETTING_CHANGED,
            {"previous": previous, "current": risk_per_trade},
        )

    def reset_daily(self) -> None:
        """Start a new trading day."""
        self._state = replace(
            self._state,
            daily_pnl=0.0,
            daily_goal_reached=False,
            trades_left=self._rules.max_trades_per_day,
        )
        self._announce_reset("daily")

    def reset_weekly(self) -> None:
        self._state = replace(self._state, weekly_pnl=0.0)
        self._announce_reset("weekly")

    def reset_monthly(self) -> None:
        self._state = replace(self._state, monthly_pnl=0.0)
        self._announce_reset("monthly")

    def recent_trades(self, limit: Optional[int] = 10) -> List[LoggedTrade]:
        """Journaled trades, most recent first."""
        return self._repository.list_recent(limit)

    def get_account_summary(self) -> Dict[str, Any]:
        summary = asdict(self._state)
        summary.update(
            {
                "max_risk_amount": self.max_risk_amount,
                "remaining_daily_loss": self.remaining_daily_loss,
                "remaining_drawdown": self.remaining_drawdown,
                "profit_target_progress": self.profit_target_progress,
                "trading_allowed": self.is_trading_allowed(),
                "trade_count": self._repository.count(),
            }
        )
        return summary

    def _restore_state(
        self, trades: List[LoggedTrade], now: Optional[datetime] = None
    ) -> AccountState:
        """Rebuild the account snapshot from an existing journal.

        Total P&L covers every journaled trade. Daily, weekly (ISO week)
        and monthly P&L only count trades stamped in the current UTC
        period, and today's trades use up the daily allowance.

        Args:
            trades: Journaled trades in any order
            now: Reference time, defaults to the current UTC time

        Returns:
            AccountState: Snapshot matching the journal
        """
        state = AccountState.initial(self._rules)
        if not trades:
            return state

        now = now or datetime.now(timezone.utc)
        today = now.date()
        this_week = today.isocalendar()[:2]

        total_pnl = daily_pnl = weekly_pnl = monthly_pnl = 0.0
        trades_today = 0
        for trade in trades:
            stamp = trade.timestamp
            if stamp.tzinfo is None:
                stamp = stamp.replace(tzinfo=timezone.utc)
            day = stamp.astimezone(timezone.utc).date()

            total_pnl += trade.pnl
            if day == today:
                daily_pnl += trade.pnl
                trades_today += 1
            if day.isocalendar()[:2] == this_week:
                weekly_pnl += trade.pnl
            if (day.year, day.month) == (today.year, today.month):
                monthly_pnl += trade.pnl

        self._logger.info(f"Restored {len(trades)} journaled trades")
        return replace(
            state,
            balance=self._rules.starting_balance + total_pnl,
            daily_pnl=daily_pnl,
            weekly_pnl=weekly_pnl,
            monthly_pnl=monthly_pnl,
            total_pnl=total_pnl,
            trades_left=max(0, self._rules.max_trades_per_day - trades_today),
            daily_goal_reached=daily_pnl >= self._rules.daily_goal,
        )

    def _check_can_trade(self) -> None:
        if self._state.daily_goal_reached:
            raise DailyGoalReachedError(
                "Daily goal reached. Consider stopping trades to avoid overtrading."
            )
        if self.remaining_daily_loss <= 0:
            raise RiskLimitBreachedError("Daily loss limit reached")
        if self.remaining_drawdown <= 0:
            raise RiskLimitBreachedError("Total drawdown limit reached")
        if self._state.trades_left <= 0:
            raise TradeLimitReachedError("No trades left for today")

    def _apply_pnl(self, trade: LoggedTrade) -> None:
        before = self._state
        daily_pnl = before.daily_pnl + trade.pnl
        self._state = replace(
            before,
            balance=before.balance + trade.pnl,
            daily_pnl=daily_pnl,
            weekly_pnl=before.weekly_pnl + trade.pnl,
            monthly_pnl=before.monthly_pnl + trade.pnl,
            total_pnl=before.total_pnl + trade.pnl,
            trades_left=before.trades_left - 1,
            daily_goal_reached=daily_pnl >= self._rules.daily_goal,
        )

        if self._state.daily_goal_reached and not before.daily_goal_reached:
            self._logger.info(f"Daily goal of {self._rules.daily_goal} reached")
            self._publish(
                EventType.DAILY_GOAL_REACHED,
                {"daily_pnl": daily_pnl, "goal": self._rules.daily_goal},
            )

        if self.remaining_daily_loss <= 0 < self._rules.max_daily_loss + before.daily_pnl:
            self._announce_breach("daily_loss", self.remaining_daily_loss)
        if self.remaining_drawdown <= 0 < self._rules.max_total_drawdown + before.total_pnl:
            self._announce_breach("total_drawdown", self.remaining_drawdown)

    def _announce_breach(self, limit: str, remaining: float) -> None:
        self._logger.warning(f"Risk limit breached: {limit} (remaining {remaining:.2f})")
        self._publish(
            EventType.DRAWDOWN_LIMIT_BREACHED,
            {"limit": limit, "remaining": remaining, "account": self._state},
        )

    def _announce_reset(self, period: str) -> None:
        self._logger.info(f"{period.capitalize()} counters reset")
        self._publish(EventType.PERIOD_RESET, {"period": period, "account": self._state})

    def _publish(self, event_type: str, data: Dict[str, Any]) -> None:
        if self._event_hub:
            self._event_hub.publish(event_type, data)


def create_funded_account_manager(
    config_manager: Optional[ConfigManager] = None,
    event_hub: Optional[EventHub] = None,
    repository: Optional[TradeRepository] = None,
) -> FundedAccountManager:
    """Factory function to create a FundedAccountManager.

    Uses a CSV journal when ``journal_csv_path`` is configured and no
    repository is passed, otherwise keeps the journal in memory.
    """
    rules = PropFirmRules.from_config(config_manager) if config_manager else None

    if repository is None and config_manager is not None:
        csv_path = config_manager.get_prop_firm_config().get("journal_csv_path")
        if csv_path:
            repository = CsvTradeRepository(csv_path)

    return FundedAccountManager(rules=rules, repository=repository, event_hub=event_hub)
