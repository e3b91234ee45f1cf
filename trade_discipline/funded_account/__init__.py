"""
Funded account journal, prop-firm rules and profit goal tracking.
"""

from .account_manager import (
    AccountState,
    DailyGoalReachedError,
    FundedAccountError,
    FundedAccountManager,
    InvalidLoggedTradeError,
    InvalidRiskSettingError,
    PropFirmRules,
    RiskLimitBreachedError,
    TradeLimitReachedError,
    create_funded_account_manager,
)
from .journal import (
    JournalEntry,
    LoggedTrade,
    OutcomeEvaluation,
    TradeOutcome,
    evaluate_trade_outcome,
)
from .profit_tracker import GoalProgress, ProfitGoals, ProfitTracker, calculate_goal_progress
from .trade_repository import (
    CsvTradeRepository,
    InMemoryTradeRepository,
    TradeRepository,
    TradeRepositoryError,
)

__all__ = [
    "AccountState",
    "CsvTradeRepository",
    "DailyGoalReachedError",
    "FundedAccountError",
    "FundedAccountManager",
    "GoalProgress",
    "InMemoryTradeRepository",
    "InvalidLoggedTradeError",
    "InvalidRiskSettingError",
    "JournalEntry",
    "LoggedTrade",
    "OutcomeEvaluation",
    "ProfitGoals",
    "ProfitTracker",
    "PropFirmRules",
    "RiskLimitBreachedError",
    "TradeLimitReachedError",
    "TradeOutcome",
    "TradeRepository",
    "TradeRepositoryError",
    "calculate_goal_progress",
    "create_funded_account_manager",
    "evaluate_trade_outcome",
]
