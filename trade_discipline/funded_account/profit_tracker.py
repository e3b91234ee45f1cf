"""
Progress toward daily, weekly, monthly and total profit goals.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from trade_discipline.core.config_manager import ConfigManager


@dataclass(frozen=True)
class ProfitGoals:
    """Profit targets in account currency."""

    daily: float = 1000.0
    weekly: float = 7000.0
    monthly: float = 20000.0
    total: float = 50000.0

    def __post_init__(self) -> None:
        for name in ("daily", "weekly", "monthly", "total"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.capitalize()} goal must be positive")

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> "ProfitGoals":
        return cls(**config_manager.get_profit_goals_config())


@dataclass(frozen=True)
class GoalProgress:
    """Where a P&L figure stands against its goal."""

    pnl: float
    goal: float
    percent: float
    achieved: bool

    @property
    def remaining(self) -> float:
        return max(0.0, self.goal - self.pnl)


def calculate_goal_progress(pnl: float, goal: float) -> GoalProgress:
    """Percent of ``goal`` earned, clamped to 0..100.

    Raises:
        ValueError: If goal is not positive
    """
    if goal <= 0:
        raise ValueError("Goal must be positive")
    percent = max(0.0, min(pnl / goal * 100.0, 100.0))
    return GoalProgress(pnl=pnl, goal=goal, percent=percent, achieved=pnl >= goal)


class ProfitTracker:
    """Reports goal progress for an account snapshot."""

    def __init__(self, goals: Optional[ProfitGoals] = None) -> None:
        self._goals = goals or ProfitGoals()

    @property
    def goals(self) -> ProfitGoals:
        return self._goals

    def snapshot(self, account_state) -> Dict[str, GoalProgress]:
        """Progress for each period of an AccountState."""
        return {
            "daily": calculate_goal_progress(account_state.daily_pnl, self._goals.daily),
            "weekly": calculate_goal_progress(account_state.weekly_pnl, self._goals.weekly),
            "monthly": calculate_goal_progress(
                account_state.monthly_pnl, self._goals.monthly
            ),
            "total": calculate_goal_progress(account_state.total_pnl, self._goals.total),
        }
