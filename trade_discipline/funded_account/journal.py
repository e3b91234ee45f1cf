"""
Funded-account trade journal records and outcome arithmetic.

A logged trade is a closed position: the plan it was taken with, how it
ended (which take-profit was the last to fill, or the stop) and the
realised result in currency and in R.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from trade_discipline.risk_management.risk_engine import TP_ALLOCATION_WEIGHTS
from trade_discipline.trades.trade import TradeSide


class TradeOutcome(Enum):
    """How a logged trade ended."""

    TP1 = "tp1"
    TP2 = "tp2"
    TP3 = "tp3"
    SL = "sl"

    @property
    def legs_filled(self) -> int:
        """Number of take-profit legs that filled before exit."""
        return {"tp1": 1, "tp2": 2, "tp3": 3, "sl": 0}[self.value]


@dataclass(frozen=True)
class JournalEntry:
    """Trade details as submitted to the journal, before evaluation."""

    symbol: str
    side: TradeSide
    entry_price: float
    stop_loss: float
    take_profit1: float
    outcome: TradeOutcome
    take_profit2: float = 0.0
    take_profit3: float = 0.0


@dataclass(frozen=True)
class OutcomeEvaluation:
    """Sizing and realised result for a journal entry."""

    position_size: float
    risk_amount: float
    pnl: float
    r_multiple: float
    risk_reward: float


@dataclass(frozen=True)
class LoggedTrade:
    """Closed trade recorded against the funded account."""

    symbol: str
    side: TradeSide
    entry_price: float
    stop_loss: float
    take_profit1: float
    take_profit2: float
    take_profit3: float
    outcome: TradeOutcome
    position_size: float
    risk_amount: float
    risk_reward: float
    pnl: float
    r_multiple: float
    id: str = field(default_factory=lambda: f"trade_{uuid.uuid4().hex[:12]}")
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    def to_record(self) -> Dict[str, Any]:
        """Flat, string-friendly mapping used by the CSV journal and pandas."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "symbol": self.symbol,
            "side": self.side.value,
            "entry_price": self.entry_price,
            "stop_loss": self.stop_loss,
            "take_profit1": self.take_profit1,
            "take_profit2": self.take_profit2,
            "take_profit3": self.take_profit3,
            "outcome": self.outcome.value,
            "position_size": self.position_size,
            "risk_amount": self.risk_amount,
            "risk_reward": self.risk_reward,
            "pnl": self.pnl,
            "r_multiple": self.r_multiple,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "LoggedTrade":
        """Inverse of ``to_record``; numeric fields may arrive as strings."""
        numeric = (
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
        )
        values = {name: float(record[name] or 0) for name in numeric}
        return cls(
            id=record["id"],
            timestamp=datetime.fromisoformat(record["timestamp"]),
            symbol=record["symbol"],
            side=TradeSide(record["side"]),
            outcome=TradeOutcome(record["outcome"]),
            **values,
        )


def evaluate_trade_outcome(
    balance: float,
    risk_per_trade: float,
    entry_price: float,
    stop_loss: float,
    take_profit1: float,
    take_profit2: float,
    take_profit3: float,
    outcome: TradeOutcome,
) -> Optional[OutcomeEvaluation]:
    """Realised P&L of a closed trade under the 50/30/20 scale-out plan.

    Sizing uses the account balance and risk percent in force when the
    trade is logged. A stop-out loses the full risk amount (-1R); each
    filled take-profit leg adds ``|tp - entry| * size * weight``.

    Returns:
        Optional[OutcomeEvaluation]: None when entry, stop or TP1 is
        missing, when a filled leg has no target price, or when entry
        equals stop so nothing can be sized
    """
    if not entry_price or not stop_loss or not take_profit1:
        return None

    targets = (take_profit1, take_profit2, take_profit3)
    legs = list(zip(targets, TP_ALLOCATION_WEIGHTS))[: outcome.legs_filled]
    if any(not target for target, _ in legs):
        return None

    risk_amount = balance * risk_per_trade / 100
    risk_per_unit = abs(entry_price - stop_loss)
    if risk_per_unit == 0 or risk_amount <= 0:
        return None
    position_size = risk_amount / risk_per_unit

    if outcome is TradeOutcome.SL:
        pnl = -risk_amount
        r_multiple = -1.0
    else:
        pnl = sum(
            abs(target - entry_price) * position_size * weight
            for target, weight in legs
        )
        r_multiple = pnl / risk_amount

    risk_reward = abs(take_profit1 - entry_price) / risk_per_unit

    return OutcomeEvaluation(
        position_size=position_size,
        risk_amount=risk_amount,
        pnl=pnl,
        r_multiple=r_multiple,
        risk_reward=risk_reward,
    )
