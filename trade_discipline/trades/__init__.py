"""
Trade model and take-profit lifecycle.
"""

from .lifecycle import (
    LifecycleTransitionError,
    TradeLifecycle,
    mark_stopped_out,
    mark_take_profit_hit,
    update_trailing_stop,
)
from .trade import (
    InvalidTradeStateError,
    TakeProfitLevel,
    Trade,
    TradeDraft,
    TradeSetup,
    TradeSide,
    TradeState,
    TradeStatus,
    TradeValidationError,
    infer_trade_side,
)

__all__ = [
    "InvalidTradeStateError",
    "LifecycleTransitionError",
    "TakeProfitLevel",
    "Trade",
    "TradeDraft",
    "TradeLifecycle",
    "TradeSetup",
    "TradeSide",
    "TradeState",
    "TradeStatus",
    "TradeValidationError",
    "infer_trade_side",
    "mark_stopped_out",
    "mark_take_profit_hit",
    "update_trailing_stop",
]
