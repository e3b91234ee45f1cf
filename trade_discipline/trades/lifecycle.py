"""
Trade lifecycle state machine.

PLANNED -> TP1_HIT -> TP2_HIT -> CLOSED, with STOPPED_OUT reachable from
any non-terminal state. Each transition applies its side effect once:

- TP1: stop moves to break-even (the entry price)
- TP2: trailing stop is enabled at its configured percent
- TP3: trade becomes inactive for good

Re-firing a level that is already hit returns the trade unchanged.
Firing a level before the previous one raises LifecycleTransitionError.
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Union

from trade_discipline.core.event_hub import EventHub, EventType
from trade_discipline.core.logger import get_module_logger
from trade_discipline.trades.trade import (
    TakeProfitLevel,
    Trade,
    TradeSide,
    TradeValidationError,
)


class LifecycleTransitionError(TradeValidationError):
    """Exception raised for out-of-order or post-close transitions."""


def _is_improvement(side: TradeSide, candidate: float, current: float) -> bool:
    """True when ``candidate`` locks in more profit than ``current``."""
    if side is TradeSide.LONG:
        return candidate > current
    return candidate < current


def mark_take_profit_hit(
    trade: Trade, level: Union[TakeProfitLevel, str, int]
) -> Trade:
    """Apply a take-profit hit and return the resulting trade.

    TP1 moves the stop to the entry price, but only when that tightens
    it. A status built by hand with the stop already past entry keeps
    its stop. Trades advanced through this module never start TP1 in
    that shape, so for them the stop always lands on entry.

    Args:
        trade: Trade to advance
        level: Level that was reached (enum, "tp2" or 2)

    Returns:
        Trade: The advanced trade, or ``trade`` itself if already hit

    Raises:
        LifecycleTransitionError: If the previous level is not hit yet
            or the trade is no longer active
    """
    level = TakeProfitLevel.parse(level)
    status = trade.status

    if status.is_hit(level):
        return trade

    if not status.is_active:
        raise LifecycleTransitionError(
            f"Cannot mark {level.name} hit: trade {trade.id} is {trade.state.value}"
        )

    if level is not TakeProfitLevel.TP1:
        previous = TakeProfitLevel(level.value - 1)
        if not status.is_hit(previous):
            raise LifecycleTransitionError(
                f"Cannot mark {level.name} hit before {previous.name}"
            )

    if level is TakeProfitLevel.TP1:
        break_even = trade.setup.entry_price
        current_sl = status.current_sl
        if _is_improvement(trade.direction, break_even, current_sl):
            current_sl = break_even
        new_status = replace(status, tp1_hit=True, current_sl=current_sl)
    elif level is TakeProfitLevel.TP2:
        new_status = replace(status, tp2_hit=True, trailing_stop_enabled=True)
    else:
        new_status = replace(status, tp3_hit=True, is_active=False)

    return trade.with_status(new_status)


def mark_stopped_out(trade: Trade) -> Trade:
    """Close an active trade at its current stop.

    Raises:
        LifecycleTransitionError: If the trade already closed at TP3
    """
    status = trade.status
    if status.stopped_out:
        return trade
    if not status.is_active:
        raise LifecycleTransitionError(
            f"Cannot stop out trade {trade.id}: it is already {trade.state.value}"
        )
    return trade.with_status(replace(status, stopped_out=True, is_active=False))


def update_trailing_stop(trade: Trade, market_price: float) -> Trade:
    """Ratchet the trailing stop behind ``market_price``.

    The stop trails the price by ``trailing_stop_percent`` and only ever
    moves toward profit. Trades without an enabled trailing stop, or that
    are no longer active, come back unchanged.

    Raises:
        LifecycleTransitionError: If market_price is not positive
    """
    if market_price <= 0:
        raise LifecycleTransitionError("Market price must be positive")

    status = trade.status
    if not status.is_active or not status.trailing_stop_enabled:
        return trade

    offset = status.trailing_stop_percent / 100.0
    if trade.direction is TradeSide.LONG:
        candidate = market_price * (1.0 - offset)
    else:
        candidate = market_price * (1.0 + offset)

    if not _is_improvement(trade.direction, candidate, status.current_sl):
        return trade
    return trade.with_status(replace(status, current_sl=candidate))


class TradeLifecycle:
    """Applies lifecycle transitions and announces them.

    Wraps the pure transition functions with logging and EventHub
    publishing. Holds no trade state of its own; callers keep the Trade
    values it returns.
    """

    def __init__(self, event_hub: Optional[EventHub] = None) -> None:
        self._event_hub = event_hub
        self._logger = get_module_logger("lifecycle")

    def mark_take_profit_hit(
        self, trade: Trade, level: Union[TakeProfitLevel, str, int]
    ) -> Trade:
        """Advance ``trade`` past ``level`` and publish the side effects."""
        level = TakeProfitLevel.parse(level)
        extra = {"trade_id": trade.id}
        try:
            updated = mark_take_profit_hit(trade, level)
        except LifecycleTransitionError as e:
            self._logger.warning(f"Rejected transition: {e}", extra=extra)
            raise

        if updated is trade:
            self._logger.debug(f"{level.name} already hit, ignoring", extra=extra)
            return trade

        self._logger.info(
            f"{level.name} hit at {trade.target_price(level)}", extra=extra
        )
        self._publish(
            EventType.TAKE_PROFIT_HIT,
            {"trade": updated, "level": level, "price": trade.target_price(level)},
        )

        if updated.status.current_sl != trade.status.current_sl:
            self._announce_stop_move(trade, updated, reason="break_even")
        if updated.status.trailing_stop_enabled and not trade.status.trailing_stop_enabled:
            self._logger.info(
                f"Trailing stop enabled at {updated.status.trailing_stop_percent}%",
                extra=extra,
            )
            self._publish(
                EventType.TRAILING_STOP_ENABLED,
                {
                    "trade": updated,
                    "trailing_stop_percent": updated.status.trailing_stop_percent,
                },
            )
        if not updated.is_active:
            self._logger.info("Trade complete, all targets hit", extra=extra)
            self._publish(EventType.TRADE_CLOSED, {"trade": updated})

        return updated

    def mark_stopped_out(self, trade: Trade) -> Trade:
        """Close ``trade`` at its current stop and publish TRADE_STOPPED_OUT.

        Args:
            trade: Active trade whose stop was reached

        Returns:
            Trade: The stopped-out trade, or ``trade`` itself if already stopped

        Raises:
            LifecycleTransitionError: If the trade already closed at TP3
        """
        updated = mark_stopped_out(trade)
        if updated is not trade:
            self._logger.info(
                f"Stopped out at {updated.status.current_sl}",
                extra={"trade_id": trade.id},
            )
            self._publish(
                EventType.TRADE_STOPPED_OUT,
                {"trade": updated, "exit_price": updated.status.current_sl},
            )
        return updated

    def update_trailing_stop(self, trade: Trade, market_price: float) -> Trade:
        """Ratchet the trailing stop and publish STOP_LOSS_MOVED if it moved.

        Args:
            trade: Trade to update
            market_price: Latest market price, must be positive

        Returns:
            Trade: The updated trade, or ``trade`` itself if the stop held
        """
        updated = update_trailing_stop(trade, market_price)
        if updated is not trade:
            self._announce_stop_move(trade, updated, reason="trailing")
        return updated

    def _announce_stop_move(self, before: Trade, after: Trade, reason: str) -> None:
        self._logger.info(
            f"Stop loss moved {before.status.current_sl} -> "
            f"{after.status.current_sl} ({reason})",
            extra={"trade_id": after.id},
        )
        self._publish(
            EventType.STOP_LOSS_MOVED,
            {
                "trade": after,
                "previous_sl": before.status.current_sl,
                "current_sl": after.status.current_sl,
                "reason": reason,
            },
        )

    def _publish(self, event_type: str, data: Dict[str, Any]) -> None:
        if self._event_hub:
            self._event_hub.publish(event_type, data)
