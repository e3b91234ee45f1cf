"""
Trade planner turning a filled-in planning form into an opened Trade.

The planner validates the draft, sizes the position against the risk
budget and opens the trade in its PLANNED state. A draft with any
validation error, or one that sizes to zero, is rejected.
"""

from typing import Any, Dict, Mapping, Optional, Union

from trade_discipline.core.config_manager import ConfigManager
from trade_discipline.core.event_hub import EventHub, EventType
from trade_discipline.core.logger import get_module_logger
from trade_discipline.risk_management.risk_engine import (
    PositionSize,
    calculate_position_size,
)
from trade_discipline.risk_management.setup_validator import (
    TradeSetupValidationError,
    is_entered,
    validate_trade_setup,
)
from trade_discipline.trades.trade import Trade, TradeDraft, TradeSetup

UNSIZEABLE_POSITION = "Unable to calculate position size"


class TradePlanner:
    """Validates, sizes and opens trade plans.

    Attributes:
        _default_risk_percent: Risk used when the draft leaves it blank
        _trailing_stop_percent: Trailing distance given to new trades
        _event_hub: Optional hub for TRADE_PLANNED / TRADE_REJECTED
        _plans_created: Count of successfully opened trades
        _plans_rejected: Count of rejected drafts
    """

    def __init__(
        self,
        default_risk_percent: float = 2.0,
        trailing_stop_percent: float = 3.0,
        event_hub: Optional[EventHub] = None,
    ) -> None:
        """Initialize the planner.

        Args:
            default_risk_percent: Risk percent applied to drafts without one
            trailing_stop_percent: Trailing stop distance for new trades
            event_hub: Optional event hub for publishing plan events

        Raises:
            ValueError: If either percent is outside its valid range
        """
        if not 0.0 < default_risk_percent <= 20.0:
            raise ValueError("Default risk percent must be in (0, 20]")
        if trailing_stop_percent < 0:
            raise ValueError("Trailing stop percent cannot be negative")

        self._default_risk_percent = default_risk_percent
        self._trailing_stop_percent = trailing_stop_percent
        self._event_hub = event_hub
        self._logger = get_module_logger("trade_planner")
        self._plans_created = 0
        self._plans_rejected = 0

    def preview(self, draft: Union[TradeDraft, Mapping[str, Any]]) -> Optional[PositionSize]:
        """Live sizing for a form in progress.

        Returns:
            Optional[PositionSize]: Sizing once entry, stop, risk and account
            are all filled in, otherwise None
        """
        draft = self._prepare(draft)
        if not all(
            is_entered(value)
            for value in (
                draft.entry_price,
                draft.stop_loss,
                draft.risk_percent,
                draft.account_size,
            )
        ):
            return None
        return calculate_position_size(
            draft.entry_price, draft.stop_loss, draft.risk_percent, draft.account_size
        )

    def plan(
        self,
        draft: Union[TradeDraft, Mapping[str, Any]],
        symbol: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Trade:
        """Validate and size ``draft`` and open it as a new trade.

        Args:
            draft: Planning form values
            symbol: Optional instrument symbol
            notes: Optional free-text notes

        Returns:
            Trade: The opened trade in the PLANNED state

        Raises:
            TradeSetupValidationError: If the draft is invalid or unsizeable
        """
        draft = self._prepare(draft)

        errors = validate_trade_setup(draft)
        if errors:
            self._reject(errors)

        sizing = self.preview(draft)
        if sizing is None or not sizing.is_sizeable:
            self._reject([UNSIZEABLE_POSITION])

        setup = TradeSetup(
            entry_price=draft.entry_price,
            stop_loss=draft.stop_loss,
            risk_percent=draft.risk_percent,
            account_size=draft.account_size,
            tp1=draft.tp1 or 0.0,
            tp2=draft.tp2 or 0.0,
            tp3=draft.tp3 or 0.0,
            position_size=sizing.position_size,
            risk_amount=sizing.risk_amount,
            side=draft.side,
        )
        trade = Trade.create(
            setup,
            trailing_stop_percent=self._trailing_stop_percent,
            symbol=symbol,
            notes=notes,
        )
        self._plans_created += 1

        self._logger.info(
            f"Planned {trade.direction.value} trade: entry {setup.entry_price}, "
            f"stop {setup.stop_loss}, size {setup.position_size}, "
            f"risk {setup.risk_amount}",
            extra={"trade_id": trade.id},
        )
        if self._event_hub:
            self._event_hub.publish(EventType.TRADE_PLANNED, {"trade": trade})

        return trade

    def get_planning_statistics(self) -> Dict[str, Any]:
        return {
            "plans_created": self._plans_created,
            "plans_rejected": self._plans_rejected,
            "default_risk_percent": self._default_risk_percent,
            "trailing_stop_percent": self._trailing_stop_percent,
        }

    def _prepare(self, draft: Union[TradeDraft, Mapping[str, Any]]) -> TradeDraft:
        if not isinstance(draft, TradeDraft):
            draft = TradeDraft.from_dict(draft)
        return draft.with_defaults(self._default_risk_percent)

    def _reject(self, errors: list) -> None:
        self._plans_rejected += 1
        self._logger.warning(f"Trade plan rejected: {'; '.join(errors)}")
        if self._event_hub:
            self._event_hub.publish(EventType.TRADE_REJECTED, {"errors": list(errors)})
        raise TradeSetupValidationError(errors)


def create_trade_planner(
    config_manager: Optional[ConfigManager] = None,
    event_hub: Optional[EventHub] = None,
) -> TradePlanner:
    """Factory function to create a TradePlanner.

    Args:
        config_manager: Loaded configuration; defaults are used when None
        event_hub: Optional event hub for event publishing

    Returns:
        TradePlanner: Configured planner
    """
    if config_manager is None:
        return TradePlanner(event_hub=event_hub)

    planning = config_manager.get_planning_config()
    return TradePlanner(
        default_risk_percent=planning["default_risk_percent"],
        trailing_stop_percent=planning["trailing_stop_percent"],
        event_hub=event_hub,
    )
