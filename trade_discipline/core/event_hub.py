"""Event hub for decoupled notification between planning, lifecycle and journal components.

Publishers (planner, lifecycle, funded account manager) announce what
happened; UI callers and the performance journal subscribe without the
publishers knowing about them. Delivery is synchronous and in-order.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional


class EventType:
    """Event type constants.

    Using constants ensures subscribers and publishers agree on names.
    """

    # Planning events
    TRADE_PLANNED: str = "trade_planned"
    TRADE_REJECTED: str = "trade_rejected"

    # Lifecycle events
    TAKE_PROFIT_HIT: str = "take_profit_hit"
    STOP_LOSS_MOVED: str = "stop_loss_moved"
    TRAILING_STOP_ENABLED: str = "trailing_stop_enabled"
    TRADE_CLOSED: str = "trade_closed"
    TRADE_STOPPED_OUT: str = "trade_stopped_out"

    # Funded account events
    TRADE_LOGGED: str = "trade_logged"
    DAILY_GOAL_REACHED: str = "daily_goal_reached"
    DRAWDOWN_LIMIT_BREACHED: str = "drawdown_limit_breached"
    RISK_SETTING_CHANGED: str = "risk_setting_changed"
    PERIOD_RESET: str = "period_reset"


class EventHubInterface(ABC):
    """Abstract interface for event hub implementations."""

    @abstractmethod
    def subscribe(self, event_type: str, callback: Callable[[Any], None]) -> None:
        """Subscribe to an event type with a callback function."""
        pass

    @abstractmethod
    def unsubscribe(self, event_type: str, callback: Callable[[Any], None]) -> None:
        """Unsubscribe from an event type."""
        pass

    @abstractmethod
    def publish(self, event_type: str, data: Any) -> None:
        """Publish an event to all subscribers."""
        pass


class EventHub(EventHubInterface):
    """Synchronous observer registry.

    Callbacks run on the publisher's thread in subscription order. A
    failing callback is logged and skipped so a misbehaving subscriber
    can never abort a trade transition or a journal update.

    Attributes:
        _subscribers: Mapping of event type to ordered callbacks
        _lock: Re-entrant lock guarding the registry
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Callable[[Any], None]]] = {}
        self._lock: threading.RLock = threading.RLock()
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: str, callback: Callable[[Any], None]) -> None:
        """Subscribe to an event type with a callback function.

        Args:
            event_type: The type of event to subscribe to (use EventType constants)
            callback: Called with the event payload on each publish

        Raises:
            ValueError: If event_type is empty or None
            TypeError: If callback is not callable
        """
        if not event_type:
            raise ValueError("Event type cannot be empty or None")

        if not callable(callback):
            raise TypeError("Callback must be callable")

        with self._lock:
            callbacks = self._subscribers.setdefault(event_type, [])
            if callback not in callbacks:
                callbacks.append(callback)

    def unsubscribe(self, event_type: str, callback: Callable[[Any], None]) -> None:
        """Unsubscribe from an event type.

        Raises:
            ValueError: If event_type is empty or None
            KeyError: If the callback is not subscribed to event_type
        """
        if not event_type:
            raise ValueError("Event type cannot be empty or None")

        with self._lock:
            callbacks = self._subscribers.get(event_type)
            if not callbacks or callback not in callbacks:
                raise KeyError(
                    f"Callback not found in subscribers for event type: {event_type}"
                )

            callbacks.remove(callback)
            if not callbacks:
                del self._subscribers[event_type]

    def publish(self, event_type: str, data: Any) -> None:
        """Publish an event to all subscribers.

        Args:
            event_type: The type of event to publish
            data: The payload passed to every subscriber

        Raises:
            ValueError: If event_type is empty or None
        """
        if not event_type:
            raise ValueError("Event type cannot be empty or None")

        with self._lock:
            subscribers = list(self._subscribers.get(event_type, []))

        for callback in subscribers:
            try:
                callback(data)
            except Exception as e:
                self._logger.error(f"Error executing callback for event {event_type}: {e}")

    def get_subscriber_count(self, event_type: str) -> int:
        """Get the number of subscribers for a specific event type.

        Raises:
            ValueError: If event_type is empty or None
        """
        if not event_type:
            raise ValueError("Event type cannot be empty or None")

        with self._lock:
            return len(self._subscribers.get(event_type, []))

    def clear_subscribers(self, event_type: Optional[str] = None) -> None:
        """Clear subscribers for one event type, or all when event_type is None.

        Raises:
            ValueError: If event_type is empty (but not None)
        """
        if event_type is not None and not event_type:
            raise ValueError("Event type cannot be empty")

        with self._lock:
            if event_type is None:
                self._subscribers.clear()
            else:
                self._subscribers.pop(event_type, None)
