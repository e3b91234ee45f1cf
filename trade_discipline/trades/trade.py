"""
Trade data model.

A trade is an immutable plan (TradeSetup) paired with its lifecycle state
(TradeStatus) and an identity. Transitions never mutate; they build a new
status and a new Trade around it, so callers can keep history by holding
on to earlier values.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Union


class TradeValidationError(Exception):
    """Base exception for invalid trade data or transitions."""


class InvalidTradeStateError(TradeValidationError):
    """Exception raised when a status violates the lifecycle invariants."""


class TradeSide(Enum):
    """Trade direction."""

    LONG = "long"
    SHORT = "short"

    @classmethod
    def parse(cls, value: Union["TradeSide", str, None]) -> Optional["TradeSide"]:
        """Accept an enum member, a case-insensitive name/value, or None."""
        if value is None or isinstance(value, TradeSide):
            return value
        text = str(value).strip().lower()
        if not text:
            return None
        try:
            return cls(text)
        except ValueError:
            raise TradeValidationError(f"Unknown trade side: {value!r}")


class TradeState(Enum):
    """Position of a trade in its take-profit lifecycle."""

    PLANNED = "planned"
    TP1_HIT = "tp1_hit"
    TP2_HIT = "tp2_hit"
    CLOSED = "closed"
    STOPPED_OUT = "stopped_out"

    @property
    def is_terminal(self) -> bool:
        return self in (TradeState.CLOSED, TradeState.STOPPED_OUT)


class TakeProfitLevel(Enum):
    """Take-profit tiers in the order they must be hit."""

    TP1 = 1
    TP2 = 2
    TP3 = 3

    @classmethod
    def parse(cls, value: Union["TakeProfitLevel", str, int]) -> "TakeProfitLevel":
        if isinstance(value, TakeProfitLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip().upper()
        try:
            return cls[text]
        except KeyError:
            raise TradeValidationError(f"Unknown take-profit level: {value!r}")


def infer_trade_side(entry_price: float, tp1: float) -> TradeSide:
    """Legacy direction heuristic: a first target above entry means long.

    ``tp1 == entry_price`` falls through to SHORT. Callers that know the
    side should pass it explicitly instead of relying on this.
    """
    return TradeSide.LONG if entry_price < tp1 else TradeSide.SHORT


# Accepted keys when a draft is built from a form mapping.
_DRAFT_KEYS = {
    "entry_price": ("entry_price", "entryPrice"),
    "stop_loss": ("stop_loss", "stopLoss"),
    "risk_percent": ("risk_percent", "riskPercent"),
    "account_size": ("account_size", "accountSize"),
    "tp1": ("tp1",),
    "tp2": ("tp2",),
    "tp3": ("tp3",),
    "side": ("side",),
}


@dataclass(frozen=True)
class TradeDraft:
    """Partially filled trade plan as entered on a planning form."""

    entry_price: Optional[float] = None
    stop_loss: Optional[float] = None
    risk_percent: Optional[float] = None
    account_size: Optional[float] = None
    tp1: Optional[float] = None
    tp2: Optional[float] = None
    tp3: Optional[float] = None
    side: Optional[TradeSide] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "side", TradeSide.parse(self.side))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TradeDraft":
        """Build a draft from snake_case or camelCase keys.

        Blank strings are treated as missing; numeric strings are parsed.

        Raises:
            TradeValidationError: If a present value is not numeric
        """
        values = {}
        for attr, keys in _DRAFT_KEYS.items():
            raw = next((data[k] for k in keys if k in data), None)
            if attr == "side":
                values[attr] = raw
                continue
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                values[attr] = None
                continue
            try:
                values[attr] = float(raw)
            except (TypeError, ValueError):
                raise TradeValidationError(f"{attr} must be numeric, got {raw!r}")
        return cls(**values)

    @classmethod
    def from_setup(cls, setup: "TradeSetup") -> "TradeDraft":
        return cls(
            entry_price=setup.entry_price,
            stop_loss=setup.stop_loss,
            risk_percent=setup.risk_percent,
            account_size=setup.account_size,
            tp1=setup.tp1,
            tp2=setup.tp2,
            tp3=setup.tp3,
            side=setup.side,
        )

    def with_defaults(self, risk_percent: float) -> "TradeDraft":
        """Fill a missing risk percent with the planner default."""
        if self.risk_percent is not None:
            return self
        return replace(self, risk_percent=risk_percent)


@dataclass(frozen=True)
class TradeSetup:
    """Immutable trade plan with its derived sizing.

    Attributes:
        entry_price: Planned entry
        stop_loss: Initial protective stop
        risk_percent: Share of the account risked, in percent
        account_size: Account equity the risk is measured against
        tp1, tp2, tp3: Take-profit targets, nearest first
        position_size: Units sized so a stop-out loses risk_amount
        risk_amount: Currency at risk
        side: Explicit direction; None falls back to the tp1 heuristic
    """

    entry_price: float
    stop_loss: float
    risk_percent: float
    account_size: float
    tp1: float
    tp2: float
    tp3: float
    position_size: float = 0.0
    risk_amount: float = 0.0
    side: Optional[TradeSide] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "side", TradeSide.parse(self.side))

    @property
    def direction(self) -> TradeSide:
        if self.side is not None:
            return self.side
        return infer_trade_side(self.entry_price, self.tp1)

    @property
    def is_long(self) -> bool:
        return self.direction is TradeSide.LONG

    @property
    def risk_per_unit(self) -> float:
        return abs(self.entry_price - self.stop_loss)

    @property
    def reward_to_risk(self) -> float:
        """Distance to TP1 over distance to the stop, 0 when unsizeable."""
        if self.risk_per_unit == 0:
            return 0.0
        return abs(self.tp1 - self.entry_price) / self.risk_per_unit


@dataclass(frozen=True)
class TradeStatus:
    """Lifecycle state attached to a planned trade.

    Hit flags only ever go from False to True, ``current_sl`` only moves
    toward profit and a closed trade never reopens. The constructor
    rejects any combination that breaks the hit ordering.
    """

    is_active: bool = True
    tp1_hit: bool = False
    tp2_hit: bool = False
    tp3_hit: bool = False
    current_sl: float = 0.0
    trailing_stop_enabled: bool = False
    trailing_stop_percent: float = 3.0
    stopped_out: bool = False

    def __post_init__(self) -> None:
        if self.tp2_hit and not self.tp1_hit:
            raise InvalidTradeStateError("TP2 cannot be hit before TP1")
        if self.tp3_hit and not self.tp2_hit:
            raise InvalidTradeStateError("TP3 cannot be hit before TP2")
        if self.tp3_hit and self.is_active:
            raise InvalidTradeStateError("A trade that hit TP3 cannot be active")
        if self.stopped_out and self.is_active:
            raise InvalidTradeStateError("A stopped-out trade cannot be active")
        if self.stopped_out and self.tp3_hit:
            raise InvalidTradeStateError("A trade cannot both hit TP3 and be stopped out")
        if self.trailing_stop_percent < 0:
            raise InvalidTradeStateError("Trailing stop percent cannot be negative")

    @classmethod
    def planned(cls, stop_loss: float, trailing_stop_percent: float = 3.0) -> "TradeStatus":
        return cls(current_sl=stop_loss, trailing_stop_percent=trailing_stop_percent)

    def is_hit(self, level: TakeProfitLevel) -> bool:
        return (self.tp1_hit, self.tp2_hit, self.tp3_hit)[level.value - 1]


@dataclass(frozen=True)
class Trade:
    """A planned trade: setup, lifecycle status and identity."""

    setup: TradeSetup
    status: TradeStatus
    id: str = field(default_factory=lambda: f"trade_{uuid.uuid4().hex[:12]}")
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    symbol: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def create(
        cls,
        setup: TradeSetup,
        trailing_stop_percent: float = 3.0,
        symbol: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> "Trade":
        """Open a new trade in the PLANNED state with the stop at its initial level."""
        return cls(
            setup=setup,
            status=TradeStatus.planned(setup.stop_loss, trailing_stop_percent),
            symbol=symbol.upper() if symbol else None,
            notes=notes,
        )

    def with_status(self, status: TradeStatus) -> "Trade":
        return replace(self, status=status)

    @property
    def state(self) -> TradeState:
        status = self.status
        if status.stopped_out:
            return TradeState.STOPPED_OUT
        if status.tp3_hit:
            return TradeState.CLOSED
        if status.tp2_hit:
            return TradeState.TP2_HIT
        if status.tp1_hit:
            return TradeState.TP1_HIT
        return TradeState.PLANNED

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def direction(self) -> TradeSide:
        return self.setup.direction

    @property
    def progress_percent(self) -> int:
        """Dashboard progress: 33 per early tier and 34 for the last."""
        status = self.status
        return (33 if status.tp1_hit else 0) + (33 if status.tp2_hit else 0) + (
            34 if status.tp3_hit else 0
        )

    def target_price(self, level: TakeProfitLevel) -> float:
        return (self.setup.tp1, self.setup.tp2, self.setup.tp3)[level.value - 1]

    def get_trade_summary(self) -> dict:
        """Flat summary for display or logging."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "side": self.direction.value,
            "state": self.state.value,
            "entry_price": self.setup.entry_price,
            "current_sl": self.status.current_sl,
            "position_size": self.setup.position_size,
            "risk_amount": self.setup.risk_amount,
            "trailing_stop_enabled": self.status.trailing_stop_enabled,
            "progress_percent": self.progress_percent,
            "created_at": self.created_at.isoformat(),
        }
