"""
Trade setup validation.

Every rule runs on its own and appends its message when violated, so the
caller gets the full list of problems in one pass. An empty list means
the plan may be submitted.

Direction comes from the explicit ``side`` when one is set. Otherwise it
is inferred from TP1 relative to entry (TP1 above entry means long), the
legacy behaviour of plans that carry no side field.
"""

import math
from typing import Any, List, Mapping, Optional, Union

from trade_discipline.trades.trade import (
    TradeDraft,
    TradeSetup,
    TradeSide,
    TradeValidationError,
    infer_trade_side,
)

MAX_RISK_PERCENT = 20.0

ENTRY_PRICE_REQUIRED = "Entry price must be greater than 0"
STOP_LOSS_REQUIRED = "Stop loss must be greater than 0"
RISK_PERCENT_OUT_OF_RANGE = "Risk percent must be greater than 0% and at most 20%"
ACCOUNT_SIZE_REQUIRED = "Account size must be greater than 0"
ENTRY_EQUALS_STOP = "Entry price and stop loss cannot be the same"
LONG_STOP_ABOVE_ENTRY = "For long positions, stop loss must be below entry price"
SHORT_STOP_BELOW_ENTRY = "For short positions, stop loss must be above entry price"
LONG_TARGETS_UNORDERED = "For long positions, TP levels must be: Entry < TP1 < TP2 < TP3"
SHORT_TARGETS_UNORDERED = "For short positions, TP levels must be: Entry > TP1 > TP2 > TP3"

SetupLike = Union[TradeDraft, TradeSetup, Mapping[str, Any]]


class TradeSetupValidationError(TradeValidationError):
    """Raised when a plan is submitted with validation errors.

    Attributes:
        errors: The ordered validation messages
    """

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid trade setup")


def _as_draft(setup: SetupLike) -> TradeDraft:
    if isinstance(setup, TradeDraft):
        return setup
    if isinstance(setup, TradeSetup):
        return TradeDraft.from_setup(setup)
    return TradeDraft.from_dict(setup)


def is_entered(value: Optional[float]) -> bool:
    """Form semantics: a missing, zero or non-finite field counts as not entered."""
    return value is not None and math.isfinite(value) and value != 0


def resolve_side(draft: TradeDraft) -> Optional[TradeSide]:
    """Explicit side first, then the TP1 heuristic, else undetermined."""
    if draft.side is not None:
        return draft.side
    if is_entered(draft.entry_price) and is_entered(draft.tp1):
        return infer_trade_side(draft.entry_price, draft.tp1)
    return None


def validate_trade_setup(setup: SetupLike) -> List[str]:
    """Check a (possibly partial) trade plan.

    Args:
        setup: A TradeDraft, a TradeSetup, or a form mapping with
            snake_case or camelCase keys

    Returns:
        List[str]: Violated-rule messages in rule order; empty when valid
    """
    draft = _as_draft(setup)
    errors: List[str] = []

    entry = draft.entry_price
    stop = draft.stop_loss
    risk = draft.risk_percent

    if not is_entered(entry) or entry <= 0:
        errors.append(ENTRY_PRICE_REQUIRED)

    if not is_entered(stop) or stop <= 0:
        errors.append(STOP_LOSS_REQUIRED)

    if not is_entered(risk) or risk <= 0 or risk > MAX_RISK_PERCENT:
        errors.append(RISK_PERCENT_OUT_OF_RANGE)

    if not is_entered(draft.account_size) or draft.account_size <= 0:
        errors.append(ACCOUNT_SIZE_REQUIRED)

    if is_entered(entry) and is_entered(stop) and entry == stop:
        errors.append(ENTRY_EQUALS_STOP)

    side = resolve_side(draft)
    if side is None or not is_entered(entry):
        return errors

    if is_entered(stop):
        if side is TradeSide.LONG and stop >= entry:
            errors.append(LONG_STOP_ABOVE_ENTRY)
        if side is TradeSide.SHORT and stop <= entry:
            errors.append(SHORT_STOP_BELOW_ENTRY)

    tp1, tp2, tp3 = draft.tp1, draft.tp2, draft.tp3
    if is_entered(tp1) and is_entered(tp2) and is_entered(tp3):
        if side is TradeSide.LONG:
            if not entry < tp1 < tp2 < tp3:
                errors.append(LONG_TARGETS_UNORDERED)
        elif not entry > tp1 > tp2 > tp3:
            errors.append(SHORT_TARGETS_UNORDERED)

    return errors
