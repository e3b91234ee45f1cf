"""
Risk engine: position sizing, tiered take-profit allocation and profit potential.

All functions are pure and never raise on numeric input. A stop equal to
the entry yields a zero position size rather than an error; callers must
treat zero as "unsizeable" and refuse to open the trade.

Rounding is applied once, when results leave this module: 4 decimals for
sizes and 2 for currency amounts, half away from zero on the exact binary
value of the float.
"""

import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Tuple

from trade_discipline.core.logger import get_module_logger

# Share of the position closed at TP1, TP2 and TP3.
TP_ALLOCATION_WEIGHTS: Tuple[float, float, float] = (0.5, 0.3, 0.2)

SIZE_DECIMALS = 4
CURRENCY_DECIMALS = 2

logger = get_module_logger("risk_engine")


def round_half_up(value: float, places: int) -> float:
    """Round ``value`` to ``places`` decimals, ties away from zero.

    Works on the exact binary expansion of the float, so 1.005 (stored as
    1.00499999...) rounds down to 1.0.
    Non-finite values pass through untouched.
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PositionSize:
    """Sized position for a planned trade."""

    position_size: float
    risk_amount: float

    @property
    def is_sizeable(self) -> bool:
        return self.position_size > 0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class TPAllocations:
    """Units closed at each take-profit level."""

    tp1_allocation: float
    tp2_allocation: float
    tp3_allocation: float

    @property
    def total(self) -> float:
        return self.tp1_allocation + self.tp2_allocation + self.tp3_allocation

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.tp1_allocation, self.tp2_allocation, self.tp3_allocation)

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ProfitPotential:
    """Currency profit realised at each level if every target fills."""

    tp1_profit: float
    tp2_profit: float
    tp3_profit: float
    total_profit: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def calculate_position_size(
    entry_price: float, stop_loss: float, risk_percent: float, account_size: float
) -> PositionSize:
    """Size a position so a stop-out loses exactly the risk budget.

    Args:
        entry_price: Planned entry price
        stop_loss: Protective stop price
        risk_percent: Percent of the account to risk
        account_size: Account equity

    Returns:
        PositionSize: Units to trade and currency at risk. Units are 0 when
        entry and stop coincide.
    """
    risk_amount = account_size * risk_percent / 100
    risk_per_share = abs(entry_price - stop_loss)

    if risk_per_share > 0:
        position_size = risk_amount / risk_per_share
    else:
        logger.debug(
            f"Entry {entry_price} equals stop {stop_loss}, position is unsizeable"
        )
        position_size = 0.0

    return PositionSize(
        position_size=round_half_up(position_size, SIZE_DECIMALS),
        risk_amount=round_half_up(risk_amount, CURRENCY_DECIMALS),
    )


def calculate_tp_allocations(position_size: float) -> TPAllocations:
    """Split a position 50/30/20 across the three take-profit levels.

    The split is fixed. The three parts add back up to ``position_size``
    within float tolerance.
    """
    w1, w2, w3 = TP_ALLOCATION_WEIGHTS
    return TPAllocations(
        tp1_allocation=position_size * w1,
        tp2_allocation=position_size * w2,
        tp3_allocation=position_size * w3,
    )


def calculate_profit_potential(
    entry_price: float, tp1: float, tp2: float, tp3: float, position_size: float
) -> ProfitPotential:
    """Profit for each tier and in total if all three targets fill.

    Distances are absolute, so the same call serves long and short plans.
    Each tier is rounded to cents on its own and ``total_profit`` is the
    sum of those rounded tiers, not a re-rounding of the exact total.
    """
    allocations = calculate_tp_allocations(position_size)
    targets = (tp1, tp2, tp3)

    tier_profits = [
        round_half_up(abs(target - entry_price) * allocation, CURRENCY_DECIMALS)
        for target, allocation in zip(targets, allocations.as_tuple())
    ]
    # Summing rounded cents can still leave float noise such as .2999999.
    total_profit = round_half_up(sum(tier_profits), CURRENCY_DECIMALS)

    return ProfitPotential(
        tp1_profit=tier_profits[0],
        tp2_profit=tier_profits[1],
        tp3_profit=tier_profits[2],
        total_profit=total_profit,
    )
