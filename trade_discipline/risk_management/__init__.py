"""
Risk management: position sizing, take-profit allocation, profit
potential, setup validation and trade planning.
"""

from .risk_engine import (
    TP_ALLOCATION_WEIGHTS,
    PositionSize,
    ProfitPotential,
    TPAllocations,
    calculate_position_size,
    calculate_profit_potential,
    calculate_tp_allocations,
    round_half_up,
)
from .setup_validator import TradeSetupValidationError, is_entered, validate_trade_setup
from .trade_planner import TradePlanner, create_trade_planner

__all__ = [
    "TP_ALLOCATION_WEIGHTS",
    "PositionSize",
    "ProfitPotential",
    "TPAllocations",
    "TradePlanner",
    "TradeSetupValidationError",
    "calculate_position_size",
    "calculate_profit_potential",
    "calculate_tp_allocations",
    "create_trade_planner",
    "is_entered",
    "round_half_up",
    "validate_trade_setup",
]
