"""
Command-line entry point for the trade discipline assistant.

``plan`` validates and sizes a trade and prints its scale-out plan.
``summary`` prints performance statistics for a CSV trade journal.
"""

import argparse
import sys
from typing import List, Optional

from trade_discipline.analysis.performance_summary import (
    load_journal_csv,
    summarize_frame,
)
from trade_discipline.core.config_manager import ConfigurationError, create_config_manager
from trade_discipline.core.event_hub import EventHub
from trade_discipline.core.logger import create_app_logger
from trade_discipline.risk_management.risk_engine import (
    calculate_profit_potential,
    calculate_tp_allocations,
)
from trade_discipline.risk_management.setup_validator import TradeSetupValidationError
from trade_discipline.risk_management.trade_planner import create_trade_planner
from trade_discipline.trades.trade import TradeDraft, TradeValidationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trade-discipline",
        description="Plan, size and review discretionary trades.",
    )
    parser.add_argument(
        "--config-source", choices=("env", "ini"), default="env",
        help="Where to read settings from (default: env)",
    )
    parser.add_argument("--config-path", help="Optional .env or INI file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Validate and size a trade plan")
    plan.add_argument("--entry", type=float, required=True, help="Entry price")
    plan.add_argument("--stop", type=float, required=True, help="Stop loss price")
    plan.add_argument("--tp1", type=float, required=True)
    plan.add_argument("--tp2", type=float, required=True)
    plan.add_argument("--tp3", type=float, required=True)
    plan.add_argument("--account", type=float, required=True, help="Account size")
    plan.add_argument("--risk", type=float, help="Risk percent (default from config)")
    plan.add_argument("--side", choices=("long", "short"), help="Explicit direction")
    plan.add_argument("--symbol", help="Instrument symbol")

    summary = subparsers.add_parser("summary", help="Summarize a CSV trade journal")
    summary.add_argument("journal", help="Path to the journal CSV")

    return parser


def run_plan(args: argparse.Namespace, config_manager) -> int:
    planner = create_trade_planner(config_manager, EventHub())
    draft = TradeDraft(
        entry_price=args.entry,
        stop_loss=args.stop,
        risk_percent=args.risk,
        account_size=args.account,
        tp1=args.tp1,
        tp2=args.tp2,
        tp3=args.tp3,
        side=args.side,
    )

    try:
        trade = planner.plan(draft, symbol=args.symbol)
    except TradeSetupValidationError as e:
        print("Trade plan rejected:")
        for error in e.errors:
            print(f"  - {error}")
        return 1

    setup = trade.setup
    allocations = calculate_tp_allocations(setup.position_size)
    profits = calculate_profit_potential(
        setup.entry_price, setup.tp1, setup.tp2, setup.tp3, setup.position_size
    )

    print(f"{trade.direction.value.upper()} {trade.symbol or ''}".rstrip())
    print(f"Position size:  {setup.position_size:.4f}")
    print(f"Risk amount:    ${setup.risk_amount:,.2f}")
    print(f"Reward/risk:    {setup.reward_to_risk:.2f}R to TP1")
    for label, target, allocation, profit in zip(
        ("TP1", "TP2", "TP3"),
        (setup.tp1, setup.tp2, setup.tp3),
        allocations.as_tuple(),
        (profits.tp1_profit, profits.tp2_profit, profits.tp3_profit),
    ):
        print(f"{label} @ {target:<12g} close {allocation:.4f}  +${profit:,.2f}")
    print(f"Total potential: ${profits.total_profit:,.2f}")
    return 0


def run_summary(args: argparse.Namespace) -> int:
    summary = summarize_frame(load_journal_csv(args.journal))
    print(f"Trades:        {summary.total_trades}")
    print(f"Win rate:      {summary.win_rate:.1f}%")
    print(f"Total P&L:     ${summary.total_pnl:,.2f}")
    print(f"Average R:     {summary.average_r:+.2f}")
    print(f"Expectancy:    ${summary.expectancy:,.2f}")
    print(f"Max drawdown:  ${summary.max_drawdown:,.2f}")
    for day, pnl in summary.daily_pnl.items():
        print(f"  {day}: ${pnl:+,.2f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main application entry point.

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    args = build_parser().parse_args(argv)

    try:
        config_manager = create_config_manager(args.config_source, args.config_path)
        config_manager.load_configuration()
        logging_config = config_manager.get_logging_config()
        create_app_logger(logging_config["log_level"], logging_config["log_dir"])

        if args.command == "plan":
            return run_plan(args, config_manager)
        return run_summary(args)

    except ConfigurationError as e:
        print(f"FATAL: Configuration error: {e}", file=sys.stderr)
        return 1
    except TradeValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
