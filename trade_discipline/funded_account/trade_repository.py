"""
Storage for the funded-account journal.

The account manager only depends on the TradeRepository interface; the
application decides whether logged trades live in memory for the
session or are appended to a CSV file that survives restarts.
"""

import csv
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from trade_discipline.core.logger import get_module_logger
from trade_discipline.funded_account.journal import LoggedTrade

CSV_FIELDNAMES = [
    "id",
    "timestamp",
    "symbol",
    "side",
    "entry_price",
    "stop_loss",
    "take_profit1",
    "take_profit2",
    "take_profit3",
    "outcome",
    "position_size",
    "risk_amount",
    "risk_reward",
    "pnl",
    "r_multiple",
]


class TradeRepositoryError(Exception):
    """Exception raised when the journal cannot be read or written."""


class TradeRepository(ABC):
    """Append-only store of logged trades."""

    @abstractmethod
    def add(self, trade: LoggedTrade) -> None:
        """Append ``trade`` to the journal."""

    @abstractmethod
    def list_recent(self, limit: Optional[int] = None) -> List[LoggedTrade]:
        """Return trades newest first, at most ``limit`` of them."""

    @abstractmethod
    def count(self) -> int:
        """Number of trades in the journal."""


class InMemoryTradeRepository(TradeRepository):
    """Session-scoped journal; gone when the process exits."""

    def __init__(self) -> None:
        self._trades: List[LoggedTrade] = []

    def add(self, trade: LoggedTrade) -> None:
        self._trades.append(trade)

    def list_recent(self, limit: Optional[int] = None) -> List[LoggedTrade]:
        newest_first = list(reversed(self._trades))
        return newest_first if limit is None else newest_first[:limit]

    def count(self) -> int:
        return len(self._trades)


class CsvTradeRepository(TradeRepository):
    """
    Journal persisted as a CSV file, one row per trade in insertion order.

    The file and its parent directory are created on first use with a
    header row. Reads parse the whole file; journals are small.
    """

    def __init__(self, csv_path: str) -> None:
        """
        Initialize the CSV repository.

        Args:
            csv_path: Journal file location

        Raises:
            TradeRepositoryError: If the file cannot be created
        """
        self._csv_path = Path(csv_path)
        self._logger = get_module_logger("trade_repository")
        self._initialize_csv_file()

    @property
    def csv_path(self) -> Path:
        return self._csv_path

    def _initialize_csv_file(self) -> None:
        try:
            self._csv_path.parent.mkdir(parents=True, exist_ok=True)
            if not self._csv_path.exists():
                with open(self._csv_path, "w", newline="", encoding="utf-8") as csvfile:
                    writer = csv.DictWriter(csvfile, fieldnames=CSV_FIELDNAMES)
                    writer.writeheader()
                self._logger.info(f"Created trade journal: {self._csv_path}")
        except OSError as e:
            raise TradeRepositoryError(
                f"Failed to initialize journal {self._csv_path}: {e}"
            ) from e

    def add(self, trade: LoggedTrade) -> None:
        try:
            with open(self._csv_path, "a", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=CSV_FIELDNAMES)
                writer.writerow(trade.to_record())
        except OSError as e:
            raise TradeRepositoryError(f"Failed to write trade {trade.id}: {e}") from e

        self._logger.debug(f"Journaled trade {trade.id}", extra={"trade_id": trade.id})

    def list_recent(self, limit: Optional[int] = None) -> List[LoggedTrade]:
        trades = list(reversed(self._read_all()))
        return trades if limit is None else trades[:limit]

    def count(self) -> int:
        return len(self._read_all())

    def _read_all(self) -> List[LoggedTrade]:
        try:
            with open(self._csv_path, newline="", encoding="utf-8") as csvfile:
                return [LoggedTrade.from_record(row) for row in csv.DictReader(csvfile)]
        except OSError as e:
            raise TradeRepositoryError(f"Failed to read journal {self._csv_path}: {e}") from e
        except (KeyError, ValueError) as e:
            raise TradeRepositoryError(f"Corrupt journal row in {self._csv_path}: {e}") from e
