"""
Configuration manager for the trade discipline assistant.

Loads planning defaults, profit goals, prop-firm limits and logging
settings from environment variables or INI files. Loaders are injected
into the ConfigManager so callers can swap the source without touching
the consumers.
"""

import configparser
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Custom exception for configuration-related errors."""


class IConfigLoader:
    """Interface for configuration loading strategies."""

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from source.

        Returns:
            Dict[str, Any]: Configuration dictionary

        Raises:
            ConfigurationError: If configuration loading fails
        """
        raise NotImplementedError


def _to_float(raw: Any, key: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid numeric value for {key}: {raw!r}") from e


def _to_int(raw: Any, key: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid integer value for {key}: {raw!r}") from e


class EnvConfigLoader(IConfigLoader):
    """Loads configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Optional[str] = None) -> None:
        """
        Initialize environment configuration loader.

        Args:
            env_file_path: Optional path to .env file
        """
        self._env_file_path = env_file_path

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Returns:
            Dict[str, Any]: Configuration from environment

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        if self._env_file_path:
            load_dotenv(self._env_file_path)
        else:
            load_dotenv()

        env = os.getenv
        return {
            # Logging
            "log_level": env("LOG_LEVEL", "INFO"),
            "log_dir": env("LOG_DIR"),
            # Trade planning
            "default_risk_percent": _to_float(
                env("DEFAULT_RISK_PERCENT", "2.0"), "DEFAULT_RISK_PERCENT"
            ),
            "trailing_stop_percent": _to_float(
                env("TRAILING_STOP_PERCENT", "3.0"), "TRAILING_STOP_PERCENT"
            ),
            # Profit goals
            "daily_profit_goal": _to_float(
                env("DAILY_PROFIT_GOAL", "1000"), "DAILY_PROFIT_GOAL"
            ),
            "weekly_profit_goal": _to_float(
                env("WEEKLY_PROFIT_GOAL", "7000"), "WEEKLY_PROFIT_GOAL"
            ),
            "monthly_profit_goal": _to_float(
                env("MONTHLY_PROFIT_GOAL", "20000"), "MONTHLY_PROFIT_GOAL"
            ),
            "total_profit_goal": _to_float(
                env("TOTAL_PROFIT_GOAL", "50000"), "TOTAL_PROFIT_GOAL"
            ),
            # Funded account
            "funded_starting_balance": _to_float(
                env("FUNDED_STARTING_BALANCE", "100000"), "FUNDED_STARTING_BALANCE"
            ),
            "funded_risk_per_trade": _to_float(
                env("FUNDED_RISK_PER_TRADE", "0.5"), "FUNDED_RISK_PER_TRADE"
            ),
            "max_daily_loss": _to_float(env("MAX_DAILY_LOSS", "5000"), "MAX_DAILY_LOSS"),
            "max_total_drawdown": _to_float(
                env("MAX_TOTAL_DRAWDOWN", "10000"), "MAX_TOTAL_DRAWDOWN"
            ),
            "max_trades_per_day": _to_int(
                env("MAX_TRADES_PER_DAY", "10"), "MAX_TRADES_PER_DAY"
            ),
            "journal_csv_path": env("JOURNAL_CSV_PATH"),
        }


class IniConfigLoader(IConfigLoader):
    """Loads configuration from INI configuration files."""

    def __init__(self, config_file_path: str) -> None:
        """
        Initialize INI configuration loader.

        Args:
            config_file_path: Path to configuration INI file
        """
        self._config_file_path = Path(config_file_path)

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from INI file.

        Returns:
            Dict[str, Any]: Configuration from INI file

        Raises:
            ConfigurationError: If config file is missing or invalid
        """
        if not self._config_file_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self._config_file_path}"
            )

        config = configparser.ConfigParser()
        try:
            config.read(self._config_file_path)

            return {
                "log_level": config.get("logging", "log_level", fallback="INFO"),
                "log_dir": config.get("logging", "log_dir", fallback=None),
                "default_risk_percent": config.getfloat(
                    "planning", "default_risk_percent", fallback=2.0
                ),
                "trailing_stop_percent": config.getfloat(
                    "planning", "trailing_stop_percent", fallback=3.0
                ),
                "daily_profit_goal": config.getfloat("goals", "daily", fallback=1000.0),
                "weekly_profit_goal": config.getfloat("goals", "weekly", fallback=7000.0),
                "monthly_profit_goal": config.getfloat(
                    "goals", "monthly", fallback=20000.0
                ),
                "total_profit_goal": config.getfloat("goals", "total", fallback=50000.0),
                "funded_starting_balance": config.getfloat(
                    "funded_account", "starting_balance", fallback=100000.0
                ),
                "funded_risk_per_trade": config.getfloat(
                    "funded_account", "risk_per_trade", fallback=0.5
                ),
                "max_daily_loss": config.getfloat(
                    "funded_account", "max_daily_loss", fallback=5000.0
                ),
                "max_total_drawdown": config.getfloat(
                    "funded_account", "max_total_drawdown", fallback=10000.0
                ),
                "max_trades_per_day": config.getint(
                    "funded_account", "max_trades_per_day", fallback=10
                ),
                "journal_csv_path": config.get(
                    "funded_account", "journal_csv_path", fallback=None
                ),
            }
        except (configparser.Error, ValueError) as e:
            raise ConfigurationError(
                f"Invalid configuration file {self._config_file_path}: {e}"
            ) from e


class ConfigManager:
    """
    Central configuration manager for the trade discipline assistant.

    Groups raw settings into the sections consumed by the planner, the
    lifecycle, the funded account manager and the logger.
    """

    def __init__(self, config_loader: IConfigLoader) -> None:
        """
        Initialize configuration manager with a config loader.

        Args:
            config_loader: Implementation of IConfigLoader interface
        """
        self._config_loader = config_loader
        self._config: Dict[str, Any] = {}
        self._is_loaded = False

    def load_configuration(self) -> None:
        """
        Load configuration using the injected config loader.

        Raises:
            ConfigurationError: If configuration loading fails
        """
        try:
            self._config = self._config_loader.load_config()
            self._is_loaded = True
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Any: Configuration value

        Raises:
            ConfigurationError: If configuration not loaded
        """
        if not self._is_loaded:
            raise ConfigurationError(
                "Configuration not loaded. Call load_configuration() first."
            )

        value = self._config.get(key)
        return default if value is None else value

    def get_planning_config(self) -> Dict[str, float]:
        """
        Get trade planning defaults.

        Returns:
            Dict[str, float]: Default risk percent and trailing stop percent
        """
        return {
            "default_risk_percent": self.get_config_value("default_risk_percent", 2.0),
            "trailing_stop_percent": self.get_config_value("trailing_stop_percent", 3.0),
        }

    def get_profit_goals_config(self) -> Dict[str, float]:
        """Get daily, weekly, monthly and total profit goals."""
        return {
            "daily": self.get_config_value("daily_profit_goal", 1000.0),
            "weekly": self.get_config_value("weekly_profit_goal", 7000.0),
            "monthly": self.get_config_value("monthly_profit_goal", 20000.0),
            "total": self.get_config_value("total_profit_goal", 50000.0),
        }

    def get_prop_firm_config(self) -> Dict[str, Any]:
        """
        Get funded account rules.

        Returns:
            Dict[str, Any]: Balance, risk and drawdown limits
        """
        return {
            "starting_balance": self.get_config_value("funded_starting_balance", 100000.0),
            "risk_per_trade": self.get_config_value("funded_risk_per_trade", 0.5),
            "daily_goal": self.get_config_value("daily_profit_goal", 1000.0),
            "max_daily_loss": self.get_config_value("max_daily_loss", 5000.0),
            "max_total_drawdown": self.get_config_value("max_total_drawdown", 10000.0),
            "profit_target": self.get_config_value("total_profit_goal", 50000.0),
            "max_trades_per_day": self.get_config_value("max_trades_per_day", 10),
            "journal_csv_path": self.get_config_value("journal_csv_path"),
        }

    def get_logging_config(self) -> Dict[str, Optional[str]]:
        """Get log level and directory; no directory means console-only logging."""
        return {
            "log_level": self.get_config_value("log_level", "INFO"),
            "log_dir": self.get_config_value("log_dir"),
        }


def create_config_manager(
    config_source: str = "env", config_path: Optional[str] = None
) -> ConfigManager:
    """
    Factory function to create ConfigManager with appropriate loader.

    Args:
        config_source: Configuration source type ('env' or 'ini')
        config_path: Optional .env or INI file path

    Returns:
        ConfigManager: Configured instance

    Raises:
        ValueError: If config_source is invalid
    """
    if config_source == "env":
        loader = EnvConfigLoader(config_path)
    elif config_source == "ini":
        loader = IniConfigLoader(config_path or "config.ini")
    else:
        raise ValueError(f"Unsupported config source: {config_source}")

    return ConfigManager(loader)
