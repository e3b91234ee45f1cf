"""
Core infrastructure: configuration, logging and the event hub.
"""

from .config_manager import ConfigManager, ConfigurationError, create_config_manager
from .event_hub import EventHub, EventHubInterface, EventType
from .logger import create_app_logger, get_module_logger

__all__ = [
    "ConfigManager",
    "ConfigurationError",
    "EventHub",
    "EventHubInterface",
    "EventType",
    "create_app_logger",
    "create_config_manager",
    "get_module_logger",
]
