"""Core modules for the monitor bot."""

from .config import BACKEND_DIR, BOT_NAME, MONITOR_DIR, MonitorSettings, get_settings
from .logging import setup_logging
from .notifier import OperatorNotifier
from .responses import send_followup, split_message

__all__ = [
    # Config
    "MonitorSettings",
    "get_settings",
    "BOT_NAME",
    # Paths
    "MONITOR_DIR",
    "BACKEND_DIR",
    # Services
    "OperatorNotifier",
    "send_followup",
    "split_message",
    # Logging
    "setup_logging",
]
