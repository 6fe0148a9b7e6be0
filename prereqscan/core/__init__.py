"""
Ambient services shared by the scanner: settings, logging and exceptions.
"""

from .config import ScannerSettings, get_settings
from .errors import (
    BracketMismatchError,
    MatchError,
    PluginError,
    PrereqScanError,
    ScanError,
    ScanWarnings,
)
from .logging import ScanLogAdapter, get_context_logger, setup_logging

__all__ = [
    "ScannerSettings",
    "get_settings",
    "PrereqScanError",
    "ScanError",
    "BracketMismatchError",
    "MatchError",
    "PluginError",
    "ScanWarnings",
    "ScanLogAdapter",
    "get_context_logger",
    "setup_logging",
]
