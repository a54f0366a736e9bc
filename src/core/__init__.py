"""
Core infrastructure for the carrier settlement back office.

This module provides:
- Config: Configuration management
- Logging: structlog setup
- Exceptions: Domain error hierarchy
"""

from .config import ConfigManager, SettlementRules, get_config
from .logging import configure_logging

__all__ = ["ConfigManager", "SettlementRules", "get_config", "configure_logging"]
