"""
Configuration management for the carrier settlement back office.

Handles loading and accessing:
- Business configuration (config.yaml): settlement rates
- Environment variables (logging)
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = structlog.get_logger(__name__)


class SettlementRules(BaseModel):
    """Rates applied by the settlement engine."""

    dispatch_fee_rate: Decimal = Decimal("0.10")
    company_driver_rate: Decimal = Decimal("0.32")
    owner_operator_rate: Decimal = Decimal("0.90")
    local_dispatch_fee_rate: Decimal = Decimal("0.10")


class EnvironmentSettings(BaseSettings):
    """Environment variables configuration."""

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(True, alias="LOG_JSON")
    audit_export_dir: str = Field("data/audit", alias="AUDIT_EXPORT_DIR")

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


class ConfigManager:
    """
    Central configuration manager for the settlement back office.

    Loads and provides access to:
    - Business configuration from config/config.yaml
    - Environment variables from .env
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_dir: Optional path to config directory. Defaults to project root/config.
        """
        if config_dir is None:
            env_dir = os.getenv("SETTLEMENT_CONFIG_DIR")
            if env_dir:
                config_dir = Path(env_dir)
            else:
                project_root = Path(__file__).parent.parent.parent
                config_dir = project_root / "config"

        self.config_dir = config_dir
        self._business_config: Optional[dict[str, Any]] = None
        self._env_settings: Optional[EnvironmentSettings] = None

    @property
    def business_config(self) -> dict[str, Any]:
        """Load and return business configuration from config.yaml."""
        if self._business_config is None:
            config_path = self.config_dir / "config.yaml"
            if not config_path.exists():
                # Rules fall back to their model defaults
                logger.warning("business_config_missing", path=str(config_path))
                self._business_config = {}
            else:
                with open(config_path, "r") as f:
                    self._business_config = yaml.safe_load(f) or {}
        return self._business_config

    @property
    def env(self) -> EnvironmentSettings:
        """Load and return environment settings."""
        if self._env_settings is None:
            self._env_settings = EnvironmentSettings()
        return self._env_settings

    def get_settlement_rules(self) -> SettlementRules:
        """Get settlement rates from business config."""
        return SettlementRules(**self.business_config.get("settlement", {}))


# Global config instance
_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """
    Get the global configuration manager instance.

    Returns:
        ConfigManager singleton instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
