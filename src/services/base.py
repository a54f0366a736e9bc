"""
Base service class for settlement back-office services.

Provides common functionality:
- Configuration loading
- Structured logging
- Audit decision tracking and export
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field

from src.core.config import ConfigManager, SettlementRules, get_config


class AuditDecision(BaseModel):
    """
    Structured record of a settlement decision.

    Kept so every figure written to a trip can be traced back to its inputs.
    """

    timestamp: datetime
    service_name: str
    decision_type: str
    input_data: dict[str, Any]
    reasoning: str
    output_data: dict[str, Any]
    warnings: list[str] = Field(default_factory=list)
    execution_time_seconds: float


class BaseService(ABC):
    """
    Base class for settlement back-office services.

    Provides:
    - Configuration loading
    - Decision logging
    - Settlement rules
    """

    def __init__(
        self,
        service_name: str,
        config_manager: Optional[ConfigManager] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the base service.

        Args:
            service_name: Name of the service (e.g., "settlement", "trips")
            config_manager: Optional config manager (defaults to global instance)
            logger: Optional structured logger
        """
        self.service_name = service_name
        self.config_manager = config_manager or get_config()
        self.logger = logger or structlog.get_logger(service_name=service_name)

        self.rules: SettlementRules = self.config_manager.get_settlement_rules()

        # Decision history (audit trail)
        self.decision_history: list[AuditDecision] = []

        self.logger.info("service_initialized", service_name=service_name)

    def log_decision(self, decision: AuditDecision) -> None:
        """
        Record a decision and log it.

        Args:
            decision: AuditDecision instance with decision details
        """
        self.decision_history.append(decision)
        self.logger.info(
            "settlement_decision",
            decision_type=decision.decision_type,
            reasoning=decision.reasoning,
            warnings=len(decision.warnings),
            execution_time=decision.execution_time_seconds,
        )
        for warning in decision.warnings:
            self.logger.warning(
                "data_quality_warning",
                decision_type=decision.decision_type,
                warning=warning,
            )

    def export_decisions(self, filepath: Optional[str] = None) -> Path:
        """
        Export decision history to a JSON file.

        Args:
            filepath: Output path (defaults to AUDIT_EXPORT_DIR/<service>_decisions.json)

        Returns:
            Path written
        """
        if filepath is None:
            export_dir = Path(self.config_manager.env.audit_export_dir)
            export_dir.mkdir(parents=True, exist_ok=True)
            path = export_dir / f"{self.service_name}_decisions.json"
        else:
            path = Path(filepath)

        with open(path, "w") as f:
            decisions_dict = [d.model_dump(mode="json") for d in self.decision_history]
            json.dump(decisions_dict, f, indent=2, default=str)

        self.logger.info("decisions_exported", filepath=str(path), count=len(self.decision_history))
        return path

    @abstractmethod
    def execute(self, *args: Any, **kwargs: Any) -> Any:
        """
        Execute the service's primary function.

        Returns:
            Service-specific output
        """
        pass

    def __repr__(self) -> str:
        """String representation of the service."""
        return f"{self.__class__.__name__}(service_name='{self.service_name}')"
