"""
Services for the carrier settlement back office.

This module contains:
- Settlement: Audited trip and local order settlement
- Trips: Trip lifecycle (create, edit, merge orders, payment status, delete)
"""

from .base import AuditDecision, BaseService
from .settlement import SettlementService
from .trips import DriverPerformance, TripService

__all__ = [
    "AuditDecision",
    "BaseService",
    "SettlementService",
    "DriverPerformance",
    "TripService",
]
