"""
Driver data model.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DriverType(str, Enum):
    """Driver classification; selects the settlement rule set."""

    COMPANY_DRIVER = "company_driver"
    OWNER_OPERATOR = "owner_operator"


class DriverStatus(str, Enum):
    """Driver employment status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Driver(BaseModel):
    """A driver referenced by trips."""

    driver_id: str = Field(..., description="Unique driver identifier")
    name: str = Field(..., description="Driver full name")
    driver_type: DriverType = Field(..., description="Company driver or owner-operator")
    status: DriverStatus = Field(DriverStatus.ACTIVE, description="Active or inactive")

    # Contact
    phone: Optional[str] = None
    email: Optional[str] = None
    license_number: Optional[str] = None
