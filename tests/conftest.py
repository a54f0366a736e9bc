"""
Pytest fixtures for the settlement test suite.

Provides:
- A config manager pointed at the repository's config/ directory
- Settlement and trip services backed by a fresh in-memory store
- Drivers of both types
- Load builders
"""

from decimal import Decimal
from pathlib import Path

import pytest

from src.core.config import ConfigManager
from src.data.models.driver import Driver, DriverType
from src.data.models.load import Load
from src.data.store import TripStore
from src.services.settlement import SettlementService
from src.services.trips import TripService

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


@pytest.fixture
def config_manager() -> ConfigManager:
    return ConfigManager(config_dir=CONFIG_DIR)


@pytest.fixture
def settlement_service(config_manager: ConfigManager) -> SettlementService:
    return SettlementService(config_manager=config_manager)


@pytest.fixture
def store() -> TripStore:
    return TripStore()


@pytest.fixture
def owner_operator() -> Driver:
    return Driver(driver_id="drv-oo", name="Sam Rivera", driver_type=DriverType.OWNER_OPERATOR)


@pytest.fixture
def company_driver() -> Driver:
    return Driver(driver_id="drv-cd", name="Alex Chen", driver_type=DriverType.COMPANY_DRIVER)


@pytest.fixture
def trip_service(
    config_manager: ConfigManager,
    store: TripStore,
    owner_operator: Driver,
    company_driver: Driver,
) -> TripService:
    service = TripService(store=store, config_manager=config_manager)
    service.add_driver(owner_operator)
    service.add_driver(company_driver)
    return service


def make_load(price, broker_fee="0", method="billing", load_id="L-1", notes=None) -> Load:
    """Build a load with string amounts converted to Decimal."""
    return Load(
        load_id=load_id,
        customer="Test Customer",
        vehicle="2020 Toyota Camry",
        price=Decimal(str(price)),
        broker_fee=Decimal(str(broker_fee)),
        payment_method=method,
        notes=notes,
    )
