#!/usr/bin/env python3
"""
Initialize the carrier settlement back office.

This script sets up the project by:
- Checking the Python version
- Loading the .env file
- Validating config/config.yaml and its settlement rates
- Creating the audit export directory
- Checking required packages
"""

import os
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

import yaml
from dotenv import load_dotenv

RATE_KEYS = [
    "dispatch_fee_rate",
    "company_driver_rate",
    "owner_operator_rate",
    "local_dispatch_fee_rate",
]


def check_python_version() -> bool:
    """Verify Python version is 3.12 or higher."""
    if sys.version_info < (3, 12):
        print(f"❌ Python 3.12+ required. Current version: {sys.version}")
        return False
    print(f"✅ Python version: {sys.version_info.major}.{sys.version_info.minor}")
    return True


def load_env() -> bool:
    """Load .env if present and report the logging settings."""
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)
        print("✅ .env file loaded")
    else:
        print("⚠️  .env file not found, using defaults (cp .env.example .env to customize)")

    print(f"   LOG_LEVEL={os.getenv('LOG_LEVEL', 'INFO')}")
    print(f"   LOG_JSON={os.getenv('LOG_JSON', 'true')}")
    return True


def check_config_file() -> bool:
    """Validate config.yaml exists and its rates are fractions between 0 and 1."""
    config_dir = Path(os.getenv("SETTLEMENT_CONFIG_DIR", "config"))
    config_path = config_dir / "config.yaml"
    if not config_path.exists():
        print(f"❌ Business configuration not found: {config_path}")
        return False

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"❌ Error parsing config.yaml: {e}")
        return False

    if not config:
        print("❌ config.yaml is empty")
        return False

    settlement = config.get("settlement", {})
    for key in RATE_KEYS:
        if key not in settlement:
            print(f"⚠️  {key} not set, default will be used")
            continue
        try:
            rate = Decimal(str(settlement[key]))
        except InvalidOperation:
            print(f"❌ {key} is not a number: {settlement[key]!r}")
            return False
        if not Decimal("0") <= rate <= Decimal("1"):
            print(f"❌ {key} must be between 0 and 1, got {rate}")
            return False

    print("✅ config.yaml is valid")
    return True


def create_data_directories() -> bool:
    """Create the audit export directory."""
    audit_dir = Path(os.getenv("AUDIT_EXPORT_DIR", "data/audit"))
    audit_dir.mkdir(parents=True, exist_ok=True)
    print(f"✅ Audit export directory: {audit_dir}")
    return True


def test_imports() -> bool:
    """Test that critical packages can be imported."""
    required_packages = [
        "pydantic",
        "pydantic_settings",
        "structlog",
        "yaml",
        "dotenv",
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print(f"❌ Missing packages: {', '.join(missing)}")
        print("   Run: pip install -e .[test]")
        return False

    print("✅ All required packages installed")
    return True


def display_next_steps():
    """Show user what to do next."""
    print("\n" + "=" * 60)
    print("🎉 Project initialization complete!")
    print("=" * 60)
    print("\nNext steps:")
    print("\n1. Review settlement rates in config/config.yaml")
    print("2. Run the example settlement:")
    print("   python -m src.services.settlement")
    print("3. Run the tests:")
    print("   pytest")
    print("\n" + "=" * 60)


def main():
    """Run all initialization checks."""
    print("=" * 60)
    print("Carrier Settlement - Initialization")
    print("=" * 60)
    print()

    checks = [
        ("Python version", check_python_version),
        ("Environment", load_env),
        ("Configuration file", check_config_file),
        ("Data directories", create_data_directories),
        ("Package imports", test_imports),
    ]

    passed = 0
    failed = 0

    for name, check_func in checks:
        print(f"\nChecking {name}...")
        if check_func():
            passed += 1
        else:
            failed += 1

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    if failed == 0:
        display_next_steps()
        return 0
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
