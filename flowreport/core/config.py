"""
Runtime configuration.
Environment variables (optionally from a .env file) plus the YAML validator-module map.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent.parent

# Correlation cache
DB_PATH = os.getenv("DB_PATH", "./data/correlation.db")
CACHE_TTL_SEC = int(os.getenv("CACHE_TTL_SEC", "3600"))

# Raw record storage backend
STORAGE_URL = os.getenv("STORAGE_URL", "")
STORAGE_TIMEOUT_SEC = float(os.getenv("STORAGE_TIMEOUT_SEC", "30"))

# Utility report mode (external log validation service)
UTILITY = os.getenv("UTILITY", "false").lower() == "true"
VALIDATION_URL = os.getenv("VALIDATION_URL", "https://log-validation.ondc.org/api/validate/trv")
VALIDATION_TIMEOUT_SEC = float(os.getenv("VALIDATION_TIMEOUT_SEC", "30"))
UTILITY_DOMAIN = os.getenv("UTILITY_DOMAIN", "ONDC:TRV11")
UTILITY_VERSION = os.getenv("UTILITY_VERSION", "2.0.1")

# Validation engine
VALIDATION_CONFIG_PATH = os.getenv(
    "VALIDATION_CONFIG_PATH", str(PACKAGE_DIR / "config" / "validation_config.yaml")
)
FLOW_WORKERS = int(os.getenv("FLOW_WORKERS", "4"))
ENABLED_RULES = os.getenv("ENABLED_RULES", "")  # comma separated rule names

# Shared key clients send in the x-api-key header
API_SERVICE_KEY = os.getenv("API_SERVICE_KEY", "")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

VERSION = "1.0.0"

# Names accepted by ENABLED_RULES; every rule is off unless listed
KNOWN_RULES = [
    "fulfillment_ids_unique",
    "gps_precision",
    "parent_stop_linkage",
    "breakup_titles",
    "fulfillment_count",
    "authorization_validity",
    "on_select_quantity",
]


class ValidationConfig(BaseModel):
    """Validator locators per domain, keyed by protocol version or 'default'."""
    validation_modules: Dict[str, Dict[str, str]] = Field(default_factory=dict, alias="validationModules")


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_api_service_key() -> str:
    """Get the key required on protected routes."""
    return os.getenv("API_SERVICE_KEY", API_SERVICE_KEY)


def is_utility_mode():
    """Check if reports go through the external log validation service."""
    return os.getenv("UTILITY", "false").lower() == "true"


def get_db_path() -> str:
    """Get the correlation cache database path."""
    return os.getenv("DB_PATH", DB_PATH)


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or get_db_path()).parent.mkdir(parents=True, exist_ok=True)


def get_storage_url() -> str:
    """Get the base URL raw records are fetched from."""
    return os.getenv("STORAGE_URL", STORAGE_URL).rstrip("/")


def get_validation_url() -> str:
    """Get the external log validation endpoint."""
    return os.getenv("VALIDATION_URL", VALIDATION_URL)


def get_enabled_rules() -> List[str]:
    """Get the optional assertion rules switched on for leaf validators."""
    raw = os.getenv("ENABLED_RULES", ENABLED_RULES)
    return [name.strip() for name in raw.split(",") if name.strip()]


def is_rule_enabled(name: str) -> bool:
    """Check if a named optional rule is switched on."""
    return name in get_enabled_rules()


@lru_cache(maxsize=None)
def load_validation_config(path: str = None) -> ValidationConfig:
    """Load and cache the validator-module configuration file."""
    config_path = Path(path or os.getenv("VALIDATION_CONFIG_PATH", VALIDATION_CONFIG_PATH))
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Unable to load validation config from {config_path}: {e}") from e

    try:
        return ValidationConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid validation config in {config_path}: {e}") from e


def validate_config() -> List[str]:
    """Validate runtime configuration and return any issues."""
    issues = []

    if FLOW_WORKERS < 1:
        issues.append("FLOW_WORKERS must be >= 1")

    if CACHE_TTL_SEC < 1:
        issues.append("CACHE_TTL_SEC must be >= 1")

    if not get_api_service_key():
        issues.append("API_SERVICE_KEY is not set")

    if not is_utility_mode() and not get_storage_url():
        issues.append("STORAGE_URL is not set")

    for rule in get_enabled_rules():
        if rule not in KNOWN_RULES:
            issues.append(f"Unknown rule in ENABLED_RULES: {rule}")

    return issues
