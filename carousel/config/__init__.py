"""Configuration management for carousel."""

from .manager import ConfigManager
from .policy import FilterConfig, PolicyConfig
from .schemas import INVENTORY_SCHEMA, POLICY_SCHEMA
from .validator import ConfigValidationError, ConfigValidator

__all__ = [
    "ConfigManager",
    "ConfigValidationError",
    "ConfigValidator",
    "FilterConfig",
    "INVENTORY_SCHEMA",
    "POLICY_SCHEMA",
    "PolicyConfig",
]
