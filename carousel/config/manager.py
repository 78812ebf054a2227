"""Configuration and inventory loading for carousel."""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import yaml

from carousel.bosh.models import Variable
from carousel.credhub.models import CredentialRecord
from carousel.utils.errors import ConfigurationError, InventoryError, create_error_suggestions, format_validation_errors

from .policy import PolicyConfig
from .validator import ConfigValidationError, ConfigValidator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "carousel.yml"
CONFIG_ENV_VAR = "CAROUSEL_CONFIG"
INVENTORY_ENV_VAR = "CAROUSEL_INVENTORY"


class ConfigManager:
    """Loads the policy file and inventory snapshots."""

    def __init__(self, path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            path: Optional directory to look for the policy file in (defaults to current directory)
        """
        self.path = path or os.getcwd()
        self.validator = ConfigValidator()
        self._config_cache: Dict[str, Dict[str, Any]] = {}

    def get_config_path(self) -> Optional[str]:
        """Get the path of the policy file, if one exists."""
        from_env = os.environ.get(CONFIG_ENV_VAR)
        if from_env:
            return from_env

        candidate = os.path.join(self.path, DEFAULT_CONFIG_NAME)
        if os.path.exists(candidate):
            return candidate

        return None

    def load_config(self, config_path: Optional[str] = None, validate: bool = True) -> Dict[str, Any]:
        """
        Load the raw policy configuration.

        Args:
            config_path: Explicit policy file, defaults to the discovered one
            validate: Whether to validate the configuration

        Returns:
            Dict[str, Any]: Loaded configuration, empty when no file exists

        Raises:
            ConfigValidationError: If validation fails
            ConfigurationError: If an explicit config file doesn't exist
        """
        config_path = config_path or self.get_config_path()
        if not config_path:
            return {}

        if config_path in self._config_cache:
            return self._config_cache[config_path]

        try:
            config = self._read_yaml(config_path, ConfigurationError)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {config_path}") from e
        if config is None:
            config = {}

        if validate:
            errors = self.validator.validate_policy(config)
            if errors:
                raise ConfigValidationError(errors)

        self._config_cache[config_path] = config
        return config

    def load_policy(self, config_path: Optional[str] = None) -> PolicyConfig:
        """
        Load the policy as an immutable configuration value.

        Args:
            config_path: Explicit policy file, defaults to the discovered one

        Returns:
            PolicyConfig: Parsed policy (defaults when no file exists)
        """
        config = self.load_config(config_path)
        try:
            return PolicyConfig.from_dict(config)
        except ValueError as e:
            raise ConfigValidationError([str(e)]) from e

    def get_inventory_path(self, inventory_path: Optional[str] = None) -> str:
        """
        Resolve the inventory snapshot path.

        Raises:
            InventoryError: If no inventory was given
        """
        inventory_path = inventory_path or os.environ.get(INVENTORY_ENV_VAR)
        if not inventory_path:
            raise InventoryError(
                "No inventory snapshot given",
                suggestions=create_error_suggestions("inventory_missing"),
            )
        return inventory_path

    def load_inventory(self, inventory_path: Optional[str] = None) -> Tuple[List[CredentialRecord], List[Variable]]:
        """
        Load credential records and deployment variables from a snapshot file.

        The snapshot is a YAML or JSON document with ``credentials`` and
        ``variables`` lists.

        Args:
            inventory_path: Snapshot file, defaults to ``$CAROUSEL_INVENTORY``

        Returns:
            Tuple[List[CredentialRecord], List[Variable]]: Parsed inventory

        Raises:
            InventoryError: If the file is missing, malformed or invalid
        """
        inventory_path = self.get_inventory_path(inventory_path)

        try:
            inventory = self._read_yaml(inventory_path, InventoryError)
        except FileNotFoundError as e:
            raise InventoryError(f"Inventory file not found: {inventory_path}") from e

        if inventory is None:
            raise InventoryError(f"Inventory file is empty: {inventory_path}")

        errors = self.validator.validate_inventory(inventory)
        if errors:
            raise InventoryError(
                f"Invalid inventory: {inventory_path}",
                details=format_validation_errors(errors),
                suggestions=create_error_suggestions("inventory_invalid"),
            )

        records = []
        for data in inventory.get("credentials") or []:
            records.append(CredentialRecord.from_dict(data))

        variables = []
        for data in inventory.get("variables") or []:
            try:
                variables.append(Variable.from_dict(data))
            except ValueError as e:
                raise InventoryError(f"Invalid variable {data.get('name')}", details=str(e)) from e

        logger.debug("Read %d credentials and %d variables from %s", len(records), len(variables), inventory_path)
        return records, variables

    def clear_cache(self) -> None:
        """Clear configuration cache."""
        self._config_cache.clear()

    def _read_yaml(self, file_path: str, error_class: type) -> Any:
        try:
            with open(file_path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise error_class(f"Error parsing YAML file {file_path}", details=str(e)) from e
        except UnicodeDecodeError as e:
            raise error_class(f"File is not UTF-8 text: {file_path}", details=str(e)) from e
