"""Configuration validation for carousel."""

from datetime import date
from typing import Any, Dict, List

import jsonschema
import yaml

from carousel.utils.errors import ConfigurationError, create_error_suggestions, format_validation_errors
from carousel.utils.timeutil import parse_duration, parse_timestamp

from .schemas import INVENTORY_SCHEMA, POLICY_SCHEMA


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            f"Configuration validation failed: {'; '.join(errors)}",
            details=format_validation_errors(errors),
            suggestions=create_error_suggestions("configuration_invalid"),
        )


class ConfigValidator:
    """Validates carousel policy and inventory documents."""

    def validate_policy(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate a policy configuration.

        Args:
            config: Policy dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = self._schema_errors(config, POLICY_SCHEMA)

        regeneration = config.get("regeneration") if isinstance(config, dict) else None
        if isinstance(regeneration, dict):
            for key in ("older_than", "expires_within"):
                if key in regeneration:
                    errors.extend(self._validate_duration(key, regeneration[key]))

        return errors

    def validate_inventory(self, inventory: Dict[str, Any]) -> List[str]:
        """
        Validate an inventory snapshot.

        Args:
            inventory: Inventory dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = self._schema_errors(inventory, INVENTORY_SCHEMA)

        if isinstance(inventory, dict) and isinstance(inventory.get("credentials"), list):
            seen = set()
            for index, credential in enumerate(inventory["credentials"]):
                if not isinstance(credential, dict):
                    continue
                errors.extend(self._validate_timestamps(index, credential))
                if not credential.get("id"):
                    continue
                if credential["id"] in seen:
                    errors.append(f"Duplicate credential id: {credential['id']}")
                seen.add(credential["id"])

        return errors

    def validate_config_file(self, file_path: str, config_type: str = "auto") -> List[str]:
        """
        Validate a configuration file.

        Args:
            file_path: Path to the file
            config_type: Type of document ('policy', 'inventory', 'auto')

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        try:
            with open(file_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError:
            return [f"Configuration file not found: {file_path}"]
        except yaml.YAMLError as e:
            return [f"YAML parsing error: {e}"]

        if config is None:
            return ["Configuration file is empty"]

        if config_type == "auto":
            if isinstance(config, dict) and "credentials" in config:
                config_type = "inventory"
            else:
                config_type = "policy"

        if config_type == "policy":
            return self.validate_policy(config)
        elif config_type == "inventory":
            return self.validate_inventory(config)
        return [f"Unknown configuration type: {config_type}"]

    def _schema_errors(self, document: Any, schema: Dict[str, Any]) -> List[str]:
        validator = jsonschema.Draft7Validator(schema)
        errors = []
        for error in sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path]):
            location = "/".join(str(part) for part in error.absolute_path)
            if location:
                errors.append(f"Schema validation failed at {location}: {error.message}")
            else:
                errors.append(f"Schema validation failed: {error.message}")
        return errors

    def _validate_duration(self, key: str, value: Any) -> List[str]:
        if not isinstance(value, str):
            return []
        try:
            parse_duration(value)
        except ValueError as e:
            return [f"{key}: {e}"]
        return []

    def _validate_timestamps(self, index: int, credential: Dict[str, Any]) -> List[str]:
        # YAML hands unquoted timestamps over as date or datetime objects
        errors = []
        for key in ("version_created_at", "expiry_date"):
            value = credential.get(key)
            if value is None or isinstance(value, date):
                continue
            if not isinstance(value, str):
                errors.append(f"credentials/{index}/{key}: expected a timestamp, got {value!r}")
                continue
            try:
                parse_timestamp(value)
            except ValueError as e:
                errors.append(f"credentials/{index}/{key}: {e}")
        return errors
