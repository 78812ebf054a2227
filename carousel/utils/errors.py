"""Error handling utilities for carousel."""

import sys
import traceback
from typing import Optional

import click


class CarouselError(Exception):
    """Base exception for carousel errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(CarouselError):
    """Raised when the policy configuration is invalid or missing."""

    pass


class InventoryError(CarouselError):
    """Raised when an inventory snapshot cannot be read or parsed."""

    pass


class RefreshError(CarouselError):
    """Raised when the state graph cannot be rebuilt from the inventory."""

    pass


class FilterError(CarouselError):
    """Raised when a credential filter is configured with invalid input."""

    pass


class InvalidCredentialTypeError(FilterError):
    """Raised when an unknown credential type name is supplied."""

    def __init__(self, name: str, valid: Optional[list] = None):
        self.name = name
        valid = valid or []
        super().__init__(
            f"Invalid credential type: {name}",
            details=f"Expected one of: {', '.join(valid)}" if valid else None,
            suggestions=create_error_suggestions("invalid_credential_type"),
        )


# Generic exceptions worth a friendlier message when they escape a command
_GENERIC_ERRORS = [
    (
        FileNotFoundError,
        "File not found",
        ["Check the --inventory and --config paths", "Ensure the file exists and is readable"],
    ),
    (
        PermissionError,
        "Permission denied",
        ["Check the permissions of the inventory and policy files"],
    ),
    (
        IsADirectoryError,
        "Expected a file, got a directory",
        ["Point --inventory and --config at files, not directories"],
    ),
]


class ErrorHandler:
    """Prints errors to stderr in a form meant for operators."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Report an error, with details, suggestions and, when verbose, the traceback.

        Args:
            error: Exception to report
            context: What the command was doing when it failed
        """
        if not isinstance(error, CarouselError):
            error = self._wrap(error)

        click.echo(f"✗ {error.message}", err=True)
        if context:
            click.echo(f"Context: {context}", err=True)
        if error.details:
            click.echo(f"Details: {error.details}", err=True)
        if error.suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in error.suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Report ``error`` and exit with ``exit_code``."""
        self.handle_error(error, context)
        sys.exit(exit_code)

    @staticmethod
    def _wrap(error: Exception) -> CarouselError:
        for error_class, prefix, suggestions in _GENERIC_ERRORS:
            if isinstance(error, error_class):
                return CarouselError(f"{prefix}: {error}", suggestions=list(suggestions))
        return CarouselError(f"{type(error).__name__}: {error}")


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type and context.

    Args:
        error_type: Type of error
        **kwargs: Additional context information

    Returns:
        list: List of suggestion strings
    """
    suggestions = {
        "invalid_credential_type": [
            "Use one of: certificate, ssh, rsa, password, user, value, json",
            "Separate multiple types with commas",
        ],
        "inventory_invalid": [
            "Check YAML/JSON syntax in the inventory file",
            "Verify every credential has an id, name and type",
            "Verify every variable has a name and a deployment",
        ],
        "inventory_missing": [
            "Pass the snapshot with --inventory",
            "Set CAROUSEL_INVENTORY to the snapshot path",
        ],
        "configuration_invalid": [
            "Check YAML syntax in configuration file",
            "Durations use <number><unit> with units s, m, h, d, w or y",
            "Validate configuration values are correct",
        ],
        "refresh_failed": [
            "Check that credential ids are unique",
            "Re-export the inventory snapshot and retry",
        ],
    }

    return suggestions.get(error_type, [])


def format_validation_errors(errors: list) -> str:
    """
    Format validation errors for display.

    Args:
        errors: List of validation error messages

    Returns:
        str: Formatted error message
    """
    if not errors:
        return "No validation errors"

    if len(errors) == 1:
        return f"Validation error: {errors[0]}"

    formatted = "Validation errors:\n"
    for i, error in enumerate(errors, 1):
        formatted += f"  {i}. {error}\n"

    return formatted.strip()
