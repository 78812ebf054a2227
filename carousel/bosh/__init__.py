"""Deployment variables consumed by the state graph."""

from .models import UpdateMode, Variable, VariableDefinition

__all__ = ["UpdateMode", "Variable", "VariableDefinition"]
