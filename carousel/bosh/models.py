"""Deployment manifest variable types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class UpdateMode(Enum):
    """How a deploy treats an existing credential value."""

    CONVERGE = "converge"
    NO_OVERWRITE = "no-overwrite"

    @classmethod
    def from_string(cls, name: Optional[str]) -> "UpdateMode":
        """
        Look up an update mode by name; an empty name means converge.

        Raises:
            ValueError: If the name is not a known update mode
        """
        if not name:
            return cls.CONVERGE
        for member in cls:
            if member.value == name:
                return member
        raise ValueError(f"Unknown update mode: {name}")


@dataclass
class VariableDefinition:
    """A variable as declared in a deployment manifest."""

    name: str
    type: Optional[str] = None
    update_mode: UpdateMode = UpdateMode.CONVERGE
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VariableDefinition":
        """Build a definition from its manifest representation."""
        return cls(
            name=data.get("name", ""),
            type=data.get("type"),
            update_mode=UpdateMode.from_string(data.get("update_mode")),
            options=dict(data.get("options") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the manifest representation of this definition."""
        data: Dict[str, Any] = {"name": self.name}
        if self.type:
            data["type"] = self.type
        data["update_mode"] = self.update_mode.value
        if self.options:
            data["options"] = dict(self.options)
        return data


@dataclass
class Variable:
    """A credential version in use by a deployment."""

    id: str
    name: str
    deployment: str
    definition: Optional[VariableDefinition] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variable":
        """
        Build a variable from its snapshot representation.

        Raises:
            ValueError: If the definition carries an unknown update mode
        """
        definition = data.get("definition")
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            deployment=data.get("deployment") or "",
            definition=VariableDefinition.from_dict(definition) if definition else None,
        )
