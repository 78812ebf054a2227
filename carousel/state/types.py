"""Enumerations and policy values used by the decision engine."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from carousel.utils.timeutil import utcnow


class Action(Enum):
    """The next lifecycle step for a credential version."""

    NONE = "none"
    NO_OVERWRITE = "no-overwrite"
    BOSH_DEPLOY = "bosh-deploy"
    REGENERATE = "regenerate"
    CLEAN_UP = "clean-up"
    MARK_TRANSITIONAL = "mark-transitional"
    UNMARK_TRANSITIONAL = "unmark-transitional"

    @classmethod
    def from_string(cls, name: str) -> "Action":
        """
        Look up an action by its label.

        Raises:
            ValueError: If the label is unknown
        """
        normalized = (name or "").strip().lower().replace("_", "-")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown action: {name}")

    def __str__(self) -> str:
        return self.value


class Signing(Enum):
    """Whether a certificate authority version is the one issuing new certificates."""

    UNKNOWN = "unknown"
    SIGNER = "signer"
    NOT_SIGNER = "not-signer"

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> "Signing":
        if value is None:
            return cls.UNKNOWN
        return cls.SIGNER if value else cls.NOT_SIGNER


@dataclass(frozen=True)
class RegenerationCriteria:
    """
    Operator policy for rotation decisions.

    A threshold left as ``None`` disables the rule that uses it.
    """

    older_than: Optional[datetime] = None
    expires_before: Optional[datetime] = None
    ignore_update_mode: bool = False

    @classmethod
    def from_durations(
        cls,
        older_than: Optional[timedelta] = None,
        expires_within: Optional[timedelta] = None,
        ignore_update_mode: bool = False,
        now: Optional[datetime] = None,
    ) -> "RegenerationCriteria":
        """
        Build criteria from durations relative to ``now``.

        Args:
            older_than: Maximum age of a latest version
            expires_within: Minimum remaining validity of a certificate
            ignore_update_mode: Bypass no-overwrite update modes
            now: Reference time, defaults to the current UTC time

        Returns:
            RegenerationCriteria: Criteria with absolute thresholds
        """
        now = now or utcnow()
        return cls(
            older_than=now - older_than if older_than is not None else None,
            expires_before=now + expires_within if expires_within is not None else None,
            ignore_update_mode=ignore_update_mode,
        )
