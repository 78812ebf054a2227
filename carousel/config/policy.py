"""Immutable per-invocation policy and filter configuration."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from carousel.credhub.models import CredentialType
from carousel.state.filters import Filter, deployment_filter, expires_before_filter, type_filter
from carousel.state.types import RegenerationCriteria
from carousel.utils.timeutil import parse_duration, utcnow


@dataclass(frozen=True)
class FilterConfig:
    """User supplied credential selection, translated into filters once."""

    types: Tuple[str, ...] = ()
    deployments: Tuple[str, ...] = ()
    expires_within: Optional[timedelta] = None

    def __post_init__(self):
        # Fail at construction on unknown type names
        for name in self.types:
            CredentialType.from_string(name)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FilterConfig":
        data = data or {}
        return cls(
            types=tuple(data.get("types") or ()),
            deployments=tuple(data.get("deployments") or ()),
        )

    def override(
        self,
        types: Optional[Iterable[str]] = None,
        deployments: Optional[Iterable[str]] = None,
        expires_within: Optional[timedelta] = None,
    ) -> "FilterConfig":
        """Return a copy with any given (non-empty) values replacing the current ones."""
        changes: Dict[str, Any] = {}
        if types:
            changes["types"] = tuple(types)
        if deployments:
            changes["deployments"] = tuple(deployments)
        if expires_within is not None:
            changes["expires_within"] = expires_within
        return replace(self, **changes) if changes else self

    def filters(self, now: Optional[datetime] = None) -> List[Filter]:
        """
        Build the filters this configuration selects.

        Args:
            now: Reference time for relative thresholds

        Returns:
            List[Filter]: Filters to apply; empty selects every credential
        """
        out: List[Filter] = []
        if self.deployments:
            out.append(deployment_filter(*self.deployments))
        if self.types:
            out.append(type_filter(*self.types))
        if self.expires_within is not None:
            out.append(expires_before_filter((now or utcnow()) + self.expires_within))
        return out


@dataclass(frozen=True)
class PolicyConfig:
    """Regeneration thresholds and default filters for one invocation."""

    older_than: Optional[timedelta] = None
    expires_within: Optional[timedelta] = None
    ignore_update_mode: bool = False
    filters: FilterConfig = field(default_factory=FilterConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PolicyConfig":
        """
        Build a policy from a validated configuration dictionary.

        Raises:
            ValueError: If a duration cannot be parsed
            InvalidCredentialTypeError: If a filter names an unknown type
        """
        data = data or {}
        regeneration = data.get("regeneration") or {}
        return cls(
            older_than=parse_duration(regeneration.get("older_than")),
            expires_within=parse_duration(regeneration.get("expires_within")),
            ignore_update_mode=bool(regeneration.get("ignore_update_mode", False)),
            filters=FilterConfig.from_dict(data.get("filters")),
        )

    def override(
        self,
        older_than: Optional[timedelta] = None,
        expires_within: Optional[timedelta] = None,
        ignore_update_mode: bool = False,
    ) -> "PolicyConfig":
        changes: Dict[str, Any] = {}
        if older_than is not None:
            changes["older_than"] = older_than
        if expires_within is not None:
            changes["expires_within"] = expires_within
        if ignore_update_mode:
            changes["ignore_update_mode"] = True
        return replace(self, **changes) if changes else self

    def criteria(self, now: Optional[datetime] = None) -> RegenerationCriteria:
        """Return regeneration criteria anchored at ``now``."""
        return RegenerationCriteria.from_durations(
            older_than=self.older_than,
            expires_within=self.expires_within,
            ignore_update_mode=self.ignore_update_mode,
            now=now,
        )
