"""Entity model of the state graph.

Deployments, paths and credential versions reference each other freely: a
path owns its versions, every other link (``path``, ``signed_by``, ``signs``,
``cas``, ``referenced_by``, ``deployments``) is a plain lookup reference into
objects owned by the store. Entities therefore compare and hash by identity,
and back-references are left out of ``repr`` so the graph can be printed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from carousel.bosh.models import UpdateMode, VariableDefinition
from carousel.credhub.models import CredentialRecord, CredentialType

from .types import Action, RegenerationCriteria, Signing


class Deployments(list):
    """An ordered list of deployments."""

    def names(self) -> List[str]:
        return [d.name for d in self]

    def includes(self, name: str) -> bool:
        return any(d.name == name for d in self)


class Credentials(list):
    """An ordered list of credential versions with query helpers."""

    def collect(self, collector: Callable[["Credential"], Iterable["Credential"]]) -> "Credentials":
        """
        Expand every member with ``collector`` and merge the results.

        Duplicates are dropped by identity; first-seen order is kept.

        Args:
            collector: Function mapping a credential to related credentials

        Returns:
            Credentials: The merged expansion
        """
        seen = set()
        out = Credentials()
        for credential in self:
            for related in collector(credential) or ():
                if id(related) in seen:
                    continue
                seen.add(id(related))
                out.append(related)
        return out

    def filter(self, *filters: Callable[["Credential"], bool]) -> "Credentials":
        """Return the members satisfying every filter."""
        return Credentials(c for c in self if all(f(c) for f in filters))

    def ids(self) -> List[str]:
        return [c.id for c in self]

    def includes(self, credential: "Credential") -> bool:
        return any(c is credential for c in self)


@dataclass(eq=False)
class Deployment:
    """A consumer of credential versions."""

    name: str
    paths: List["Path"] = field(default_factory=list, repr=False)
    credentials: Credentials = field(default_factory=Credentials, repr=False)


@dataclass(eq=False)
class Path:
    """A logical secret slot and its version history, newest first."""

    name: str = ""
    variable_definition: Optional[VariableDefinition] = None
    deployments: Deployments = field(default_factory=Deployments, repr=False)
    versions: Credentials = field(default_factory=Credentials, repr=False)

    @property
    def latest(self) -> Optional["Credential"]:
        """The version flagged latest, if any."""
        for version in self.versions:
            if version.latest:
                return version
        return None

    @property
    def update_mode(self) -> UpdateMode:
        if self.variable_definition is None:
            return UpdateMode.CONVERGE
        return self.variable_definition.update_mode

    def add_deployment(self, deployment: Deployment) -> None:
        if not self.deployments.includes(deployment.name):
            self.deployments.append(deployment)


@dataclass(eq=False)
class Credential:
    """One version of a secret."""

    id: str
    name: str
    type: CredentialType
    version_created_at: Optional[datetime] = None
    latest: bool = False
    transitional: bool = False
    deployments: Deployments = field(default_factory=Deployments, repr=False)
    path: Optional[Path] = field(default=None, repr=False)

    # certificate attributes
    expiry_date: Optional[datetime] = None
    certificate_authority: bool = False
    self_signed: bool = False
    signing: Signing = Signing.UNKNOWN
    signed_by: Optional["Credential"] = field(default=None, repr=False)
    signs: Credentials = field(default_factory=Credentials, repr=False)
    cas: Credentials = field(default_factory=Credentials, repr=False)
    referenced_by: Credentials = field(default_factory=Credentials, repr=False)

    # certificate identity, only used while linking
    ca_name: Optional[str] = field(default=None, repr=False)
    subject: Optional[str] = field(default=None, repr=False)
    issuer: Optional[str] = field(default=None, repr=False)
    subject_key_id: Optional[str] = field(default=None, repr=False)
    authority_key_id: Optional[str] = field(default=None, repr=False)
    ca_key_ids: List[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_record(cls, record: CredentialRecord) -> "Credential":
        """Create an unlinked credential from a credential store record."""
        return cls(
            id=record.id,
            name=record.name,
            type=record.type,
            version_created_at=record.version_created_at,
            transitional=record.transitional,
            expiry_date=record.expiry_date,
            certificate_authority=record.certificate_authority,
            self_signed=record.self_signed,
            signing=Signing.from_bool(record.signing),
            ca_name=record.signed_by,
            subject=record.subject,
            issuer=record.issuer,
            subject_key_id=record.subject_key_id,
            authority_key_id=record.authority_key_id,
            ca_key_ids=list(record.ca_key_ids),
        )

    @property
    def active(self) -> bool:
        """Latest and not transitional: the version steady-state consumers use."""
        return self.latest and not self.transitional

    @property
    def deployed(self) -> bool:
        return len(self.deployments) > 0

    @property
    def references(self) -> Credentials:
        """The certificate authorities this credential relies on."""
        return self.cas

    def next_action(self, criteria: RegenerationCriteria) -> Action:
        """Return the next lifecycle action for this version under ``criteria``."""
        from .engine import next_action

        return next_action(self, criteria)
