"""The indexed store holding the state graph."""

import logging
import threading
from typing import Iterable, List, Optional, Tuple

from carousel.bosh.models import Variable
from carousel.credhub.models import CredentialRecord, CredentialType
from carousel.utils.errors import RefreshError, create_error_suggestions, format_validation_errors

from .filters import Filter
from .index import IndexedMap
from .models import Credential, Credentials, Deployment, Path
from .types import Signing

logger = logging.getLogger(__name__)


def newest_first(credential: Credential) -> Tuple[int, float, str]:
    """Sort key placing the most recently created version first; undated versions go last."""
    if credential.version_created_at is None:
        return (1, 0.0, credential.id)
    return (0, -credential.version_created_at.timestamp(), credential.id)


class Graph:
    """One fully linked snapshot of deployments, paths and credentials."""

    def __init__(self):
        self.deployments: IndexedMap[Deployment] = IndexedMap(lambda d: d.name)
        self.paths: IndexedMap[Path] = IndexedMap(lambda p: p.name)
        self.credentials: IndexedMap[Credential] = IndexedMap(lambda c: (c.name,) + newest_first(c))


class State:
    """
    Holds the state graph and answers credential queries against it.

    ``update`` rebuilds the whole graph from the two feeds and swaps it in
    only once it is fully linked; readers keep using whichever snapshot was
    current when they started.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._graph = Graph()

    def update(self, credentials: Iterable[CredentialRecord], variables: Iterable[Variable]) -> None:
        """
        Replace the graph with one built from the given inventory.

        Args:
            credentials: Credential versions reported by the credential store
            variables: Credential versions in use by deployments

        Raises:
            RefreshError: If identity fields are missing or duplicated; the
                previous graph is left in place
        """
        records = list(credentials)
        variables = list(variables)

        with self._lock:
            graph = build_graph(records, variables)
            self._graph = graph

        logger.info(
            "Loaded %d credentials across %d paths and %d deployments",
            len(graph.credentials),
            len(graph.paths),
            len(graph.deployments),
        )

    def credentials(self, *filters: Filter) -> Credentials:
        """Return every credential satisfying all ``filters``, ordered by path then newest first."""
        graph = self._graph
        return Credentials(graph.credentials.values()).filter(*filters)

    def credential(self, credential_id: str) -> Optional[Credential]:
        return self._graph.credentials.get(credential_id)

    def paths(self) -> List[Path]:
        return self._graph.paths.values()

    def path(self, name: str) -> Optional[Path]:
        return self._graph.paths.get(name)

    def deployments(self) -> List[Deployment]:
        return self._graph.deployments.values()

    def deployment(self, name: str) -> Optional[Deployment]:
        return self._graph.deployments.get(name)


def build_graph(records: List[CredentialRecord], variables: List[Variable]) -> Graph:
    """
    Build and link a new graph.

    Raises:
        RefreshError: If identity fields are missing or duplicated
    """
    _validate(records, variables)

    graph = Graph()

    for record in records:
        credential = Credential.from_record(record)
        path = graph.paths.get(record.name)
        if path is None:
            path = Path(name=record.name)
            graph.paths.put(path.name, path)
        credential.path = path
        path.versions.append(credential)
        graph.credentials.put(credential.id, credential)

    for variable in variables:
        _apply_variable(graph, variable)

    for path in graph.paths:
        path.versions.sort(key=newest_first)
        for index, version in enumerate(path.versions):
            version.latest = index == 0

    _assign_signing(graph)
    _link_signers(graph)
    _link_cas(graph)

    return graph


def _validate(records: List[CredentialRecord], variables: List[Variable]) -> None:
    errors = []
    seen = set()

    for index, record in enumerate(records):
        if not record.id:
            errors.append(f"Credential #{index} ({record.name or 'unnamed'}) has no id")
        elif record.id in seen:
            errors.append(f"Duplicate credential id: {record.id}")
        else:
            seen.add(record.id)
        if not record.name:
            errors.append(f"Credential #{index} ({record.id or 'no id'}) has no name")

    for index, variable in enumerate(variables):
        if not variable.name:
            errors.append(f"Variable #{index} has no name")
        if not variable.deployment:
            errors.append(f"Variable #{index} ({variable.name or 'unnamed'}) has no deployment")

    if errors:
        logger.error("Refusing to refresh state: %d invalid entries", len(errors))
        raise RefreshError(
            "Failed to refresh state from inventory",
            details=format_validation_errors(errors),
            suggestions=create_error_suggestions("refresh_failed"),
        )


def _apply_variable(graph: Graph, variable: Variable) -> None:
    deployment = graph.deployments.get(variable.deployment)
    if deployment is None:
        deployment = Deployment(name=variable.deployment)
        graph.deployments.put(deployment.name, deployment)

    path = graph.paths.get(variable.name)
    if path is None:
        logger.debug("Variable %s of deployment %s has no credential", variable.name, variable.deployment)
        return

    if variable.definition is not None:
        path.variable_definition = variable.definition

    path.add_deployment(deployment)
    if not any(p is path for p in deployment.paths):
        deployment.paths.append(path)

    credential = graph.credentials.get(variable.id) if variable.id else None
    if credential is None or credential.path is not path:
        logger.debug("Deployment %s uses unknown version %s of %s", variable.deployment, variable.id, variable.name)
        return

    if not credential.deployments.includes(deployment.name):
        credential.deployments.append(deployment)
    if not deployment.credentials.includes(credential):
        deployment.credentials.append(credential)


def _assign_signing(graph: Graph) -> None:
    # A signer reported by the store wins, otherwise the most recent
    # non-transitional CA version is the one issuing certificates
    for path in graph.paths:
        authorities = [v for v in path.versions if v.certificate_authority]
        if not authorities:
            continue
        signer = next((v for v in authorities if v.signing is Signing.SIGNER), None)
        if signer is None:
            signer = next((v for v in authorities if not v.transitional), None)
        for version in authorities:
            if version.signing is Signing.UNKNOWN:
                version.signing = Signing.SIGNER if version is signer else Signing.NOT_SIGNER


def _link_signers(graph: Graph) -> None:
    authorities = [c for c in graph.credentials if c.certificate_authority]

    for credential in graph.credentials:
        if credential.type is not CredentialType.CERTIFICATE or credential.self_signed:
            continue
        if not (credential.ca_name or credential.authority_key_id or credential.issuer):
            continue

        signer = _find_signer(graph, credential, authorities)
        if signer is None:
            logger.debug("No issuer found for %s@%s", credential.name, credential.id)
            continue

        credential.signed_by = signer
        signer.signs.append(credential)


def _find_signer(graph: Graph, credential: Credential, authorities: List[Credential]) -> Optional[Credential]:
    if credential.ca_name:
        ca_path = graph.paths.get(credential.ca_name)
        candidates = list(ca_path.versions) if ca_path is not None else []
    else:
        candidates = authorities
    candidates = [c for c in candidates if c is not credential]

    matches = []
    if credential.authority_key_id:
        matches = [c for c in candidates if c.subject_key_id == credential.authority_key_id]
    if not matches and credential.issuer:
        matches = [c for c in candidates if c.subject and c.subject == credential.issuer]
    if not matches and credential.ca_name and not (credential.authority_key_id or credential.issuer):
        matches = candidates

    if not matches:
        return None
    return min(matches, key=lambda c: (not c.active, c.signing is not Signing.SIGNER) + newest_first(c))


def _link_cas(graph: Graph) -> None:
    by_key_id = {}
    for credential in graph.credentials:
        if credential.certificate_authority and credential.subject_key_id:
            by_key_id.setdefault(credential.subject_key_id, []).append(credential)

    for credential in graph.credentials:
        cas = Credentials()
        current = credential.signed_by
        while current is not None and current is not credential and not cas.includes(current):
            cas.append(current)
            current = current.signed_by

        for key_id in credential.ca_key_ids:
            for ca in by_key_id.get(key_id, []):
                if ca is not credential and not cas.includes(ca):
                    cas.append(ca)

        credential.cas = cas
        for ca in cas:
            if not ca.referenced_by.includes(credential):
                ca.referenced_by.append(credential)
