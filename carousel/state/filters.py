"""Composable credential predicates."""

from datetime import datetime
from typing import Callable, Union

from carousel.credhub.models import CredentialType
from carousel.utils.timeutil import is_before

from .collectors import Collector
from .models import Credential, Credentials
from .types import Action, RegenerationCriteria, Signing

Filter = Callable[[Credential], bool]


def not_filter(fn: Filter) -> Filter:
    def check(c: Credential) -> bool:
        return not fn(c)

    return check


def and_filter(*fns: Filter) -> Filter:
    """True when every filter is true; no filters is always true."""

    def check(c: Credential) -> bool:
        for fn in fns:
            if not fn(c):
                return False
        return True

    return check


def or_filter(*fns: Filter) -> Filter:
    """True when any filter is true; no filters is always false."""

    def check(c: Credential) -> bool:
        for fn in fns:
            if fn(c):
                return True
        return False

    return check


def any_filter(collector: Collector) -> Filter:
    """True when ``collector`` yields at least one credential."""

    def check(c: Credential) -> bool:
        return len(Credentials([c]).collect(collector)) != 0

    return check


def self_signed_filter() -> Filter:
    def check(c: Credential) -> bool:
        return c.signed_by is None

    return check


def active_filter() -> Filter:
    def check(c: Credential) -> bool:
        return c.active

    return check


def latest_filter() -> Filter:
    def check(c: Credential) -> bool:
        return c.latest

    return check


def signing_filter() -> Filter:
    def check(c: Credential) -> bool:
        return c.signing is Signing.SIGNER

    return check


def transitional_filter() -> Filter:
    def check(c: Credential) -> bool:
        return c.transitional

    return check


def deployed_filter() -> Filter:
    def check(c: Credential) -> bool:
        return c.deployed

    return check


def type_filter(*types: Union[CredentialType, str]) -> Filter:
    """
    Match credentials of any of the given types.

    Args:
        *types: Credential types or their names

    Returns:
        Filter: The type predicate

    Raises:
        InvalidCredentialTypeError: If a name is not a known credential type
    """
    wanted = frozenset(t if isinstance(t, CredentialType) else CredentialType.from_string(t) for t in types)

    def check(c: Credential) -> bool:
        return c.type in wanted

    return check


def deployment_filter(*names: str) -> Filter:
    """Match credentials whose path is used by any of the named deployments."""
    wanted = frozenset(names)

    def check(c: Credential) -> bool:
        if c.path is None:
            return False
        return any(d.name in wanted for d in c.path.deployments)

    return check


def name_filter(name: str) -> Filter:
    def check(c: Credential) -> bool:
        return c.name == name

    return check


def certificate_authority_filter(expected: bool) -> Filter:
    def check(c: Credential) -> bool:
        return c.certificate_authority == expected

    return check


def expires_before_filter(t: datetime) -> Filter:
    """Match versions expiring before ``t``; a naive ``t`` is read as UTC."""

    def check(c: Credential) -> bool:
        return is_before(c.expiry_date, t)

    return check


def older_than_filter(t: datetime) -> Filter:
    def check(c: Credential) -> bool:
        return is_before(c.version_created_at, t)

    return check


def signed_by_filter(name: str) -> Filter:
    def check(c: Credential) -> bool:
        return c.signed_by is not None and c.signed_by.name == name

    return check


def references_filter(credential: Credential) -> Filter:
    """Match credentials that rely on ``credential`` as a certificate authority."""

    def check(c: Credential) -> bool:
        return c.references.includes(credential)

    return check


def action_filter(criteria: RegenerationCriteria, *actions: Action) -> Filter:
    """Match credentials whose next action under ``criteria`` is one of ``actions``."""
    wanted = frozenset(actions)

    def check(c: Credential) -> bool:
        return c.next_action(criteria) in wanted

    return check
