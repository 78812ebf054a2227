"""Next-action decision engine.

Each rule inspects one credential version (and the graph around it) and
either returns an ``Action`` or ``None`` when it does not apply. Rules are
tried in order and the first action returned wins, so a rule may return
``Action.NONE`` to stop evaluation. Nothing here mutates the graph or performs
I/O; missing optional data simply makes a rule not match.
"""

from datetime import datetime
from typing import Callable, List, Optional

from carousel.bosh.models import UpdateMode
from carousel.credhub.models import CredentialType
from carousel.utils.timeutil import is_before

from .collectors import filtered_collector, referenced_by_collector, siblings_collector, signs_collector
from .filters import Filter, active_filter, and_filter, any_filter, deployed_filter, or_filter, signing_filter
from .types import Action, RegenerationCriteria, Signing

Rule = Callable[..., Optional[Action]]


def next_action(credential, criteria: RegenerationCriteria) -> Action:
    """
    Decide the next lifecycle action for a credential version.

    Args:
        credential: Credential version to evaluate
        criteria: Operator policy

    Returns:
        Action: The first action produced by the ordered rules, ``Action.NONE`` otherwise
    """
    for rule in RULES:
        action = rule(credential, criteria)
        if action is not None:
            return action
    return Action.NONE


def update_mode_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """Versions pinned to manual management are never rotated."""
    path = credential.path
    if path is None or criteria.ignore_update_mode:
        return None
    if path.update_mode is UpdateMode.NO_OVERWRITE:
        return Action.NO_OVERWRITE
    return None


def outstanding_deployment_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """A latest version must reach every deployment of its path before anything else."""
    if not credential.latest or credential.path is None:
        return None
    expected = {d.name for d in credential.path.deployments}
    current = {d.name for d in credential.deployments}
    if not expected <= current:
        return Action.BOSH_DEPLOY
    return None


def age_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """Regenerate latest versions created before ``criteria.older_than``."""
    if not credential.latest or not is_before(credential.version_created_at, criteria.older_than):
        return None
    if credential.type.regeneratable:
        return Action.REGENERATE
    return Action.NONE


def expiry_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """
    Regenerate an expiring certificate once a healthy issuer is available.

    Only the latest version of a path is regenerated. Older versions fall
    through to the transitional and cleanup rules, which retire them.
    """
    if credential.type is not CredentialType.CERTIFICATE or not credential.latest:
        return None
    if not is_before(credential.expiry_date, criteria.expires_before):
        return None
    if credential.signed_by is None:
        return Action.REGENERATE
    if _healthy_issuer(criteria.expires_before)(credential.signed_by):
        return Action.REGENERATE
    return Action.NONE


def superseded_signer_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """Reissue deployed certificates whose issuer has been replaced by an active signing CA."""
    signer = credential.signed_by
    if not credential.latest or not credential.deployed or signer is None or signer.active:
        return None
    if any_filter(filtered_collector(siblings_collector(), active_filter(), signing_filter()))(signer):
        return Action.REGENERATE
    return None


def transitional_promotion_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """A signer superseded by a transitional version must become transitional itself."""
    if credential.signing is not Signing.SIGNER or credential.latest or credential.path is None:
        return None
    latest = credential.path.latest
    if latest is None or latest is credential or not latest.transitional:
        return None
    if is_before(latest.version_created_at, credential.version_created_at):
        return None
    return Action.MARK_TRANSITIONAL


def transitional_retirement_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """End the grace period of an old CA once its certificates are no longer deployed."""
    if not credential.transitional or credential.latest or not credential.signs:
        return None
    if _signs_deployed(credential):
        return None
    if any_filter(filtered_collector(siblings_collector(), active_filter(), _signs_deployed))(credential):
        return Action.UNMARK_TRANSITIONAL
    return None


def cleanup_rule(credential, criteria: RegenerationCriteria) -> Optional[Action]:
    """Delete versions no deployment needs, directly or through a certificate they issued."""
    if credential.deployed or _referenced_by_deployed(credential) or _signs_deployed(credential):
        return None
    if not credential.type.supports_version_deletion:
        return None
    return Action.CLEAN_UP


RULES: List[Rule] = [
    update_mode_rule,
    outstanding_deployment_rule,
    age_rule,
    expiry_rule,
    superseded_signer_rule,
    transitional_promotion_rule,
    transitional_retirement_rule,
    cleanup_rule,
]

# true when a certificate this version issued is deployed
_signs_deployed = any_filter(filtered_collector(signs_collector(), deployed_filter()))

_referenced_by_deployed = any_filter(filtered_collector(referenced_by_collector(), deployed_filter()))


def _healthy_issuer(expires_before: datetime) -> Filter:
    """The signer itself, or an active sibling of it, outlives ``expires_before``."""

    def outlives(c) -> bool:
        return c.expiry_date is not None and not is_before(c.expiry_date, expires_before)

    healthy_sibling = filtered_collector(siblings_collector(), and_filter(active_filter(), outlives))
    return or_filter(outlives, any_filter(healthy_sibling))
