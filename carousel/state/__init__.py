"""In-memory state graph and rotation decision engine."""

from .collectors import (
    Collector,
    cas_collector,
    chain_collector,
    filtered_collector,
    referenced_by_collector,
    siblings_collector,
    signed_by_collector,
    signs_collector,
    versions_collector,
)
from .filters import (
    Filter,
    action_filter,
    active_filter,
    and_filter,
    any_filter,
    certificate_authority_filter,
    deployed_filter,
    deployment_filter,
    expires_before_filter,
    latest_filter,
    name_filter,
    not_filter,
    older_than_filter,
    or_filter,
    references_filter,
    self_signed_filter,
    signed_by_filter,
    signing_filter,
    transitional_filter,
    type_filter,
)
from .index import IndexedMap
from .models import Credential, Credentials, Deployment, Deployments, Path
from .store import State
from .types import Action, RegenerationCriteria, Signing

__all__ = [
    "Action",
    "Collector",
    "Credential",
    "Credentials",
    "Deployment",
    "Deployments",
    "Filter",
    "IndexedMap",
    "Path",
    "RegenerationCriteria",
    "Signing",
    "State",
    "action_filter",
    "active_filter",
    "and_filter",
    "any_filter",
    "cas_collector",
    "certificate_authority_filter",
    "chain_collector",
    "deployed_filter",
    "deployment_filter",
    "expires_before_filter",
    "filtered_collector",
    "latest_filter",
    "name_filter",
    "not_filter",
    "older_than_filter",
    "or_filter",
    "referenced_by_collector",
    "references_filter",
    "self_signed_filter",
    "siblings_collector",
    "signed_by_collector",
    "signed_by_filter",
    "signing_filter",
    "signs_collector",
    "transitional_filter",
    "type_filter",
    "versions_collector",
]
