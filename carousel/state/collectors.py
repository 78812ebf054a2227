"""Graph-traversal collectors.

A collector expands one credential into related credentials. Collectors are
applied with ``Credentials.collect`` and turned into predicates with
``any_filter``.
"""

from typing import Callable, Iterable, List

Collector = Callable[..., Iterable]


def signed_by_collector() -> Collector:
    """The issuer of a credential, if known."""

    def collect(c):
        return [c.signed_by] if c.signed_by is not None else []

    return collect


def signs_collector() -> Collector:
    """The credentials a certificate authority has issued."""

    def collect(c):
        return list(c.signs)

    return collect


def cas_collector() -> Collector:
    """The certificate authorities in a credential's trust chain."""

    def collect(c):
        return list(c.cas)

    return collect


def referenced_by_collector() -> Collector:
    """The credentials relying on a certificate authority."""

    def collect(c):
        return list(c.referenced_by)

    return collect


def versions_collector() -> Collector:
    """Every version of the credential's path, itself included."""

    def collect(c):
        return list(c.path.versions) if c.path is not None else []

    return collect


def siblings_collector() -> Collector:
    """The other versions of the credential's path."""

    def collect(c):
        if c.path is None:
            return []
        return [v for v in c.path.versions if v is not c]

    return collect


def chain_collector() -> Collector:
    """The transitive issuers of a credential, nearest first."""

    def collect(c):
        chain: List = []
        current = c.signed_by
        while current is not None and current is not c and not any(x is current for x in chain):
            chain.append(current)
            current = current.signed_by
        return chain

    return collect


def filtered_collector(collector: Collector, *filters: Callable[..., bool]) -> Collector:
    """Restrict a collector's output to credentials satisfying every filter."""

    def collect(c):
        return [r for r in collector(c) if all(f(r) for f in filters)]

    return collect
