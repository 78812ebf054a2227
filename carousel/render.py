"""Plain-text rendering of paths and credential versions."""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

import yaml

from carousel.credhub.models import CredentialType
from carousel.state.models import Credential, Credentials, Path
from carousel.state.types import RegenerationCriteria
from carousel.utils.timeutil import utcnow

DetailsRef = Union[Path, Credential]

_UNITS = [
    ("year", 365 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
]


def relative_time(value: datetime, now: Optional[datetime] = None) -> str:
    """Describe ``value`` relative to ``now``, e.g. ``3 days ago`` or ``2 hours from now``."""
    now = now or utcnow()
    seconds = int((value - now).total_seconds())
    suffix = "from now" if seconds > 0 else "ago"
    seconds = abs(seconds)
    if seconds < 1:
        return "now"
    for unit, size in _UNITS:
        if seconds >= size:
            amount = seconds // size
            return f"{amount} {unit}{'s' if amount != 1 else ''} {suffix}"
    return "now"


def render_details(ref: Optional[DetailsRef], now: Optional[datetime] = None) -> str:
    """Render the details view for a path, a credential version or nothing."""
    if isinstance(ref, Path):
        return render_path_details(ref)
    if isinstance(ref, Credential):
        return render_credential_details(ref, now)
    return "Nothing selected. Pass a path name, optionally with --id for one version."


def render_path_details(path: Path) -> str:
    rows = [
        ("Name", path.name),
        ("Deployments", ", ".join(path.deployments.names())),
        ("Update Mode", path.update_mode.value),
        ("Versions", ", ".join(_version_label(v) for v in path.versions)),
    ]
    text = _rows(rows)

    if path.variable_definition is not None:
        definition = yaml.safe_dump(path.variable_definition.to_dict(), default_flow_style=False, sort_keys=False)
        text += "\n\nVariable definition:\n" + _indent(definition.rstrip())

    return text


def render_credential_details(credential: Credential, now: Optional[datetime] = None) -> str:
    rows = [
        ("ID", credential.id),
        ("Name", credential.name),
        ("Type", credential.type.value),
        ("Created At", _timestamp(credential.version_created_at, now)),
        ("Deployments", ", ".join(credential.deployments.names())),
        ("Latest", str(credential.latest).lower()),
        ("Transitional", str(credential.transitional).lower()),
    ]

    if credential.type is CredentialType.CERTIFICATE:
        rows.extend(
            [
                ("Expiry", _timestamp(credential.expiry_date, now)),
                ("Certificate Authority", str(credential.certificate_authority).lower()),
                ("Self Signed", str(credential.self_signed).lower()),
                ("Signing", credential.signing.value),
                ("Signed By", _credential_label(credential.signed_by)),
                ("Signs", ", ".join(_credential_label(c) for c in credential.signs)),
                ("Referenced CA's", ", ".join(credential.cas.ids())),
            ]
        )

    return _rows(rows)


def render_table(
    credentials: Credentials,
    criteria: Optional[RegenerationCriteria] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Render credential versions as an aligned table.

    Args:
        credentials: Versions to render
        criteria: When given, adds the next action of each version
        now: Reference time for relative timestamps

    Returns:
        str: The table, header included
    """
    header = ["NAME", "ID", "TYPE", "CREATED", "EXPIRES", "FLAGS", "DEPLOYMENTS"]
    if criteria is not None:
        header.append("ACTION")

    rows: List[Sequence[str]] = [header]
    for credential in credentials:
        row = [
            credential.name,
            credential.id,
            credential.type.value,
            relative_time(credential.version_created_at, now) if credential.version_created_at else "-",
            relative_time(credential.expiry_date, now) if credential.expiry_date else "-",
            _flags(credential),
            ",".join(credential.deployments.names()) or "-",
        ]
        if criteria is not None:
            row.append(credential.next_action(criteria).value)
        rows.append(row)

    widths = [max(len(row[i]) for row in rows) for i in range(len(header))]
    lines = ["  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip() for row in rows]
    return "\n".join(lines)


def _flags(credential: Credential) -> str:
    flags = []
    if credential.latest:
        flags.append("latest")
    if credential.transitional:
        flags.append("transitional")
    if credential.certificate_authority:
        flags.append("ca")
    if credential.self_signed:
        flags.append("self-signed")
    return ",".join(flags) or "-"


def _version_label(credential: Credential) -> str:
    markers = []
    if credential.latest:
        markers.append("latest")
    if credential.transitional:
        markers.append("transitional")
    return f"{credential.id} ({', '.join(markers)})" if markers else credential.id


def _credential_label(credential: Optional[Credential]) -> str:
    if credential is None:
        return ""
    return f"{credential.name}@{credential.id}"


def _timestamp(value: Optional[datetime], now: Optional[datetime]) -> str:
    if value is None:
        return ""
    return f"{value.isoformat()} ({relative_time(value, now)})"


def _rows(rows: List[Tuple[str, str]]) -> str:
    rows = [(label, value) for label, value in rows if value != ""]
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label.ljust(width)}  {value}" for label, value in rows)


def _indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())
