"""Credential store record types."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from carousel.utils.errors import InvalidCredentialTypeError, InventoryError
from carousel.utils.timeutil import parse_timestamp

from .certificate import CertificateInfo, bundle_key_ids


class CredentialType(Enum):
    """Credential types known to the credential store."""

    CERTIFICATE = "certificate"
    SSH = "ssh"
    RSA = "rsa"
    PASSWORD = "password"
    USER = "user"
    VALUE = "value"
    JSON = "json"

    @classmethod
    def from_string(cls, name: str) -> "CredentialType":
        """
        Look up a credential type by name.

        Args:
            name: Type name, case insensitive

        Returns:
            CredentialType: Matching type

        Raises:
            InvalidCredentialTypeError: If the name is not a known type
        """
        normalized = (name or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise InvalidCredentialTypeError(name, cls.values())

    @classmethod
    def values(cls) -> List[str]:
        """Return all type names."""
        return [member.value for member in cls]

    @property
    def regeneratable(self) -> bool:
        """Whether the store can generate a new value of this type."""
        return self in _REGENERATABLE

    @property
    def supports_version_deletion(self) -> bool:
        """Whether individual versions of this type can be deleted."""
        return self in _VERSION_DELETABLE

    def __str__(self) -> str:
        return self.value


_REGENERATABLE = frozenset(
    {
        CredentialType.CERTIFICATE,
        CredentialType.SSH,
        CredentialType.RSA,
        CredentialType.PASSWORD,
        CredentialType.USER,
    }
)

_VERSION_DELETABLE = frozenset({CredentialType.CERTIFICATE})


@dataclass
class CredentialRecord:
    """One credential version as reported by the credential store."""

    id: str
    name: str
    type: CredentialType
    version_created_at: Optional[datetime] = None
    transitional: bool = False
    certificate_authority: bool = False
    self_signed: bool = False
    expiry_date: Optional[datetime] = None
    signed_by: Optional[str] = None
    signing: Optional[bool] = None
    subject: Optional[str] = None
    issuer: Optional[str] = None
    subject_key_id: Optional[str] = None
    authority_key_id: Optional[str] = None
    ca_key_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredentialRecord":
        """
        Build a record from the credential store's JSON representation.

        Certificate metadata is read from ``value.certificate`` when present;
        explicit top level fields take precedence over the parsed values.

        Args:
            data: Credential dictionary

        Returns:
            CredentialRecord: Parsed record

        Raises:
            InventoryError: If a field cannot be parsed
        """
        name = data.get("name") or ""
        try:
            credential_type = CredentialType.from_string(data.get("type", ""))
        except InvalidCredentialTypeError as e:
            raise InventoryError(f"Credential {name or '<unnamed>'} has {e.message.lower()}", details=e.details) from e

        value = data.get("value") if isinstance(data.get("value"), dict) else {}

        info = None
        if value.get("certificate"):
            info = CertificateInfo.from_pem(value["certificate"])

        try:
            version_created_at = parse_timestamp(data.get("version_created_at"))
            expiry_date = parse_timestamp(data.get("expiry_date")) or (info.expiry_date if info else None)
        except ValueError as e:
            raise InventoryError(f"Credential {name} has an invalid timestamp", details=str(e)) from e

        ca_key_ids = list(data.get("ca_key_ids") or [])
        if not ca_key_ids and value.get("ca"):
            ca_key_ids = bundle_key_ids(value["ca"])

        return cls(
            id=data.get("id") or "",
            name=name,
            type=credential_type,
            version_created_at=version_created_at,
            transitional=bool(data.get("transitional", False)),
            certificate_authority=_pick(data, "certificate_authority", info, False),
            self_signed=_pick(data, "self_signed", info, False),
            expiry_date=expiry_date,
            signed_by=data.get("signed_by") or value.get("ca_name") or None,
            signing=data.get("signing"),
            subject=_pick(data, "subject", info, None),
            issuer=_pick(data, "issuer", info, None),
            subject_key_id=_pick(data, "subject_key_id", info, None),
            authority_key_id=_pick(data, "authority_key_id", info, None),
            ca_key_ids=ca_key_ids,
        )


def _pick(data: Dict[str, Any], key: str, info: Optional[CertificateInfo], default: Any) -> Any:
    if data.get(key) is not None:
        return data[key]
    if info is not None:
        return getattr(info, key)
    return default
