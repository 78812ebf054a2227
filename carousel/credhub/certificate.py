"""X.509 metadata extraction for certificate credentials."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from cryptography import x509

from carousel.utils.errors import InventoryError


@dataclass(frozen=True)
class CertificateInfo:
    """Identity and validity metadata read from a PEM certificate."""

    subject: str
    issuer: str
    expiry_date: datetime
    certificate_authority: bool
    self_signed: bool
    subject_key_id: Optional[str] = None
    authority_key_id: Optional[str] = None

    @classmethod
    def from_certificate(cls, cert: x509.Certificate) -> "CertificateInfo":
        """Build certificate info from a loaded certificate."""
        subject_key_id = _subject_key_id(cert)
        authority_key_id = _authority_key_id(cert)

        is_ca = False
        try:
            is_ca = cert.extensions.get_extension_for_class(x509.BasicConstraints).value.ca
        except x509.ExtensionNotFound:
            pass

        subject = cert.subject.rfc4514_string()
        issuer = cert.issuer.rfc4514_string()

        if authority_key_id and subject_key_id:
            self_signed = authority_key_id == subject_key_id
        else:
            self_signed = subject == issuer

        return cls(
            subject=subject,
            issuer=issuer,
            expiry_date=cert.not_valid_after_utc,
            certificate_authority=is_ca,
            self_signed=self_signed,
            subject_key_id=subject_key_id,
            authority_key_id=authority_key_id,
        )

    @classmethod
    def from_pem(cls, pem: str) -> "CertificateInfo":
        """
        Parse the first certificate of a PEM document.

        Args:
            pem: PEM encoded certificate

        Returns:
            CertificateInfo: Extracted metadata

        Raises:
            InventoryError: If the PEM cannot be parsed
        """
        try:
            cert = x509.load_pem_x509_certificate(pem.encode("utf-8"))
        except ValueError as e:
            raise InventoryError("Invalid certificate format", details=str(e)) from e
        return cls.from_certificate(cert)


def bundle_key_ids(pem_bundle: str) -> List[str]:
    """
    Return the subject key ids of every certificate in a PEM bundle.

    Args:
        pem_bundle: One or more concatenated PEM certificates

    Returns:
        List[str]: Hex encoded subject key ids, in bundle order

    Raises:
        InventoryError: If the bundle cannot be parsed
    """
    if not pem_bundle or not pem_bundle.strip():
        return []

    try:
        certs = x509.load_pem_x509_certificates(pem_bundle.encode("utf-8"))
    except ValueError as e:
        raise InventoryError("Invalid CA bundle format", details=str(e)) from e

    key_ids = []
    for cert in certs:
        key_id = _subject_key_id(cert)
        if key_id and key_id not in key_ids:
            key_ids.append(key_id)
    return key_ids


def _subject_key_id(cert: x509.Certificate) -> Optional[str]:
    try:
        return cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value.digest.hex()
    except x509.ExtensionNotFound:
        return None


def _authority_key_id(cert: x509.Certificate) -> Optional[str]:
    try:
        key_id = cert.extensions.get_extension_for_class(x509.AuthorityKeyIdentifier).value.key_identifier
    except x509.ExtensionNotFound:
        return None
    return key_id.hex() if key_id else None
