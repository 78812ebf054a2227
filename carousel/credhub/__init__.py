"""Credential store records consumed by the state graph."""

from .certificate import CertificateInfo, bundle_key_ids
from .models import CredentialRecord, CredentialType

__all__ = ["CertificateInfo", "CredentialRecord", "CredentialType", "bundle_key_ids"]
