"""Pytest configuration and shared fixtures."""

import os
import shutil
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
import yaml
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from carousel.credhub.models import CredentialRecord, CredentialType
from carousel.utils.timeutil import parse_timestamp


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolate_filesystem(temp_directory, monkeypatch):
    """Isolate filesystem operations and environment to a temporary directory."""
    monkeypatch.chdir(temp_directory)
    monkeypatch.delenv("CAROUSEL_CONFIG", raising=False)
    monkeypatch.delenv("CAROUSEL_INVENTORY", raising=False)
    return temp_directory


@pytest.fixture
def make_record():
    """Factory for credential store records."""

    def factory(id, name, type="password", created="2025-01-01T00:00:00Z", **kwargs):
        expiry = kwargs.pop("expiry_date", None)
        return CredentialRecord(
            id=id,
            name=name,
            type=CredentialType.from_string(type),
            version_created_at=parse_timestamp(created),
            expiry_date=parse_timestamp(expiry),
            **kwargs,
        )

    return factory


def _build_certificate(subject, issuer, public_key, signing_key, issuer_public_key, is_ca, not_after):
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject)]))
        .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer)]))
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
        .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_public_key), critical=False)
        .sign(signing_key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def certificate_chain():
    """A self-signed CA and a leaf certificate it issued, as PEM plus expected metadata."""
    now = datetime.now(timezone.utc).replace(microsecond=0)

    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca_cert = _build_certificate(
        "test-ca", "test-ca", ca_key.public_key(), ca_key, ca_key.public_key(), True, now + timedelta(days=365)
    )

    leaf_key = ec.generate_private_key(ec.SECP256R1())
    leaf_cert = _build_certificate(
        "test-leaf", "test-ca", leaf_key.public_key(), ca_key, ca_key.public_key(), False, now + timedelta(days=30)
    )

    def pem(cert):
        return cert.public_bytes(serialization.Encoding.PEM).decode("utf-8")

    return {
        "ca_pem": pem(ca_cert),
        "leaf_pem": pem(leaf_cert),
        "ca_key_id": x509.SubjectKeyIdentifier.from_public_key(ca_key.public_key()).digest.hex(),
        "leaf_key_id": x509.SubjectKeyIdentifier.from_public_key(leaf_key.public_key()).digest.hex(),
        "ca_expiry": now + timedelta(days=365),
        "leaf_expiry": now + timedelta(days=30),
    }


@pytest.fixture
def sample_inventory():
    """Inventory snapshot with a CA, a leaf and a password used by one deployment."""
    return {
        "credentials": [
            {
                "id": "ca-1",
                "name": "/bosh/cf/router_ca",
                "type": "certificate",
                "version_created_at": "2024-01-01T00:00:00Z",
                "certificate_authority": True,
                "self_signed": True,
                "expiry_date": "2034-01-01T00:00:00Z",
                "subject": "CN=router-ca",
                "issuer": "CN=router-ca",
                "subject_key_id": "aa",
                "authority_key_id": "aa",
            },
            {
                "id": "leaf-1",
                "name": "/bosh/cf/router_tls",
                "type": "certificate",
                "version_created_at": "2024-01-02T00:00:00Z",
                "expiry_date": "2026-01-02T00:00:00Z",
                "signed_by": "/bosh/cf/router_ca",
                "subject": "CN=router",
                "issuer": "CN=router-ca",
                "subject_key_id": "bb",
                "authority_key_id": "aa",
            },
            {
                "id": "pw-1",
                "name": "/bosh/cf/admin_password",
                "type": "password",
                "version_created_at": "2023-01-01T00:00:00Z",
            },
            {
                "id": "pw-2",
                "name": "/bosh/cf/admin_password",
                "type": "password",
                "version_created_at": "2024-06-01T00:00:00Z",
            },
        ],
        "variables": [
            {"id": "ca-1", "name": "/bosh/cf/router_ca", "deployment": "cf"},
            {"id": "leaf-1", "name": "/bosh/cf/router_tls", "deployment": "cf"},
            {
                "id": "pw-1",
                "name": "/bosh/cf/admin_password",
                "deployment": "cf",
                "definition": {"name": "admin_password", "type": "password"},
            },
        ],
    }


@pytest.fixture
def inventory_file(temp_directory, sample_inventory):
    """Write the sample inventory to a YAML file."""
    path = os.path.join(temp_directory, "inventory.yml")
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(sample_inventory, f)
    return path
