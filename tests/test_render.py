"""Tests for the text renderers."""

from datetime import datetime, timedelta, timezone

from carousel.bosh.models import UpdateMode, VariableDefinition
from carousel.credhub.models import CredentialType
from carousel.render import relative_time, render_details, render_table
from carousel.state import Credential, Credentials, Deployment, Deployments, Path, RegenerationCriteria, Signing


class TestRelativeTime:
    """Test human readable time offsets."""

    def setup_method(self):
        self.now = datetime(2025, 6, 1, tzinfo=timezone.utc)

    def test_past_and_future(self):
        assert relative_time(self.now - timedelta(days=1), self.now) == "1 day ago"
        assert relative_time(self.now + timedelta(hours=2, minutes=5), self.now) == "2 hours from now"
        assert relative_time(self.now - timedelta(days=800), self.now) == "2 years ago"
        assert relative_time(self.now + timedelta(seconds=30), self.now) == "30 seconds from now"

    def test_now(self):
        assert relative_time(self.now, self.now) == "now"


class TestRenderDetails:
    """Test the details views."""

    def setup_method(self):
        self.now = datetime(2025, 6, 1, tzinfo=timezone.utc)
        cf = Deployment(name="cf")
        self.ca_path = Path(name="/ca")
        self.ca = Credential(
            id="ca-1",
            name="/ca",
            type=CredentialType.CERTIFICATE,
            latest=True,
            certificate_authority=True,
            self_signed=True,
            signing=Signing.SIGNER,
            path=self.ca_path,
        )
        self.ca_path.versions = Credentials([self.ca])
        self.path = Path(
            name="/leaf",
            variable_definition=VariableDefinition(name="leaf", type="certificate", update_mode=UpdateMode.NO_OVERWRITE),
            deployments=Deployments([cf]),
        )
        self.leaf = Credential(
            id="leaf-2",
            name="/leaf",
            type=CredentialType.CERTIFICATE,
            version_created_at=self.now - timedelta(days=3),
            expiry_date=self.now + timedelta(days=30),
            latest=True,
            deployments=Deployments([cf]),
            signed_by=self.ca,
            cas=Credentials([self.ca]),
            path=self.path,
        )
        self.old_leaf = Credential(
            id="leaf-1", name="/leaf", type=CredentialType.CERTIFICATE, transitional=True, path=self.path
        )
        self.path.versions = Credentials([self.leaf, self.old_leaf])
        self.ca.signs = Credentials([self.leaf])

    def test_path_details(self):
        """Test that a path shows its deployments, versions and definition."""
        text = render_details(self.path)

        assert "Name         /leaf" in text
        assert "Deployments  cf" in text
        assert "Update Mode  no-overwrite" in text
        assert "Versions     leaf-2 (latest), leaf-1 (transitional)" in text
        assert "Variable definition:\n  name: leaf\n  type: certificate\n  update_mode: no-overwrite" in text

    def test_credential_details(self):
        """Test the certificate fields of a version."""
        text = render_details(self.leaf, self.now)

        assert "ID                     leaf-2" in text
        assert "3 days ago" in text
        assert "30 days from now" in text
        assert "Signed By              /ca@ca-1" in text
        assert "Referenced CA's        ca-1" in text
        assert "Signing                unknown" in text

    def test_empty_values_are_omitted(self):
        """Test that rows without a value are left out."""
        text = render_details(self.old_leaf, self.now)

        assert "Created At" not in text
        assert "Signed By" not in text
        assert "Deployments" not in text
        assert "Transitional           true" in text

    def test_non_certificate_details(self):
        password = Credential(id="pw", name="/pw", type=CredentialType.PASSWORD, latest=True)

        text = render_details(password)

        assert "Type          password" in text
        assert "Expiry" not in text

    def test_nothing_selected(self):
        assert render_details(None).startswith("Nothing selected")


class TestRenderTable:
    """Test the credential table."""

    def setup_method(self):
        self.now = datetime(2025, 6, 1, tzinfo=timezone.utc)
        self.path = Path(name="/pw", deployments=Deployments([Deployment(name="cf")]))
        self.credential = Credential(
            id="pw-1",
            name="/pw",
            type=CredentialType.PASSWORD,
            version_created_at=self.now - timedelta(days=2),
            latest=True,
            path=self.path,
        )

    def test_table(self):
        lines = render_table(Credentials([self.credential]), now=self.now).splitlines()

        assert lines[0].split() == ["NAME", "ID", "TYPE", "CREATED", "EXPIRES", "FLAGS", "DEPLOYMENTS"]
        assert lines[1].split() == ["/pw", "pw-1", "password", "2", "days", "ago", "-", "latest", "-"]

    def test_table_with_actions(self):
        lines = render_table(Credentials([self.credential]), criteria=RegenerationCriteria(), now=self.now).splitlines()

        assert lines[0].split()[-1] == "ACTION"
        assert lines[1].split()[-1] == "bosh-deploy"

    def test_columns_aligned(self):
        other = Credential(id="a-much-longer-id", name="/pw", type=CredentialType.PASSWORD)

        lines = render_table(Credentials([self.credential, other]), now=self.now).splitlines()

        assert lines[0].index("TYPE") == lines[1].index("password") == lines[2].index("password")
