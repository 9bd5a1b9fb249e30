import uuid

import pytest
from pydantic import ValidationError

from models.release import ReleaseEnvironment
from schemas.application import ApplicationCreateRequest, ApplicationFromArtifactRequest
from schemas.artifact import ArtifactCreateRequest, ArtifactMetadataRequest
from schemas.auth import ChangePasswordRequest, UserRegister
from schemas.release import ReleaseCreateRequest, ReleaseWithArtifactRequest


def _messages(exc_info) -> str:
    return " ".join(str(error.get("msg", "")) for error in exc_info.value.errors())


def test_user_register_valid():
    """Test a valid registration payload."""
    request = UserRegister(email="dev@example.com", username="dev_1", password="Secret123")
    assert request.username == "dev_1"


@pytest.mark.parametrize(
    "password,message",
    [
        ("Ab1", "at least 8 characters"),
        ("ALLUPPER123", "lowercase letter"),
        ("alllower123", "uppercase letter"),
        ("NoDigitsHere", "number"),
    ],
)
def test_user_register_password_rules(password, message):
    with pytest.raises(ValidationError) as exc_info:
        UserRegister(email="dev@example.com", username="dev", password=password)
    assert message in _messages(exc_info)


def test_user_register_username_characters():
    with pytest.raises(ValidationError) as exc_info:
        UserRegister(email="dev@example.com", username="dev-ops", password="Secret123")
    assert "letters, numbers, and underscores" in _messages(exc_info)


@pytest.mark.parametrize("package_name", ["com.example.app", "org.acme_co.App2"])
def test_application_package_name_accepted(package_name):
    request = ApplicationCreateRequest(title="App", package_name=package_name)
    assert request.package_name == package_name


@pytest.mark.parametrize("package_name", ["example", "com..app", "1com.app", "com.app-x"])
def test_application_package_name_rejected(package_name):
    """Package names need at least two identifier segments."""
    with pytest.raises(ValidationError):
        ApplicationCreateRequest(title="App", package_name=package_name)


def test_artifact_sha256_is_lowercased():
    request = ArtifactCreateRequest(
        release_id=uuid.uuid4(),
        file_url="https://cdn.example.com/a.apk",
        sha256="AB" * 32,
        file_size=10,
        file_type="application/vnd.android.package-archive",
    )
    assert request.sha256 == "ab" * 32
    assert request.abi is None


@pytest.mark.parametrize("sha256", ["", "a" * 63, "g" * 64])
def test_artifact_sha256_rejected(sha256):
    with pytest.raises(ValidationError) as exc_info:
        ArtifactCreateRequest(
            release_id=uuid.uuid4(),
            file_url="https://cdn.example.com/a.apk",
            sha256=sha256,
            file_size=10,
            file_type="application/vnd.android.package-archive",
        )
    assert "64 hexadecimal characters" in _messages(exc_info)


def test_release_version_code_bounds():
    with pytest.raises(ValidationError):
        ReleaseCreateRequest(title="Build", version_code=0, version_name="0", environment="production")
    with pytest.raises(ValidationError):
        ReleaseCreateRequest(
            title="Build", version_code=2 ** 31, version_name="0", environment="production"
        )

    request = ReleaseCreateRequest(
        title="Build", version_code=2 ** 31 - 1, version_name="x", environment="staging"
    )
    assert request.environment is ReleaseEnvironment.STAGING


def test_change_password_applies_strength_rules():
    with pytest.raises(ValidationError) as exc_info:
        ChangePasswordRequest(current_password="anything", new_password="alllower123")
    assert "uppercase letter" in _messages(exc_info)

    request = ChangePasswordRequest(current_password="anything", new_password="Stronger123")
    assert request.new_password == "Stronger123"


@pytest.mark.parametrize(
    "schema,extra",
    [
        (ReleaseWithArtifactRequest, {"environment": "staging"}),
        (ArtifactMetadataRequest, {}),
        (ApplicationFromArtifactRequest, {"project_id": uuid.uuid4(), "title": "App"}),
    ],
)
def test_artifact_url_length_limit(schema, extra):
    """artifact_url is stored in a 512 character column."""
    url = "https://cdn.example.com/" + "a" * 488
    assert len(schema(artifact_url=url, **extra).artifact_url) == 512

    with pytest.raises(ValidationError):
        schema(artifact_url=url + "a", **extra)
