"""
Unit tests for the credential bundle model.
"""

import pytest

from daily_commit.credentials.models import CredentialBundle, parse_credential_bundle
from daily_commit.errors import IncompleteCredential


def test_parse_camel_case_document(credential_document):
    """Test the standard camelCase document."""
    bundle = parse_credential_bundle(credential_document)

    assert bundle.user_email == "bot@example.com"
    assert bundle.user_name == "Daily Bot"
    assert bundle.token.get_secret_value() == "ghp_test_token"
    assert bundle.repository_url == "https://github.com/example/daily.git"


def test_parse_legacy_field_names():
    """Test gitUserEmail / gitUserName / githubToken are accepted."""
    bundle = parse_credential_bundle(
        {
            "gitUserEmail": "legacy@example.com",
            "gitUserName": "Legacy",
            "githubToken": "tok",
            "repositoryUrl": "https://github.com/example/daily.git",
            "unrelated": "ignored",
        }
    )

    assert bundle.user_email == "legacy@example.com"
    assert bundle.token.get_secret_value() == "tok"


@pytest.mark.parametrize(
    "missing,expected_field",
    [
        ("userEmail", "userEmail"),
        ("userName", "userName"),
        ("token", "token"),
        ("repositoryUrl", "repositoryUrl"),
    ],
)
def test_missing_field_is_named(credential_document, missing, expected_field):
    """Test IncompleteCredential names the missing field."""
    payload = dict(credential_document)
    del payload[missing]

    with pytest.raises(IncompleteCredential) as exc_info:
        parse_credential_bundle(payload, key="test-secret")

    assert exc_info.value.field == expected_field
    assert exc_info.value.details["key"] == "test-secret"


def test_empty_value_counts_as_missing(credential_document):
    """Test empty strings are treated like absent fields."""
    payload = dict(credential_document, token="")

    with pytest.raises(IncompleteCredential) as exc_info:
        parse_credential_bundle(payload)

    assert exc_info.value.field == "token"


def test_token_is_not_exposed_in_repr(credential_bundle):
    """Test the token never appears in the model's string forms."""
    assert "ghp_test_token" not in repr(credential_bundle)
    assert "ghp_test_token" not in str(credential_bundle)


def test_authenticated_url_embeds_token(credential_bundle):
    """Test the push URL carries the token for https remotes."""
    assert credential_bundle.authenticated_url() == (
        "https://ghp_test_token@github.com/example/daily.git"
    )


def test_authenticated_url_leaves_other_remotes_alone():
    """Test non-https remotes (e.g. local paths) are used unchanged."""
    bundle = CredentialBundle(
        user_email="a@example.com",
        user_name="A",
        token="tok",
        repository_url="/srv/git/daily.git",
    )

    assert bundle.authenticated_url() == "/srv/git/daily.git"


@pytest.mark.parametrize("field,value", [("userEmail", 5), ("userName", ["bot"]), ("repositoryUrl", {"url": "x"})])
def test_wrong_typed_field_is_incomplete(credential_document, field, value):
    """Test a non-string field raises IncompleteCredential, not a validation error."""
    payload = dict(credential_document, **{field: value})

    with pytest.raises(IncompleteCredential) as exc_info:
        parse_credential_bundle(payload, key="test-secret")

    assert exc_info.value.field == field
    assert exc_info.value.retryable is False
