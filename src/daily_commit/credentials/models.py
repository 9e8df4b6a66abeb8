"""
Credential bundle model.

The credential store returns a JSON document with the git identity, a push
token and the target repository. Both the camelCase names and the older
``git*`` / ``githubToken`` names are accepted.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, ValidationError

from daily_commit.errors import IncompleteCredential

# field name -> accepted keys in the store payload
REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "user_email": ("userEmail", "gitUserEmail"),
    "user_name": ("userName", "gitUserName"),
    "token": ("token", "githubToken"),
    "repository_url": ("repositoryUrl",),
}


class CredentialBundle(BaseModel):
    """Identity and authentication needed to push to the target repository."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    user_email: str = Field(validation_alias=AliasChoices(*REQUIRED_FIELDS["user_email"]))
    user_name: str = Field(validation_alias=AliasChoices(*REQUIRED_FIELDS["user_name"]))
    token: SecretStr = Field(validation_alias=AliasChoices(*REQUIRED_FIELDS["token"]))
    repository_url: str = Field(validation_alias=AliasChoices(*REQUIRED_FIELDS["repository_url"]))

    def authenticated_url(self) -> str:
        """Repository URL with the token embedded (only ever passed to git push)."""
        token = self.token.get_secret_value()
        if self.repository_url.startswith("https://"):
            return self.repository_url.replace("https://", f"https://{token}@", 1)
        return self.repository_url


def parse_credential_bundle(payload: dict[str, Any], key: str | None = None) -> CredentialBundle:
    """
    Validate a store payload and build a CredentialBundle.

    A field counts as missing when absent or empty, and as invalid when it
    has the wrong type.

    Raises:
        IncompleteCredential: Naming the first missing or invalid field
    """
    for field_name, aliases in REQUIRED_FIELDS.items():
        if not any(payload.get(alias) for alias in aliases):
            raise IncompleteCredential(aliases[0], key=key)
    try:
        return CredentialBundle.model_validate(payload)
    except ValidationError as exc:
        raise IncompleteCredential(_store_field_name(exc), key=key) from None


def _store_field_name(exc: ValidationError) -> str:
    """Store-payload name of the first field rejected by validation."""
    errors = exc.errors()
    loc = errors[0]["loc"] if errors and errors[0]["loc"] else ("unknown",)
    for field_name, aliases in REQUIRED_FIELDS.items():
        if loc[0] == field_name or loc[0] in aliases:
            return aliases[0]
    return str(loc[0])
