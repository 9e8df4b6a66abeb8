"""
Job request and result models.

JobRequest is the optional payload accepted by both triggers. Every field is
optional; ``with_defaults`` substitutes the daily defaults. Field validators
sanitize the values before they ever reach the file system or git.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_CONTENT_LENGTH = 10_000
MAX_COMMIT_MESSAGE_LENGTH = 500
MAX_CREDENTIAL_KEY_LENGTH = 512

_INVALID_PATH_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_DANGEROUS_MESSAGE = re.compile(r"<script|javascript:|data:", re.IGNORECASE)
_CREDENTIAL_KEY = re.compile(r"^[a-zA-Z0-9/_+=.@-]+$")


class JobRequest(BaseModel):
    """
    Optional overrides for a single job run.

    Accepts camelCase (``filePath``) and snake_case (``file_path``) keys;
    ``secretName`` is accepted for ``credentialKey``.
    """

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    file_path: Optional[str] = Field(
        None, description="Relative .txt path inside the checkout", examples=["daily-commit.txt"]
    )
    new_content: Optional[str] = Field(
        None, description="New file content (max 10,000 characters)"
    )
    commit_message: Optional[str] = Field(
        None, description="Commit message (1-500 characters)"
    )
    credential_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("credentialKey", "secretName", "credential_key"),
        description="Credential-store key holding the git credentials",
    )

    @field_validator("file_path")
    @classmethod
    def sanitize_file_path(cls, value: Optional[str]) -> Optional[str]:
        """Strip traversal sequences and leading slashes; only .txt files."""
        if not value:
            return None

        sanitized = value.replace("..", "")
        sanitized = re.sub(r"/+", "/", sanitized)
        sanitized = re.sub(r"^/+", "", sanitized).strip()

        if not sanitized:
            raise ValueError("Invalid file path")
        if not sanitized.endswith(".txt"):
            raise ValueError("Only .txt files are allowed")
        if _INVALID_PATH_CHARS.search(sanitized):
            raise ValueError("File path contains invalid characters")
        return sanitized

    @field_validator("new_content")
    @classmethod
    def sanitize_content(cls, value: Optional[str]) -> Optional[str]:
        """Limit size and drop control characters other than tab and newlines."""
        if not value:
            return None
        if len(value) > MAX_CONTENT_LENGTH:
            raise ValueError("File content is too large (max 10,000 characters)")
        return _CONTROL_CHARS.sub("", value)

    @field_validator("commit_message")
    @classmethod
    def sanitize_commit_message(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None

        sanitized = value.strip()
        if not sanitized:
            raise ValueError("Commit message cannot be empty")
        if len(sanitized) > MAX_COMMIT_MESSAGE_LENGTH:
            raise ValueError("Commit message is too long (max 500 characters)")
        if _DANGEROUS_MESSAGE.search(sanitized):
            raise ValueError("Commit message contains potentially dangerous content")
        return sanitized

    @field_validator("credential_key")
    @classmethod
    def validate_credential_key(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None

        sanitized = value.strip()
        if not sanitized:
            raise ValueError("Credential key cannot be empty")
        if len(sanitized) > MAX_CREDENTIAL_KEY_LENGTH:
            raise ValueError("Credential key is too long (max 512 characters)")
        if not _CREDENTIAL_KEY.match(sanitized):
            raise ValueError("Credential key contains invalid characters")
        return sanitized

    def with_defaults(
        self,
        credential_key: str,
        file_path: str = "daily-commit.txt",
        now: Optional[datetime] = None,
    ) -> "JobRequest":
        """
        Return a copy with every omitted field filled in.

        Args:
            credential_key: Default credential-store key (SECRET_NAME)
            file_path: Default file path
            now: Timestamp used for the default content and message
        """
        now = now or datetime.now(timezone.utc)
        return self.model_copy(
            update={
                "file_path": self.file_path or file_path,
                "new_content": self.new_content or f"Daily commit - {now.isoformat()}",
                "commit_message": self.commit_message or f"Daily commit - {now.date().isoformat()}",
                "credential_key": self.credential_key or credential_key,
            }
        )


class JobResult(BaseModel):
    """Outcome of a successful job run."""

    message: str = Field(default="File modified and changes committed successfully")
    file_path: str
    commit_message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    execution_time_ms: int = Field(..., ge=0)
    retries: int = Field(default=0, ge=0)
    request_id: Optional[str] = None
