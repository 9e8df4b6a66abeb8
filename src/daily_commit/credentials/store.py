"""
Credential store collaborator.

HttpCredentialStore reads a secret document over HTTP (a secrets-manager
style endpoint: ``GET {base_url}/v1/secrets/{key}``). The response is either
the credential document itself or an envelope whose ``SecretString`` holds
the document as a JSON string.

All httpx failures are converted into the job error taxonomy here:

- timeouts, transport errors, 429 and 5xx -> CredentialStoreUnavailable (retryable)
- other 4xx, empty or non-JSON secrets    -> CredentialStoreRejected (permanent)
"""

import json
from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog

from daily_commit.errors import CredentialStoreRejected, CredentialStoreUnavailable

logger = structlog.get_logger(__name__)

TRANSIENT_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class CredentialStore(Protocol):
    """Source of credential documents."""

    async def fetch(self, key: str) -> dict[str, Any]:
        """Return the raw credential document stored under ``key``."""
        ...


class HttpCredentialStore:
    """
    Async HTTP client for the secrets endpoint.

    Attributes:
        base_url: Store base URL
        timeout: Per-request timeout (seconds)
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
        )

    async def fetch(self, key: str) -> dict[str, Any]:
        path = f"/v1/secrets/{quote(key, safe='')}"
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as exc:
            raise CredentialStoreUnavailable(
                "Credential store request timed out", {"key": key, "timeout": self.timeout}
            ) from exc
        except httpx.TransportError as exc:
            raise CredentialStoreUnavailable(
                "Unable to reach credential store",
                {"key": key, "error_type": type(exc).__name__},
            ) from exc

        if response.status_code in TRANSIENT_STATUS_CODES:
            raise CredentialStoreUnavailable(
                "Credential store temporarily unavailable",
                {"key": key, "status_code": response.status_code},
            )
        if response.status_code >= 400:
            raise CredentialStoreRejected(
                "Credential store rejected the request",
                {"key": key, "status_code": response.status_code},
            )

        try:
            document = response.json()
            if isinstance(document, dict) and "SecretString" in document:
                secret_string = document["SecretString"]
                if not secret_string:
                    raise CredentialStoreRejected("Secret value is empty or not found", {"key": key})
                document = json.loads(secret_string)
        except ValueError as exc:
            raise CredentialStoreRejected(
                "Secret value is not valid JSON", {"key": key}
            ) from exc

        if not isinstance(document, dict) or not document:
            raise CredentialStoreRejected("Secret value is empty or not found", {"key": key})

        logger.debug("Credential document retrieved", key=key)
        return document

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()
