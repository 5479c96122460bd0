"""
HashiCorp Vault adapter for listing and reading kubeconfig secrets.

This module provides a minimal, token-authenticated client for the Vault HTTP
API. It only implements the two calls the Vault store needs: `LIST` on a key
prefix and `GET` of a single secret. Paths are used as given, which matches
the KV version 1 secrets engine. Every request is bounded by a timeout.
"""

import logging
from typing import Any

import httpx

from constants import VAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class VaultRequestError(Exception):
    """
    Raised when a Vault request fails, times out or returns an unexpected body.

    Attributes:
        path: The secret path the request was made for.
        status_code: The HTTP status code, if a response was received.
    """

    def __init__(self, message: str, path: str, status_code: int | None = None):
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class VaultClient:
    """
    Client for the Vault HTTP API.

    Attributes:
        address: The Vault API address, e.g. `https://vault.example.com:8200`.
    """

    def __init__(
        self,
        address: str,
        token: str,
        timeout: float = VAULT_TIMEOUT_SECONDS,
        session: httpx.Client | None = None,
    ):
        """
        Initialize a VaultClient.

        Args:
            address: The Vault API address.
            token: The Vault token sent with every request.
            timeout: Timeout in seconds applied to every request.
            session: Optional pre-configured httpx client (used by tests to
                inject a mock transport). The token header is still applied.
        """
        self.address = address.rstrip("/")
        self._token = token
        self._timeout = timeout
        if session is not None:
            self._session = session
            self._owns_session = False
        else:
            self._session = httpx.Client(timeout=timeout)
            self._owns_session = True

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def list_keys(self, path: str) -> list[str]:
        """
        List the keys directly below a prefix with a single `LIST` request.

        Keys ending in `/` are sub-folders. A prefix Vault does not know
        yields an empty list and logs a warning naming it.

        Raises:
            VaultRequestError: If the request fails or the body is malformed.
        """
        response = self._request("LIST", path)
        if response.status_code == 404:
            logger.warning("Vault has no keys under '%s'", path.strip("/"))
            return []
        body = self._json(response, path)
        try:
            keys = body["data"]["keys"]
        except (KeyError, TypeError) as e:
            raise VaultRequestError(
                f"Unexpected list response for '{path}'", path, response.status_code
            ) from e
        return [str(k) for k in keys]

    def read(self, path: str) -> dict[str, Any]:
        """
        Read the data fields of one secret with a single `GET` request.

        Raises:
            VaultRequestError: If the secret does not exist, the request fails
                or the body is malformed.
        """
        response = self._request("GET", path)
        if response.status_code == 404:
            raise VaultRequestError(f"Secret '{path}' not found", path, 404)
        body = self._json(response, path)

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise VaultRequestError(
                f"Unexpected read response for '{path}'", path, response.status_code
            )
        return data

    def _request(self, method: str, path: str) -> httpx.Response:
        url = f"{self.address}/v1/{path.strip('/')}"
        try:
            response = self._session.request(
                method,
                url,
                headers={"X-Vault-Token": self._token},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise VaultRequestError(f"Request to Vault timed out: {url}", path) from e
        except httpx.HTTPError as e:
            raise VaultRequestError(f"Request to Vault failed: {e}", path) from e

        if response.status_code == 404:
            return response
        if response.status_code in (401, 403):
            raise VaultRequestError(
                f"Permission denied by Vault for '{path}' (check your token)",
                path,
                response.status_code,
            )
        if response.is_error:
            raise VaultRequestError(
                f"Vault returned HTTP {response.status_code} for '{path}'",
                path,
                response.status_code,
            )
        return response

    def _json(self, response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise VaultRequestError(
                f"Vault returned invalid JSON for '{path}'", path, response.status_code
            ) from e
