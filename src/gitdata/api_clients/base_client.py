"""Base GitHub git data API client.

Provides the typed GET/POST access to the remote object store, the credential
held by a client instance and the authentication gate guarding mutating
calls.
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..auth import Credential, is_credential_valid
from ..config import ClientConfig
from ..errors import GitDataError, NeedsAuthenticationError, TransportFailureError
from ..services.tree_cache import TreeCache

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_response(model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """Validate a response body into a model.

    Raises:
        TransportFailureError: If the body does not have the expected shape
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TransportFailureError(
            f"Malformed {model.__name__} in response body",
            details={"errors": e.errors(include_url=False)},
        )


class GitDataAPIClient:
    """Remote object access bound to one repository.

    A client instance owns its credential and its tree cache; nothing is
    shared between instances.
    """

    def __init__(
        self,
        config: ClientConfig,
        credential: Optional[Credential] = None,
    ):
        """Initialize the API client.

        Args:
            config: Client configuration (API URL, repository, cache flag)
            credential: Optional credential used for every subsequent call
        """
        self.config = config
        self._credential: Optional[Credential] = credential
        self._session: Optional[httpx.AsyncClient] = None
        self.tree_cache = TreeCache(enabled=config.use_tree_cache)

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            timeouts = httpx.Timeout(self.config.timeout, connect=10.0)
            self._session = httpx.AsyncClient(
                timeout=timeouts,
                headers={
                    "Accept": "application/vnd.github+json",
                    "Content-Type": "application/json",
                },
                follow_redirects=True,
            )
        return self._session

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    def set_credential(self, credential: Optional[Credential]) -> None:
        """Set the credential used by all later calls of this client."""
        self._credential = credential
        if credential is None:
            logger.debug("Credential cleared")
        else:
            logger.debug(f"Credential set using {credential.scheme} scheme")

    def check_authorized(self) -> bool:
        """Check that a valid credential is present.

        Reports the failure with a warning when no usable credential is set.
        """
        if is_credential_valid(self._credential):
            return True
        logger.warning("Operation requires authentication but no valid credential is set")
        return False

    def require_authorization(self) -> None:
        """Raise NeedsAuthenticationError unless a valid credential is set."""
        if not self.check_authorized():
            raise NeedsAuthenticationError()

    def _auth_headers(self) -> Dict[str, str]:
        if self._credential is None:
            return {}
        return {"Authorization": self._credential.authorization_header()}

    def _url(self, path: str) -> str:
        return f"{self.config.api_url}{self.config.repo_path}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs,
    ) -> Dict[str, Any]:
        """Perform one request and return the parsed JSON object.

        Args:
            method: HTTP method (GET or POST)
            path: Path relative to the repository, e.g. ``/git/trees/abc``
            **kwargs: Additional arguments for httpx request

        Returns:
            Parsed JSON object from the response body

        Raises:
            TransportFailureError: On network errors, non-2xx status codes or
                bodies that are not a JSON object
        """
        url = self._url(path)
        headers = kwargs.pop("headers", {})
        headers.update(self._auth_headers())

        logger.debug(f"{method} {url}")
        try:
            response = await self.session.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise TransportFailureError(
                str(e) or type(e).__name__,
                details={"status_code": None, "url": url, "error": type(e).__name__},
            )

        if not 200 <= response.status_code < 300:
            reason = response.reason_phrase or f"HTTP {response.status_code}"
            logger.debug(f"{method} {url} failed with {response.status_code}")
            raise TransportFailureError(
                reason,
                details={
                    "status_code": response.status_code,
                    "url": url,
                    "body": response.text,
                },
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportFailureError(
                f"Malformed response body: {e}",
                details={
                    "status_code": response.status_code,
                    "url": url,
                    "body": response.text,
                },
            )

        if not isinstance(data, dict):
            raise TransportFailureError(
                "Malformed response body: expected a JSON object",
                details={"status_code": response.status_code, "url": url},
            )
        return data

    async def fetch_object(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """GET an object from the store.

        Raises:
            TransportFailureError: If the remote call fails
        """
        try:
            return await self._request("GET", path, params=params)
        except GitDataError:
            raise
        except Exception as e:
            raise TransportFailureError(f"Unexpected error fetching {path}: {e}")

    async def create_object(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST a new object (or reference update) to the store.

        Raises:
            TransportFailureError: If the remote call fails
        """
        try:
            return await self._request("POST", path, json=body)
        except GitDataError:
            raise
        except Exception as e:
            raise TransportFailureError(f"Unexpected error posting {path}: {e}")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
