"""OAuth authorization against GitHub.

The browser side of the flow (opening the authorize page and relaying the
temporary code back) belongs to the caller. It hands the relayed message to an
``OAuthHandshake``, which completes exactly once; ``OAuthClient`` then trades
the temporary code for an access token through a token tunnel endpoint.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..auth import OAuthCredential
from ..errors import OAuthCodeError, OAuthTokenError, TransportFailureError

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
MESSAGE_ORIGIN = "github_oauth"


@dataclass
class OAuthCode:
    """Temporary code returned by the authorize page."""

    code: str
    state: Optional[str] = None


class OAuthHandshake:
    """One-shot receiver for the authorize page's reply.

    The first message from the expected origin completes the handshake; any
    later message is ignored.
    """

    def __init__(self) -> None:
        self._future: Optional["asyncio.Future[OAuthCode]"] = None

    def _get_future(self) -> "asyncio.Future[OAuthCode]":
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    @property
    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def deliver(self, message: Dict[str, Any]) -> bool:
        """Feed a relayed message; return True if it completed the handshake."""
        if message.get("origin") != MESSAGE_ORIGIN:
            return False

        future = self._get_future()
        if future.done():
            logger.debug("Ignoring duplicate OAuth handshake message")
            return False

        if message.get("error"):
            future.set_exception(OAuthCodeError(details=message["error"]))
        elif not message.get("code"):
            future.set_exception(OAuthCodeError(details="No code in message"))
        else:
            future.set_result(OAuthCode(code=message["code"], state=message.get("state")))
        return True

    async def wait(self) -> OAuthCode:
        """Wait for the handshake to complete."""
        return await self._get_future()


class OAuthClient:
    """Exchanges OAuth temporary codes for access tokens."""

    def __init__(self, client_id: str, tunnel_url: str, timeout: float = 30.0):
        self.client_id = client_id
        self.tunnel_url = tunnel_url
        self.timeout = timeout
        self._session: Optional[httpx.AsyncClient] = None

    @property
    def session(self) -> httpx.AsyncClient:
        if self._session is None or self._session.is_closed:
            self._session = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
            )
        return self._session

    def authorize_url(self, scope: str = "") -> str:
        """Build the URL of GitHub's authorize page."""
        url = httpx.URL(AUTHORIZE_URL, params={"client_id": self.client_id, "scope": scope})
        return str(url)

    async def exchange_code(self, code: OAuthCode) -> OAuthCredential:
        """Trade a temporary code for an access token.

        Raises:
            TransportFailureError: If the tunnel cannot be reached
            OAuthTokenError: If the tunnel reports an error or no token
        """
        params = {"client_id": self.client_id, "code": code.code}
        if code.state:
            params["state"] = code.state

        try:
            response = await self.session.get(self.tunnel_url, params=params)
        except httpx.HTTPError as e:
            raise TransportFailureError(
                str(e) or type(e).__name__, details={"url": self.tunnel_url}
            )

        if response.status_code != 200:
            raise TransportFailureError(
                response.reason_phrase or f"HTTP {response.status_code}",
                details={"status_code": response.status_code, "url": self.tunnel_url},
            )

        try:
            token = response.json()
        except ValueError as e:
            raise TransportFailureError(f"Malformed token response: {e}")

        if not isinstance(token, dict) or token.get("error"):
            error = token.get("error") if isinstance(token, dict) else token
            raise OAuthTokenError(details=error)

        access_token = token.get("access_token")
        if not access_token:
            raise OAuthTokenError(details="No access token in response")

        logger.info("OAuth access token obtained")
        return OAuthCredential(access_token=access_token, scope=token.get("scope"))

    async def authorize(self, handshake: OAuthHandshake) -> OAuthCredential:
        """Wait for the handshake's code and exchange it for a credential."""
        code = await handshake.wait()
        return await self.exchange_code(code)

    async def close(self) -> None:
        if self._session and not self._session.is_closed:
            await self._session.aclose()
