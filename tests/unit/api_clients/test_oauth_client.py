"""Tests for the OAuth handshake and token exchange."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from gitdata.api_clients.oauth_client import OAuthClient, OAuthCode, OAuthHandshake
from gitdata.auth import OAuthCredential
from gitdata.errors import OAuthCodeError, OAuthTokenError, TransportFailureError


class TestOAuthHandshake:
    """The handshake completes exactly once per authorization attempt."""

    @pytest.mark.asyncio
    async def test_first_message_completes_handshake(self):
        handshake = OAuthHandshake()

        assert handshake.deliver({"origin": "github_oauth", "code": "c1", "state": "s1"})

        code = await handshake.wait()
        assert code == OAuthCode(code="c1", state="s1")
        assert handshake.done

    @pytest.mark.asyncio
    async def test_duplicate_messages_are_ignored(self):
        handshake = OAuthHandshake()
        handshake.deliver({"origin": "github_oauth", "code": "c1"})

        assert handshake.deliver({"origin": "github_oauth", "code": "c2"}) is False
        assert (await handshake.wait()).code == "c1"

    @pytest.mark.asyncio
    async def test_foreign_origin_is_ignored(self):
        handshake = OAuthHandshake()

        assert handshake.deliver({"origin": "elsewhere", "code": "c1"}) is False
        assert not handshake.done

    @pytest.mark.asyncio
    async def test_error_message_fails_handshake(self):
        handshake = OAuthHandshake()
        handshake.deliver({"origin": "github_oauth", "error": "access_denied"})

        with pytest.raises(OAuthCodeError) as exc_info:
            await handshake.wait()
        assert exc_info.value.details == "access_denied"

    @pytest.mark.asyncio
    async def test_wait_resumes_when_message_arrives_later(self):
        handshake = OAuthHandshake()
        waiter = asyncio.ensure_future(handshake.wait())
        await asyncio.sleep(0)

        handshake.deliver({"origin": "github_oauth", "code": "late"})

        assert (await waiter).code == "late"


class TestOAuthClient:
    """Token exchange through the tunnel endpoint."""

    @pytest.fixture
    def oauth_client(self):
        return OAuthClient(client_id="cid", tunnel_url="https://tunnel.example.com/token")

    def _mock_get(self, oauth_client, response=None, side_effect=None):
        session = MagicMock()
        session.is_closed = False
        session.get = AsyncMock(return_value=response, side_effect=side_effect)
        oauth_client._session = session
        return session

    def test_authorize_url(self, oauth_client):
        url = oauth_client.authorize_url(scope="repo")
        assert url.startswith("https://github.com/login/oauth/authorize?")
        assert "client_id=cid" in url
        assert "scope=repo" in url

    @pytest.mark.asyncio
    async def test_exchange_code_returns_credential(self, oauth_client):
        session = self._mock_get(
            oauth_client, httpx.Response(200, json={"access_token": "tok", "scope": "repo"})
        )

        credential = await oauth_client.exchange_code(OAuthCode(code="c1", state="s1"))

        assert credential == OAuthCredential(access_token="tok", scope="repo")
        assert session.get.call_args.kwargs["params"] == {
            "client_id": "cid",
            "code": "c1",
            "state": "s1",
        }

    @pytest.mark.asyncio
    async def test_tunnel_error_raises_token_error(self, oauth_client):
        self._mock_get(oauth_client, httpx.Response(200, json={"error": "bad_verification_code"}))

        with pytest.raises(OAuthTokenError) as exc_info:
            await oauth_client.exchange_code(OAuthCode(code="c1"))
        assert exc_info.value.code == "ERR_OAUTH_002"
        assert exc_info.value.details == "bad_verification_code"

    @pytest.mark.asyncio
    async def test_missing_token_raises_token_error(self, oauth_client):
        self._mock_get(oauth_client, httpx.Response(200, json={}))

        with pytest.raises(OAuthTokenError):
            await oauth_client.exchange_code(OAuthCode(code="c1"))

    @pytest.mark.asyncio
    async def test_unreachable_tunnel_raises_transport_failure(self, oauth_client):
        self._mock_get(oauth_client, side_effect=httpx.ConnectError("down"))

        with pytest.raises(TransportFailureError):
            await oauth_client.exchange_code(OAuthCode(code="c1"))

    @pytest.mark.asyncio
    async def test_authorize_waits_for_handshake(self, oauth_client):
        self._mock_get(oauth_client, httpx.Response(200, json={"access_token": "tok"}))
        handshake = OAuthHandshake()
        handshake.deliver({"origin": "github_oauth", "code": "c1"})

        credential = await oauth_client.authorize(handshake)

        assert credential.is_valid()
