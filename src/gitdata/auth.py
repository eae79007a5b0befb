"""Credentials accepted by the GitHub API.

Two schemes are supported: HTTP basic authentication with base64 encoded
``user:password`` credentials and OAuth access tokens.
"""

import base64
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class BasicCredential(BaseModel):
    """HTTP basic credential, ``user:password`` base64 encoded."""

    scheme: Literal["basic"] = "basic"
    encoded_credentials: str = Field(default="", description="base64(user:password)")

    @classmethod
    def from_user_password(cls, user: str, password: str) -> "BasicCredential":
        raw = f"{user}:{password}".encode("utf-8")
        return cls(encoded_credentials=base64.b64encode(raw).decode("ascii"))

    def is_valid(self) -> bool:
        return bool(self.encoded_credentials)

    def authorization_header(self) -> str:
        return f"Basic {self.encoded_credentials}"


class OAuthCredential(BaseModel):
    """OAuth access token credential."""

    scheme: Literal["oauth"] = "oauth"
    access_token: str = Field(default="", description="OAuth access token")
    scope: Optional[str] = Field(default=None, description="Granted scopes")

    def is_valid(self) -> bool:
        return bool(self.access_token)

    def authorization_header(self) -> str:
        return f"token {self.access_token}"


Credential = Union[BasicCredential, OAuthCredential]


def is_credential_valid(credential: Optional[Credential]) -> bool:
    """Check that a credential is present and well formed."""
    if credential is None:
        return False
    return credential.is_valid()
