"""API client abstractions for the GitHub git data API.

All HTTP functionality is contained within dedicated API client classes.
"""

from .base_client import GitDataAPIClient, parse_response
from .oauth_client import OAuthClient, OAuthCode, OAuthHandshake

__all__ = [
    # Base client
    "GitDataAPIClient",
    "parse_response",
    # OAuth
    "OAuthClient",
    "OAuthCode",
    "OAuthHandshake",
]
