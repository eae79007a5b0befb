"""Error taxonomy for gitdata operations.

Every failure surfaced by the library is a ``GitDataError`` carrying a stable
error code, a human readable message and optional details. ``to_dict`` gives
the structured ``{code, message, details}`` value handed to callers.
"""

from typing import Any, Dict, Optional


class GitDataError(Exception):
    """Base exception for all gitdata failures."""

    code = "ERR_GITDATA_000"
    default_message = "An error occurred talking to the object store"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Return the structured failure value."""
        return {"code": self.code, "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class TransportFailureError(GitDataError):
    """Raised when a remote call does not complete successfully."""

    code = "ERR-AJAX-001"
    default_message = "An error occurred during the remote request"

    @property
    def status_code(self) -> Optional[int]:
        if isinstance(self.details, dict):
            return self.details.get("status_code")
        return None


class NeedsAuthenticationError(GitDataError):
    """Raised when a mutating call is attempted without a valid credential."""

    code = "ERR_AUTH_001"
    default_message = "Authentication to GitHub is needed to perform this operation"


class OAuthCodeError(GitDataError):
    """Raised when the OAuth temporary code could not be obtained."""

    code = "ERR_OAUTH_001"
    default_message = "An error occurred retrieving OAuth temporary code"


class OAuthTokenError(GitDataError):
    """Raised when the OAuth access token exchange fails."""

    code = "ERR_OAUTH_002"
    default_message = "An error occurred retrieving OAuth token from GitHub servers"


class CommitObjectNotFoundError(GitDataError):
    """Raised when a reference does not address a commit object."""

    code = "ERR_COMMIT_001"
    default_message = "Commit object not found"


class PathNotFoundError(GitDataError):
    """Raised when a path segment has no matching tree entry."""

    code = "ERR_TREE_001"
    default_message = "Path not found"


class BlobNotFoundError(GitDataError):
    """Raised when the last path segment names no blob."""

    code = "ERR_BLOB_001"
    default_message = "Blob not found"
