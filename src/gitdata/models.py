"""Object models for the remote git data store.

Trees, blobs, commits and references as returned by the GitHub git data API,
validated with pydantic. All objects except ``Reference`` are content
addressed and frozen once built.
"""

import base64
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

EntryType = Literal["tree", "blob", "commit"]


class TreeEntry(BaseModel):
    """A named entry of a tree, pointing at a nested tree or a blob."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Entry name relative to its tree")
    mode: str = Field(..., description="File mode, e.g. 100644 or 040000")
    # "commit" entries are submodule links and cannot be navigated into
    type: EntryType = Field(..., description="Kind of object the entry points to")
    sha: str = Field(..., description="Content address of the target object")
    size: Optional[int] = Field(default=None, description="Blob size in bytes")
    url: Optional[str] = Field(default=None, description="API URL of the target")


class TreeObject(BaseModel):
    """A tree: ordered list of entries, identified by its sha."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., description="Content address of the tree")
    url: Optional[str] = Field(default=None, description="API URL of the tree")
    tree: List[TreeEntry] = Field(default_factory=list, description="Tree entries")
    truncated: Optional[bool] = Field(
        default=None, description="Whether a recursive listing was truncated"
    )

    def find_entry(self, path: str) -> Optional[TreeEntry]:
        """Return the first entry named ``path``, or None."""
        for entry in self.tree:
            if entry.path == path:
                return entry
        return None


class BlobObject(BaseModel):
    """A blob: raw file content plus its encoding tag."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., description="Content address of the blob")
    content: str = Field(default="", description="Encoded blob content")
    encoding: str = Field(default="base64", description="Content encoding")
    size: Optional[int] = Field(default=None, description="Blob size in bytes")
    url: Optional[str] = Field(default=None, description="API URL of the blob")

    def decoded(self) -> bytes:
        """Return the blob content as bytes."""
        if self.encoding == "base64":
            return base64.b64decode(self.content)
        return self.content.encode("utf-8")


class ObjectPointer(BaseModel):
    """Reference to another object by sha."""

    model_config = ConfigDict(frozen=True)

    sha: str
    url: Optional[str] = None


class CommitObject(BaseModel):
    """A commit: snapshot of one tree with its parent commits."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., description="Content address of the commit")
    message: str = Field(default="", description="Commit message")
    tree: ObjectPointer = Field(..., description="Tree snapshotted by the commit")
    parents: List[ObjectPointer] = Field(
        default_factory=list, description="Parent commits, in order"
    )
    url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_repo_commit(cls, data: Any) -> Any:
        # GET /commits/{sha} nests message and tree under "commit"
        if isinstance(data, dict) and isinstance(data.get("commit"), dict):
            inner = data["commit"]
            flattened = {k: v for k, v in data.items() if k != "commit"}
            flattened.setdefault("message", inner.get("message", ""))
            flattened.setdefault("tree", inner.get("tree"))
            return flattened
        return data


class RefTarget(BaseModel):
    """The object a reference currently points to."""

    type: str = Field(..., description="Type of the target object")
    sha: str = Field(..., description="Content address of the target object")
    url: Optional[str] = None


class Reference(BaseModel):
    """A named, mutable pointer to an object (usually a commit)."""

    ref: str = Field(..., description="Fully qualified reference name")
    object: RefTarget = Field(..., description="Current target of the reference")
    url: Optional[str] = None

    @property
    def is_commit(self) -> bool:
        return self.object.type == "commit"


class NewTreeEntry(BaseModel):
    """An entry of a tree to be created.

    Either ``sha`` points at an existing object or ``content`` carries literal
    file content that the store turns into a blob.
    """

    path: str = Field(..., description="Entry path relative to the base tree")
    mode: str = Field(default="100644", description="File mode")
    type: EntryType = Field(default="blob", description="Kind of object")
    sha: Optional[str] = Field(default=None, description="Existing object sha")
    content: Optional[str] = Field(default=None, description="Literal blob content")

    @model_validator(mode="after")
    def _check_sha_or_content(self) -> "NewTreeEntry":
        if (self.sha is None) == (self.content is None):
            raise ValueError("exactly one of 'sha' or 'content' must be given")
        if self.content is not None and self.type != "blob":
            raise ValueError("literal content is only allowed for blob entries")
        return self

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


GitObject = Union[TreeObject, BlobObject]
