"""Path resolution over nested tree objects.

Turns a ``(root, path)`` pair, where ``root`` is a tag name or a tree sha and
``path`` a slash separated relative path, into the tree or blob it addresses
by walking one tree level per path segment.
"""

import logging
from typing import Optional, Union

from ..api_clients.base_client import GitDataAPIClient, parse_response
from ..errors import BlobNotFoundError, PathNotFoundError
from ..models import BlobObject, TreeEntry, TreeObject

logger = logging.getLogger(__name__)


def clean_path(path: Optional[str]) -> str:
    """Strip surrounding whitespace and a single leading slash."""
    if not path:
        return ""
    path = path.strip()
    if path.startswith("/"):
        path = path[1:]
    return path


class PathResolver:
    """Resolves paths into tree and blob objects for one client."""

    def __init__(self, client: GitDataAPIClient):
        self.client = client

    async def fetch_tree(self, root: str) -> TreeObject:
        """Return the tree addressed by a tag name or sha, cache first."""
        cached = self.client.tree_cache.get(root)
        if cached is not None:
            return cached

        data = await self.client.fetch_object(f"/git/trees/{root}")
        tree = parse_response(TreeObject, data)
        self.client.tree_cache.put(root, tree)
        return tree

    async def fetch_blob(self, sha: str) -> BlobObject:
        data = await self.client.fetch_object(f"/git/blobs/{sha}")
        return parse_response(BlobObject, data)

    async def resolve_path(
        self, root: str, path: Optional[str]
    ) -> Union[TreeObject, BlobObject]:
        """Resolve ``path`` relative to the tree addressed by ``root``.

        Args:
            root: Tag name or sha of the starting tree
            path: Slash separated path; empty addresses ``root`` itself

        Returns:
            The tree or blob addressed by the last path segment

        Raises:
            PathNotFoundError: If a segment has no matching entry, or a
                segment other than the last one names a non-tree entry
            TransportFailureError: If a remote fetch fails
        """
        path = clean_path(path)
        if not path:
            return await self.fetch_tree(root)

        first, _, rest = path.partition("/")
        tree = await self.fetch_tree(root)
        entry = tree.find_entry(first)
        if entry is None:
            logger.debug(f"No entry '{first}' in tree {root}")
            raise PathNotFoundError(details={"tree": root, "segment": first})

        if rest:
            if entry.type != "tree":
                raise PathNotFoundError(
                    details={"tree": root, "segment": first, "type": entry.type}
                )
            return await self.resolve_path(entry.sha, rest)

        return await self._fetch_entry(root, entry)

    async def _fetch_entry(
        self, root: str, entry: TreeEntry
    ) -> Union[TreeObject, BlobObject]:
        if entry.type == "blob":
            return await self.fetch_blob(entry.sha)
        elif entry.type == "tree":
            return await self.fetch_tree(entry.sha)
        else:
            # submodule link, the target lives in another repository
            raise PathNotFoundError(
                details={"tree": root, "segment": entry.path, "type": entry.type}
            )

    async def tree_at_path(self, root: str, path: Optional[str]) -> TreeObject:
        """Return the tree at ``path``; every segment must name a tree."""
        path = clean_path(path)
        if not path:
            return await self.fetch_tree(root)

        first, _, rest = path.partition("/")
        tree = await self.fetch_tree(root)
        entry = tree.find_entry(first)
        if entry is None or entry.type != "tree":
            raise PathNotFoundError(details={"tree": root, "segment": first})
        return await self.tree_at_path(entry.sha, rest)

    async def tree_recursive(self, root: str) -> TreeObject:
        """Return the full recursive listing of a tree; never cached."""
        data = await self.client.fetch_object(
            f"/git/trees/{root}", params={"recursive": 1}
        )
        return parse_response(TreeObject, data)

    async def blob_at_path(self, root: str, path: str) -> BlobObject:
        """Return the blob named by the last segment of ``path``.

        Raises:
            PathNotFoundError: If the parent directory cannot be resolved
            BlobNotFoundError: If the parent tree has no such blob
        """
        path = clean_path(path)
        parent, _, name = path.rpartition("/")
        tree = await self.tree_at_path(root, parent)

        for entry in tree.tree:
            if entry.type == "blob" and entry.path == name:
                return await self.fetch_blob(entry.sha)

        raise BlobNotFoundError(details={"tree": root, "path": path})

    async def blob(
        self,
        sha: Optional[str] = None,
        root: Optional[str] = None,
        path: Optional[str] = None,
    ) -> BlobObject:
        """Return a blob either by sha or by tree and path."""
        if clean_path(path):
            if not root:
                raise ValueError("A root tree is required to resolve a blob path")
            return await self.blob_at_path(root, path or "")
        if not sha:
            raise ValueError("Either a blob sha or a root tree and path are required")
        return await self.fetch_blob(sha)
