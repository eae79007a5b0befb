"""Object creation pipeline: new tree, new commit, reference update.

Each step is awaited before the next one starts and the first failure is
propagated unchanged. Completed steps are never rolled back, so a tree created
before a failing commit stays in the store as an unreferenced object.
"""

import logging
from typing import Any, Dict, Iterable, List, Union

from ..api_clients.base_client import GitDataAPIClient, parse_response
from ..errors import CommitObjectNotFoundError
from ..models import CommitObject, NewTreeEntry, Reference, TreeObject

logger = logging.getLogger(__name__)

EntrySpec = Union[NewTreeEntry, Dict[str, Any]]


def _as_entries(entries: Iterable[EntrySpec]) -> List[NewTreeEntry]:
    return [
        entry if isinstance(entry, NewTreeEntry) else NewTreeEntry.model_validate(entry)
        for entry in entries
    ]


class CommitPipeline:
    """Creates trees and commits and advances references for one client."""

    def __init__(self, client: GitDataAPIClient):
        self.client = client

    async def create_tree(
        self, base_tree: str, new_entries: Iterable[EntrySpec]
    ) -> TreeObject:
        """Create a tree extending ``base_tree`` with ``new_entries``.

        The new tree is cached under ``base_tree``, not under its own sha.

        Raises:
            NeedsAuthenticationError: If no valid credential is set
            TransportFailureError: If the remote call fails
        """
        entries = _as_entries(new_entries)
        self.client.require_authorization()

        data = await self.client.create_object(
            "/git/trees",
            {"base_tree": base_tree, "tree": [e.to_payload() for e in entries]},
        )
        tree = parse_response(TreeObject, data)
        self.client.tree_cache.put(base_tree, tree)
        logger.debug(f"Created tree {tree.sha} on top of {base_tree}")
        return tree

    async def get_ref(self, ref: str) -> Reference:
        data = await self.client.fetch_object(f"/git/refs/{ref}")
        return parse_response(Reference, data)

    async def update_ref(self, ref: str, sha: str) -> Reference:
        """Point ``ref`` at ``sha``.

        Raises:
            NeedsAuthenticationError: If no valid credential is set
            TransportFailureError: If the remote call fails
        """
        self.client.require_authorization()
        data = await self.client.create_object(f"/git/refs/{ref}", {"sha": sha})
        reference = parse_response(Reference, data)
        logger.info(f"Reference {ref} now points to {sha}")
        return reference

    async def get_commit(self, sha: str) -> CommitObject:
        data = await self.client.fetch_object(f"/commits/{sha}")
        return parse_response(CommitObject, data)

    async def resolve_commit_sha(self, ref: str) -> str:
        """Return the sha of the commit addressed by ``ref``.

        Raises:
            CommitObjectNotFoundError: If the reference points to a non-commit
        """
        reference = await self.get_ref(ref)
        if not reference.is_commit:
            raise CommitObjectNotFoundError(
                details={"ref": ref, "type": reference.object.type}
            )
        return reference.object.sha

    async def commit_by_ref(self, ref: str) -> CommitObject:
        """Return the commit a symbolic reference points to."""
        sha = await self.resolve_commit_sha(ref)
        return await self.get_commit(sha)

    async def create_commit_object(
        self, message: str, tree: str, parent_sha: str
    ) -> CommitObject:
        """Create a commit of ``tree`` with a single parent.

        Raises:
            NeedsAuthenticationError: If no valid credential is set
            TransportFailureError: If the remote call fails
        """
        self.client.require_authorization()
        data = await self.client.create_object(
            "/git/commits",
            {"message": message, "tree": tree, "parents": [parent_sha]},
        )
        return parse_response(CommitObject, data)

    async def commit_tree(
        self, parent_sha: str, ref: str, message: str, tree: str
    ) -> Reference:
        """Commit an existing tree on top of ``parent_sha`` and advance ``ref``."""
        commit = await self.create_commit_object(message, tree, parent_sha)
        return await self.update_ref(ref, commit.sha)

    async def create_commit(
        self,
        parent_ref: str,
        message: str,
        base_tree: str,
        new_entries: Iterable[EntrySpec],
    ) -> Reference:
        """Create a tree, commit it and advance ``parent_ref`` to the commit.

        Args:
            parent_ref: Reference to extend, e.g. ``heads/main``
            message: Commit message
            base_tree: Tag name or sha of the tree to extend
            new_entries: Entries to add or replace; each carries a sha or
                literal content

        Returns:
            The updated reference

        Raises:
            NeedsAuthenticationError: If no valid credential is set; no remote
                call is made in that case
            CommitObjectNotFoundError: If ``parent_ref`` does not address a commit
            TransportFailureError: If any remote call fails
        """
        entries = _as_entries(new_entries)
        self.client.require_authorization()

        parent_sha = await self.resolve_commit_sha(parent_ref)
        tree = await self.create_tree(base_tree, entries)
        commit = await self.create_commit_object(message, tree.sha, parent_sha)

        return await self.update_ref(parent_ref, commit.sha)
