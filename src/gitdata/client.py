"""Public entry point of the gitdata library.

``GitDataClient`` bundles the API client, the path resolver and the commit
pipeline for one repository. All of them share the client's credential and
tree cache.
"""

import logging
from typing import Any, Awaitable, Dict, Iterable, Optional, Tuple, TypeVar, Union

from .api_clients.base_client import GitDataAPIClient
from .auth import Credential
from .config import ClientConfig
from .errors import GitDataError
from .models import BlobObject, CommitObject, Reference, TreeObject
from .services.commit_pipeline import CommitPipeline, EntrySpec
from .services.path_resolver import PathResolver, clean_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GitDataClient:
    """Navigation and commit creation over one remote repository."""

    def __init__(
        self,
        config: ClientConfig,
        credential: Optional[Credential] = None,
    ):
        self.config = config
        self.api = GitDataAPIClient(config, credential=credential)
        self.resolver = PathResolver(self.api)
        self.pipeline = CommitPipeline(self.api)

    @classmethod
    def for_repository(
        cls, user: str, repo: str, use_tree_cache: bool = False, **kwargs
    ) -> "GitDataClient":
        config = ClientConfig(user=user, repo=repo, use_tree_cache=use_tree_cache, **kwargs)
        return cls(config)

    @property
    def tree_cache(self):
        return self.api.tree_cache

    # Authentication

    def set_credential(self, credential: Optional[Credential]) -> None:
        self.api.set_credential(credential)

    def is_authenticated(self) -> bool:
        return self.api.check_authorized()

    def logout(self) -> None:
        self.api.set_credential(None)

    # Pure helpers

    def build_raw_content_url(self, user: str, repo: str, tag: str, path: str) -> str:
        """Return the raw content URL of a file; no network access."""
        return f"{self.config.raw_url}/{user}/{repo}/{tag}/{clean_path(path)}"

    # Navigation

    async def resolve_path(
        self, root: str, path: Optional[str] = None
    ) -> Union[TreeObject, BlobObject]:
        return await self.resolver.resolve_path(root, path)

    async def tree(self, root: str, path: Optional[str] = None) -> TreeObject:
        return await self.resolver.tree_at_path(root, path)

    async def tree_recursive(self, root: str) -> TreeObject:
        return await self.resolver.tree_recursive(root)

    async def blob(
        self,
        sha: Optional[str] = None,
        root: Optional[str] = None,
        path: Optional[str] = None,
    ) -> BlobObject:
        return await self.resolver.blob(sha=sha, root=root, path=path)

    # References and commits

    async def ref(self, ref: str) -> Reference:
        return await self.pipeline.get_ref(ref)

    async def update_ref(self, ref: str, sha: str) -> Reference:
        return await self.pipeline.update_ref(ref, sha)

    async def commit(self, sha: str) -> CommitObject:
        return await self.pipeline.get_commit(sha)

    async def commit_by_ref(self, ref: str) -> CommitObject:
        return await self.pipeline.commit_by_ref(ref)

    async def create_tree(
        self, base_tree: str, new_entries: Iterable[EntrySpec]
    ) -> TreeObject:
        return await self.pipeline.create_tree(base_tree, new_entries)

    async def commit_tree(
        self, parent_sha: str, ref: str, message: str, tree: str
    ) -> Reference:
        return await self.pipeline.commit_tree(parent_sha, ref, message, tree)

    async def create_commit(
        self,
        parent_ref: str,
        message: str,
        base_tree: str,
        new_entries: Iterable[EntrySpec],
    ) -> Reference:
        return await self.pipeline.create_commit(parent_ref, message, base_tree, new_entries)

    @staticmethod
    async def settle(
        operation: Awaitable[T],
    ) -> Tuple[Optional[T], Optional[Dict[str, Any]]]:
        """Await an operation and return ``(result, None)`` or ``(None, error)``.

        ``error`` is the structured ``{code, message, details}`` value of the
        GitDataError raised by the operation.
        """
        try:
            return await operation, None
        except GitDataError as e:
            return None, e.to_dict()

    async def close(self) -> None:
        await self.api.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
