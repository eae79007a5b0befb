"""
Shared pytest fixtures for gitdata tests.

Provides an in-memory fake of the remote git data store and clients wired to
it, so that services can be exercised without network access while every
remote call is recorded.
"""

import base64
import itertools
from typing import Any, Dict, List, Optional, Tuple

import pytest

from gitdata.api_clients.base_client import GitDataAPIClient
from gitdata.auth import BasicCredential, OAuthCredential
from gitdata.config import ClientConfig
from gitdata.errors import TransportFailureError


def _blob_payload(sha: str, text: str) -> Dict[str, Any]:
    return {
        "sha": sha,
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
        "encoding": "base64",
        "size": len(text),
    }


class FakeGitStore:
    """In-memory stand-in for the repository endpoints of the GitHub API."""

    def __init__(self):
        self.trees: Dict[str, Dict[str, Any]] = {}
        self.blobs: Dict[str, Dict[str, Any]] = {}
        self.refs: Dict[str, Dict[str, Any]] = {}
        self.commits: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, str]] = []
        self.bodies: List[Dict[str, Any]] = []
        self._failures: Dict[Tuple[str, str], TransportFailureError] = {}
        self._ids = itertools.count(1)

    # Fixture helpers

    def add_tree(self, sha: str, entries: List[Dict[str, Any]], alias: Optional[str] = None):
        tree = {
            "sha": sha,
            "tree": [dict({"mode": "100644"}, **entry) for entry in entries],
        }
        self.trees[sha] = tree
        if alias:
            self.trees[alias] = tree

    def add_blob(self, sha: str, text: str):
        self.blobs[sha] = _blob_payload(sha, text)

    def add_ref(self, name: str, sha: str, object_type: str = "commit"):
        self.refs[name] = {
            "ref": f"refs/{name}",
            "object": {"type": object_type, "sha": sha},
        }

    def fail_on(self, method: str, path: str, status_code: int = 500, reason: str = "Internal Server Error"):
        self._failures[(method, path)] = TransportFailureError(
            reason, details={"status_code": status_code, "url": path}
        )

    def calls_to(self, prefix: str) -> List[Tuple[str, str]]:
        return [call for call in self.calls if call[1].startswith(prefix)]

    # Remote object access

    def _check_failure(self, method: str, path: str):
        error = self._failures.get((method, path))
        if error is not None:
            raise error

    @staticmethod
    def _not_found(path: str) -> TransportFailureError:
        return TransportFailureError(
            "Not Found", details={"status_code": 404, "url": path}
        )

    async def fetch_object(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append(("GET", path))
        self._check_failure("GET", path)

        collections = {
            "/git/trees/": self.trees,
            "/git/blobs/": self.blobs,
            "/git/refs/": self.refs,
            "/commits/": self.commits,
        }
        for prefix, collection in collections.items():
            if path.startswith(prefix):
                key = path[len(prefix):]
                if key not in collection:
                    raise self._not_found(path)
                return dict(collection[key])
        raise self._not_found(path)

    async def create_object(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("POST", path))
        self.bodies.append(body)
        self._check_failure("POST", path)

        if path == "/git/trees":
            base = self.trees.get(body["base_tree"], {"tree": []})
            entries = {entry["path"]: dict(entry) for entry in base["tree"]}
            for entry in body["tree"]:
                entry = dict(entry)
                if "content" in entry:
                    blob_sha = f"blob{next(self._ids)}"
                    self.add_blob(blob_sha, entry.pop("content"))
                    entry["sha"] = blob_sha
                entries[entry["path"]] = entry
            sha = f"tree{next(self._ids)}"
            self.add_tree(sha, list(entries.values()))
            return dict(self.trees[sha])

        if path == "/git/commits":
            sha = f"commit{next(self._ids)}"
            self.commits[sha] = {
                "sha": sha,
                "message": body["message"],
                "tree": {"sha": body["tree"]},
                "parents": [{"sha": parent} for parent in body["parents"]],
            }
            return dict(self.commits[sha])

        if path.startswith("/git/refs/"):
            name = path[len("/git/refs/"):]
            self.add_ref(name, body["sha"])
            return dict(self.refs[name])

        raise self._not_found(path)


@pytest.fixture
def fake_store() -> FakeGitStore:
    """Store holding the reference repository used across tests.

    Layout::

        R (tag "main")
        ├── src/          (tree S)
        │   ├── main.go   (blob M)
        │   └── pkg/      (tree P)
        │       └── util.go (blob U)
        └── README        (blob B)
    """
    store = FakeGitStore()
    store.add_tree(
        "R",
        [
            {"path": "src", "type": "tree", "sha": "S", "mode": "040000"},
            {"path": "README", "type": "blob", "sha": "B"},
        ],
        alias="main",
    )
    store.add_tree(
        "S",
        [
            {"path": "main.go", "type": "blob", "sha": "M"},
            {"path": "pkg", "type": "tree", "sha": "P", "mode": "040000"},
        ],
    )
    store.add_tree("P", [{"path": "util.go", "type": "blob", "sha": "U"}])
    store.add_blob("M", "package main\n")
    store.add_blob("U", "package pkg\n")
    store.add_blob("B", "# demo\n")
    store.add_ref("heads/main", "C0")
    store.commits["C0"] = {
        "sha": "C0",
        "commit": {"message": "initial", "tree": {"sha": "R"}},
        "parents": [],
    }
    return store


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(user="octocat", repo="demo")


@pytest.fixture
def cached_config() -> ClientConfig:
    return ClientConfig(user="octocat", repo="demo", use_tree_cache=True)


def _wire(client: GitDataAPIClient, store: FakeGitStore, monkeypatch) -> GitDataAPIClient:
    monkeypatch.setattr(client, "fetch_object", store.fetch_object)
    monkeypatch.setattr(client, "create_object", store.create_object)
    return client


@pytest.fixture
def api_client(client_config, fake_store, monkeypatch) -> GitDataAPIClient:
    """API client without tree cache, backed by the fake store."""
    return _wire(GitDataAPIClient(client_config), fake_store, monkeypatch)


@pytest.fixture
def cached_api_client(cached_config, fake_store, monkeypatch) -> GitDataAPIClient:
    """API client with tree cache enabled, backed by the fake store."""
    return _wire(GitDataAPIClient(cached_config), fake_store, monkeypatch)


@pytest.fixture
def oauth_credential() -> OAuthCredential:
    return OAuthCredential(access_token="gho_testtoken")


@pytest.fixture
def basic_credential() -> BasicCredential:
    return BasicCredential.from_user_password("octocat", "secret")
