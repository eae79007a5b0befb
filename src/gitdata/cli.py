"""Command line interface for gitdata."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .auth import OAuthCredential
from .client import GitDataClient
from .config import ConfigManager
from .errors import GitDataError
from .models import BlobObject, NewTreeEntry

console = Console()
logger = logging.getLogger(__name__)


def run_async(coro):
    """Run a coroutine to completion from synchronous CLI code."""
    return asyncio.run(coro)


async def _with_client(client: GitDataClient, coro):
    try:
        return await coro
    finally:
        await client.close()


def _run(ctx: click.Context, operation):
    """Run ``operation(client)`` and turn GitDataError into exit status 1."""
    client: GitDataClient = ctx.obj["client"]
    if not client.config.user or not client.config.repo:
        console.print("[red]Repository not configured: use --user and --repo[/red]")
        sys.exit(1)
    try:
        return run_async(_with_client(client, operation(client)))
    except GitDataError as e:
        console.print(f"{e.code}: {e.message}", style="red", markup=False)
        if ctx.obj.get("verbose") and e.details:
            console.print(str(e.details), markup=False)
        sys.exit(1)


@click.group()
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option("--user", "-u", help="Repository owner (overrides config)")
@click.option("--repo", "-r", help="Repository name (overrides config)")
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    help="OAuth access token used for write operations",
)
@click.option("--cache/--no-cache", default=None, help="Memoize fetched trees")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="gitdata")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[str],
    user: Optional[str],
    repo: Optional[str],
    token: Optional[str],
    cache: Optional[bool],
    verbose: bool,
):
    """Navigate and update a GitHub repository through its git data API."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    config_manager = ConfigManager(Path(config) if config else None)
    try:
        client_config = config_manager.load()
    except ValueError as e:
        console.print(str(e), style="red", markup=False)
        sys.exit(1)

    overrides = {}
    if user:
        overrides["user"] = user
    if repo:
        overrides["repo"] = repo
    if cache is not None:
        overrides["use_tree_cache"] = cache
    client_config = client_config.model_copy(update=overrides)

    client = GitDataClient(client_config)
    if token:
        client.set_credential(OAuthCredential(access_token=token))

    ctx.ensure_object(dict)
    ctx.obj["client"] = client
    ctx.obj["verbose"] = verbose


@cli.command("ls")
@click.argument("root")
@click.argument("path", required=False, default="")
@click.pass_context
def list_tree(ctx: click.Context, root: str, path: str):
    """List the entries of the tree at PATH under ROOT (tag or sha)."""
    tree = _run(ctx, lambda client: client.tree(root, path))

    table = Table(title=f"{root}:/{path}")
    table.add_column("Mode")
    table.add_column("Type")
    table.add_column("SHA")
    table.add_column("Path")
    for entry in tree.tree:
        table.add_row(entry.mode, entry.type, entry.sha, entry.path)
    console.print(table)


@cli.command("cat")
@click.argument("root")
@click.argument("path")
@click.pass_context
def cat_blob(ctx: click.Context, root: str, path: str):
    """Print the content of the file at PATH under ROOT."""
    blob = _run(ctx, lambda client: client.blob(root=root, path=path))
    click.echo(blob.decoded(), nl=False)


@cli.command("resolve")
@click.argument("root")
@click.argument("path", required=False, default="")
@click.pass_context
def resolve(ctx: click.Context, root: str, path: str):
    """Show which object PATH under ROOT resolves to."""
    obj = _run(ctx, lambda client: client.resolve_path(root, path))
    kind = "blob" if isinstance(obj, BlobObject) else "tree"
    click.echo(f"{kind} {obj.sha}")


@cli.command("raw-url")
@click.argument("tag")
@click.argument("path")
@click.pass_context
def raw_url(ctx: click.Context, tag: str, path: str):
    """Print the raw content URL of PATH at TAG."""
    client: GitDataClient = ctx.obj["client"]
    config = client.config
    click.echo(client.build_raw_content_url(config.user, config.repo, tag, path))


def _parse_file_option(value: str) -> NewTreeEntry:
    target, sep, local = value.partition("=")
    if not sep or not target or not local:
        raise click.BadParameter(f"expected REPO_PATH=LOCAL_FILE, got '{value}'")
    try:
        content = Path(local).read_text()
    except OSError as e:
        raise click.BadParameter(f"cannot read {local}: {e}")
    return NewTreeEntry(path=target, content=content)


@cli.command("commit")
@click.argument("ref")
@click.argument("base_tree")
@click.argument("message")
@click.option(
    "--file",
    "-f",
    "files",
    multiple=True,
    required=True,
    help="REPO_PATH=LOCAL_FILE to add or replace (repeatable)",
)
@click.pass_context
def commit(ctx: click.Context, ref: str, base_tree: str, message: str, files: Tuple[str, ...]):
    """Commit FILES on top of BASE_TREE and advance REF (e.g. heads/main)."""
    entries = [_parse_file_option(value) for value in files]
    reference = _run(
        ctx, lambda client: client.create_commit(ref, message, base_tree, entries)
    )
    console.print(
        f"{reference.ref} -> {reference.object.sha}", style="green", markup=False
    )


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
