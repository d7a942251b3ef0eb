"""CLI entry point for codekata.

Commands:
  submit      — evaluate a solution for a challenge and record the attempt
  history     — list past attempts from the configured store
  stats       — trend statistics across the attempt history
  challenges  — list the challenge catalog and completion status
  reset       — clear history and progress
"""

from __future__ import annotations

import importlib.metadata
import logging
import sqlite3

import click
from rich.console import Console

from codekata_cli.commands.challenges import challenges_cmd
from codekata_cli.commands.history import history_cmd
from codekata_cli.commands.reset import reset_cmd
from codekata_cli.commands.stats import stats_cmd
from codekata_cli.commands.submit import submit_cmd

console = Console()
logger = logging.getLogger(__name__)


def _build_store(config: dict):
    """Instantiate the configured store from .codekata.yml settings.

    Store selection hierarchy:
      store: gist   → GistStore  (requires gist_id and a GitHub token)
      store: sqlite → SQLiteStore (store_path, default .codekata.db)
      (default)     → NoOpStore  (nothing kept between runs)
    """
    from codekata_store.noop import NoOpStore

    store_type = config.get("store", "noop")

    if store_type == "gist":
        from codekata_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            console.print("[yellow]GistStore requires gist_id and a GitHub token. Falling back to no store.[/yellow]")
            return NoOpStore()
        return GistStore(gist_id=gist_id, token=token)

    if store_type == "sqlite":
        from codekata_store.sqlite import SQLiteStore

        db_path = config.get("store_path") or ".codekata.db"
        try:
            return SQLiteStore(db_path=db_path)
        except sqlite3.Error as e:
            logger.warning("Could not open %s: %s", db_path, e)
            console.print(f"[yellow]Could not open {db_path} ({e}). Falling back to no store.[/yellow]")
            return NoOpStore()

    return NoOpStore()


def _version() -> str:
    try:
        return importlib.metadata.version("codekata")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


@click.group()
@click.version_option(version=_version(), prog_name="codekata")
@click.option(
    "--config",
    "config_path",
    default=".codekata.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CODEKATA_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Coding-practice challenges graded by an AI reviewer."""
    from codekata_cli.auth import resolve_github_token
    from codekata_cli.state import load_session
    from codekata_core.config import load_config

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    if config.get("store") == "gist" and not config.get("github_token"):
        config["github_token"] = resolve_github_token()

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["session"] = load_session(store)
    ctx.call_on_close(store.close)


main.add_command(submit_cmd)
main.add_command(history_cmd)
main.add_command(stats_cmd)
main.add_command(challenges_cmd)
main.add_command(reset_cmd)
