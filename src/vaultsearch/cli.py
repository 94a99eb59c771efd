#!/usr/bin/env python3
"""
vs: CLI for searching a markdown vault

Usage:
    vs search "query"                # Literal search with context
    vs fuzzy "query"                 # Ranked filename + content matching
    vs graph --seed=Note             # Link graph around a note
    vs connected A B --depth=2       # Are two notes linked?
    vs locate                        # Find vaults on this machine
"""

from __future__ import annotations

import asyncio
import difflib
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as VAULTSEARCH_VERSION
from .config import (
    DEFAULT_CONTEXT_LINES,
    DEFAULT_FUZZY_RESULTS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_RESULTS,
)
from .errors import ErrorCode, VaultSearchError, format_error_json
from .models import SEARCH_FIELDS


def run_async(coro):
    """Run async function synchronously."""
    return asyncio.run(coro)


def _emit_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _handle_error(ctx: click.Context, error: VaultSearchError) -> NoReturn:
    """Report a failed call and exit with status 1.

    If --json-errors is enabled, outputs structured JSON error.
    Otherwise, outputs human-readable error message.
    """
    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if json_errors:
        click.echo(error.to_json(), err=True)
    else:
        click.echo(f"Error: {error.message}", err=True)

    sys.exit(1)


def _vault_root(ctx: click.Context) -> Path:
    """Vault from --vault, falling back to environment/auto-detection."""
    from .config import get_vault_root

    vault = ctx.obj.get("vault") if ctx.obj else None
    if vault is not None:
        return vault
    try:
        return get_vault_root()
    except VaultSearchError as exc:
        _handle_error(ctx, exc)


# ─────────────────────────────────────────────────────────────────────────────
# CLI Group
# ─────────────────────────────────────────────────────────────────────────────


class JsonErrorGroup(click.Group):
    """Custom Click group that formats errors as JSON when --json-errors is set.

    This handles Click validation errors (bad option values, missing args, etc.)
    that occur before the command callback is invoked. Also provides typo
    suggestions for unknown commands.
    """

    def resolve_command(self, ctx, args):
        """Override to suggest similar commands for typos."""
        try:
            return super().resolve_command(ctx, args)
        except UsageError as e:
            cmd_name = args[0] if args else ""
            if cmd_name and "No such command" in str(e):
                matches = difflib.get_close_matches(
                    cmd_name, self.list_commands(ctx), n=1, cutoff=0.6
                )
                if matches:
                    raise UsageError(f"No such command '{cmd_name}'. Did you mean '{matches[0]}'?")
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        """Override main to report argument errors as JSON when requested.

        --json-errors may appear anywhere on the command line; it is moved to
        the front so Click parses it as the global flag.
        """
        argv = list(args) if args is not None else list(sys.argv[1:])
        if "--json-errors" not in argv:
            return super().main(args, prog_name, complete_var, standalone_mode, **extra)

        argv = ["--json-errors"] + [a for a in argv if a != "--json-errors"]
        try:
            return super().main(argv, prog_name, complete_var, standalone_mode=False, **extra)
        except ClickException as e:
            click.echo(format_error_json(ErrorCode.INVALID_QUERY, e.format_message()), err=True)
            raise SystemExit(1)


@click.group(cls=JsonErrorGroup)
@click.version_option(version=VAULTSEARCH_VERSION, prog_name="vs")
@click.option(
    "--vault",
    type=click.Path(file_okay=False, path_type=Path),
    help="Vault root (default: $VAULTSEARCH_VAULT_ROOT or auto-detected)",
)
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, json_errors: bool):
    """vs: search a markdown vault.

    \b
    Quick start:
      vs search "deployment"                 # Lines containing a phrase
      vs search "work" --field=tag           # Notes tagged with work
      vs fuzzy "meeting notes"               # Best filename/content matches
      vs graph                               # Linked notes with backlinks
      vs graph --seed=Index --depth=1        # Neighbourhood of a note
      vs connected A B                       # Are two notes linked?
    """
    from ._logging import configure_logging

    configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["vault"] = vault
    ctx.obj["json_errors"] = json_errors


# ─────────────────────────────────────────────────────────────────────────────
# Search Commands
# ─────────────────────────────────────────────────────────────────────────────


def _print_content_results(results, show_score: bool = False) -> None:
    if not results:
        click.echo("No results found.")
        return
    for result in results:
        header = result.path
        if show_score and result.score is not None:
            header = f"{result.path}  (score {result.score})"
        click.echo(header)
        for match in result.matches:
            click.echo(f"  {match.line}: {match.content.strip()}")


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", default=DEFAULT_MAX_RESULTS, type=click.IntRange(min=1), help="Max results")
@click.option(
    "--context",
    "context_lines",
    default=DEFAULT_CONTEXT_LINES,
    type=click.IntRange(min=0),
    help="Lines of context around each match",
)
@click.option(
    "--field",
    type=click.Choice(SEARCH_FIELDS),
    default="content",
    help="Which part of each note to match",
)
@click.option("--no-content", is_flag=True, help="List matching notes without per-line matches")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    limit: int,
    context_lines: int,
    field: str,
    no_content: bool,
    as_json: bool,
):
    """Search notes for a literal, case-insensitive phrase.

    Results are listed in discovery order, not ranked.

    \b
    Examples:
      vs search "kubernetes"
      vs search "urgent" --field=tag
      vs search "project" --field=frontmatter --json
    """
    from .core import search as core_search

    root = _vault_root(ctx)
    try:
        results = run_async(
            core_search(
                root,
                query,
                max_results=limit,
                context_lines=context_lines,
                field=field,  # type: ignore[arg-type]
                include_content=not no_content,
            )
        )
    except VaultSearchError as exc:
        _handle_error(ctx, exc)

    if as_json:
        _emit_json([r.model_dump(mode="json") for r in results])
        return
    _print_content_results(results)


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", default=DEFAULT_FUZZY_RESULTS, type=click.IntRange(min=1), help="Max results")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def fuzzy(ctx: click.Context, query: str, limit: int, as_json: bool):
    """Find notes by approximate filename and content matching.

    \b
    Scores are additive:
      +100 filename equals query     +50 filename contains query
       +30 all words in filename     +20 content contains query
       +10 all words in content
    """
    from .core import fuzzy_search

    root = _vault_root(ctx)
    try:
        results = run_async(fuzzy_search(root, query, max_results=limit))
    except VaultSearchError as exc:
        _handle_error(ctx, exc)

    if as_json:
        _emit_json([r.model_dump(mode="json") for r in results])
        return
    _print_content_results(results, show_score=True)


# ─────────────────────────────────────────────────────────────────────────────
# Graph Commands
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.option("--seed", help="Only notes connected to this note")
@click.option("--depth", default=DEFAULT_MAX_DEPTH, type=click.IntRange(min=0), help="Max hops from --seed")
@click.option("--include-orphans", is_flag=True, help="Include notes without any links")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def graph(ctx: click.Context, seed: str | None, depth: int, include_orphans: bool, as_json: bool):
    """Show notes with their outgoing links and backlinks.

    \b
    Examples:
      vs graph
      vs graph --include-orphans
      vs graph --seed="Projects/Roadmap" --depth=1
    """
    from .core import graph_search

    root = _vault_root(ctx)
    try:
        results = run_async(
            graph_search(root, seed=seed, max_depth=depth, include_orphans=include_orphans)
        )
    except VaultSearchError as exc:
        _handle_error(ctx, exc)

    if as_json:
        _emit_json([r.model_dump(mode="json") for r in results])
        return

    if not results:
        click.echo("No notes found.")
        return
    for result in results:
        click.echo(result.path)
        click.echo(f"  -> {', '.join(result.outgoing_links) or '(none)'}")
        click.echo(f"  <- {', '.join(result.incoming_links) or '(none)'}")


@cli.command()
@click.argument("source")
@click.argument("target")
@click.option("--depth", default=DEFAULT_MAX_DEPTH, type=click.IntRange(min=0), help="Max hops")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def connected(ctx: click.Context, source: str, target: str, depth: int, as_json: bool):
    """Check whether two notes are linked within --depth hops.

    Links are followed in both directions. Exits 0 when connected, 2 when not.
    """
    from .core import is_connected

    root = _vault_root(ctx)
    try:
        result = run_async(is_connected(root, source, target, max_depth=depth))
    except VaultSearchError as exc:
        _handle_error(ctx, exc)

    if as_json:
        _emit_json({"source": source, "target": target, "depth": depth, "connected": result})
    else:
        click.echo("connected" if result else "not connected")
    if not result:
        sys.exit(2)


# ─────────────────────────────────────────────────────────────────────────────
# Vault Discovery
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def locate(as_json: bool):
    """List directories that look like vaults, best guess first."""
    from .locator import detect_vaults, pick_vault

    candidates = detect_vaults()
    best = pick_vault(candidates)
    if best is not None:
        candidates = [best] + [c for c in candidates if c is not best]

    if as_json:
        _emit_json([c.model_dump() for c in candidates])
        return

    if not candidates:
        click.echo("No vaults found.")
        return
    for candidate in candidates:
        marker = " (.obsidian)" if candidate.has_obsidian_folder else ""
        click.echo(f"{candidate.path}{marker}")


if __name__ == "__main__":
    cli()
