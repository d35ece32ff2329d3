#!/usr/bin/env python3
"""
mocpaths: show how a note connects to its Maps of Content

Usage:
    mocpaths paths "Garden.md"          # Every path from a root MOC to the note
    mocpaths parents "Garden"           # Immediate parents of the note
    mocpaths excluded Archive/Old.md    # Whether a note is excluded
    mocpaths settings                   # Effective settings
    mocpaths watch Garden               # Re-print paths whenever the vault changes
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

import click

from . import __version__ as MOCPATHS_VERSION
from ._logging import configure_logging
from .config import ConfigurationError, PathSettings, discover_config_file, get_vault_root, load_config_file
from .core import MocPaths
from .models import NotePath
from .vault import VaultCorpus

DEFAULT_SEPARATOR = " → "


def output(data: Any, as_json: bool = False) -> None:
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def format_paths(paths: list[NotePath], separator: str = DEFAULT_SEPARATOR) -> str:
    """One path per line, root first, using note names without extension."""
    lines = []
    for path in paths:
        names = [doc_id[:-3] if doc_id.endswith(".md") else doc_id for doc_id in path]
        lines.append(separator.join(names))
    return "\n".join(lines)


def _build_service(vault: str | None, config: str | None) -> MocPaths:
    config_path = Path(config) if config else discover_config_file()
    configured_vault: Path | None = None
    settings = PathSettings()
    if config_path is not None:
        configured_vault, settings = load_config_file(config_path)

    vault_root = get_vault_root(Path(vault) if vault else None, configured_vault)
    return MocPaths(VaultCorpus(vault_root), settings)


def _get_service(ctx: click.Context) -> MocPaths:
    obj = ctx.ensure_object(dict)
    if "service" not in obj:
        try:
            obj["service"] = _build_service(obj.get("vault"), obj.get("config"))
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e
    return obj["service"]


def _resolve_note(service: MocPaths, note: str) -> str:
    """Accept a vault path or a link reference."""
    if service.corpus.document_exists(note):
        return note
    resolved = service.corpus.resolve_link(note, "")
    if resolved is None:
        raise click.ClickException(f"Note not found: {note}")
    return resolved


@click.group()
@click.version_option(version=MOCPATHS_VERSION, prog_name="mocpaths")
@click.option("--vault", type=click.Path(file_okay=False), help="Vault directory (default: from config)")
@click.option("--config", type=click.Path(dir_okay=False, exists=True), help="Path to a .mocpaths.yaml file")
@click.pass_context
def cli(ctx: click.Context, vault: str | None, config: str | None):
    """Discover ancestry paths from notes to their Maps of Content."""
    configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["vault"] = vault
    ctx.obj["config"] = config


@cli.command()
@click.argument("note")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--separator", default=DEFAULT_SEPARATOR, show_default=True, help="Text between notes")
@click.pass_context
def paths(ctx: click.Context, note: str, as_json: bool, separator: str):
    """Show every path from a root MOC down to NOTE."""
    service = _get_service(ctx)
    doc_id = _resolve_note(service, note)
    found = service.calculate_paths(doc_id)

    if as_json:
        output({"note": doc_id, "paths": [list(path) for path in found]}, as_json=True)
    elif found:
        output(format_paths(found, separator))
    else:
        output(f"No paths to a MOC for {doc_id}")


@cli.command()
@click.argument("note")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def parents(ctx: click.Context, note: str, as_json: bool):
    """Show the immediate parents of NOTE."""
    service = _get_service(ctx)
    doc_id = _resolve_note(service, note)
    found = list(service.get_parents(doc_id))

    if as_json:
        output({"note": doc_id, "parents": found}, as_json=True)
    elif found:
        output("\n".join(found))
    else:
        output(f"{doc_id} has no parents")


@cli.command()
@click.argument("note")
@click.pass_context
def excluded(ctx: click.Context, note: str):
    """Tell whether NOTE is excluded from path calculation."""
    service = _get_service(ctx)
    doc_id = _resolve_note(service, note)
    state = "excluded" if service.is_excluded(doc_id) else "included"
    output(f"{doc_id}: {state}")


@cli.command("settings")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def settings_cmd(ctx: click.Context, as_json: bool):
    """Show the effective settings."""
    service = _get_service(ctx)
    data = service.settings.to_mapping()
    if as_json:
        output(data, as_json=True)
    else:
        width = max(len(key) for key in data)
        output("\n".join(f"{key.ljust(width)}  {value}" for key, value in data.items()))


@cli.command()
@click.argument("note")
@click.option("--separator", default=DEFAULT_SEPARATOR, show_default=True, help="Text between notes")
@click.option("--debounce", default=1.0, show_default=True, help="Seconds to wait for changes to settle")
@click.pass_context
def watch(ctx: click.Context, note: str, separator: str, debounce: float):
    """Print paths for NOTE and again after every change in the vault."""
    from .watcher import VaultWatcher

    service = _get_service(ctx)
    doc_id = _resolve_note(service, note)
    corpus = service.corpus
    if not isinstance(corpus, VaultCorpus):
        raise click.ClickException("watch requires a vault on disk")

    def show() -> None:
        found = service.refresh(doc_id)
        output(format_paths(found, separator) if found else f"No paths to a MOC for {doc_id}")
        output("")

    show()
    watcher = VaultWatcher(service, corpus.root, debounce_seconds=debounce, on_change=show)
    watcher.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
