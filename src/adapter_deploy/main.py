#!/usr/bin/env python3
"""
Adapter Deploy Main Entry Point

Command-line interface for detecting changed adapters and publishing them to
the object store and adapter registry.
"""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_config
from .contracts.models import PublishMode
from .deployer import DeploySummary, create_deployer
from .detector import detect_changed_adapters
from .errors import DeployError
from .integrations.process import ProcessRunner
from .integrations.vcs import create_vcs_adapter
from .publisher import PublishOutcome, PublishResult
from .utils.json_logger import configure_logging

app = typer.Typer(
    name="adapter-deploy",
    help="Build changed adapters and publish them to the object store and registry",
    rich_markup_mode="rich",
)
console = Console()
logger = logging.getLogger(__name__)


# Cross-platform safe success/failure symbols (avoid Unicode on legacy Windows)
def _symbol(ok: bool) -> str:
    enc = (getattr(sys.stdout, "encoding", None) or "").lower()
    if "utf" in enc:
        return "✓" if ok else "✗"
    return "OK" if ok else "FAIL"


def _print_error(error: DeployError) -> None:
    console.print(f"[red]{_symbol(False)} {escape(str(error))}[/red]", highlight=False)


def _results_table(results: List[PublishResult]) -> Table:
    table = Table(title="Adapters")
    table.add_column("Directory", style="cyan")
    table.add_column("Outcome")
    table.add_column("Adapter")
    table.add_column("Keys")
    styles = {
        PublishOutcome.PUBLISHED: "green",
        PublishOutcome.PLANNED: "yellow",
        PublishOutcome.SKIPPED: "dim",
    }
    for result in results:
        adapter = f"{result.adapter_id}@{result.version}" if result.adapter_id else "-"
        table.add_row(
            result.adapter_dir,
            f"[{styles[result.outcome]}]{result.outcome.value}[/{styles[result.outcome]}]",
            adapter,
            "\n".join(result.keys) or result.reason,
        )
    return table


def _report(results: List[PublishResult], dry_run: bool) -> None:
    console.print(_results_table(results))
    done = "planned" if dry_run else "published"
    count = sum(r.outcome != PublishOutcome.SKIPPED for r in results)
    console.print(f"[green]{_symbol(True)} {count} adapter(s) {done}[/green]")


@app.callback()
def main_callback(
    log_format: str = typer.Option(
        "text", "--log-format", envvar="ADAPTER_DEPLOY_LOG_FORMAT", help="text or json"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Build changed adapters and publish them to the object store and registry."""
    try:
        configure_logging(logging.DEBUG if verbose else logging.INFO, log_format)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-format")


@app.command("deploy")
def deploy(
    base: str = typer.Option("HEAD~1", "--base", help="Older revision of the diff"),
    head: str = typer.Option("HEAD", "--head", help="Newer revision of the diff"),
    repo: Path = typer.Option(Path("."), "--repo", help="Repository working tree"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Check and list targets without building or uploading"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="YAML file with non-secret settings"
    ),
    mode: Optional[PublishMode] = typer.Option(
        None, "--mode", help="versioned or unversioned publishing"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
):
    """Publish every adapter changed in the latest commit."""
    try:
        config = load_config(config_file, mode=mode)
        deployer = create_deployer(config, repo_dir=repo)
        summary = deployer.run(base=base, head=head, dry_run=dry_run)
    except DeployError as e:
        _print_error(e)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return
    _print_summary(summary)


def _print_summary(summary: DeploySummary) -> None:
    if summary.nothing_to_do:
        console.print("[yellow]No adapters were changed. Nothing to deploy.[/yellow]")
        return
    _report(summary.results, summary.dry_run)


@app.command("detect")
def detect(
    base: str = typer.Option("HEAD~1", "--base", help="Older revision of the diff"),
    head: str = typer.Option("HEAD", "--head", help="Newer revision of the diff"),
    repo: Path = typer.Option(Path("."), "--repo", help="Repository working tree"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="YAML file with non-secret settings"
    ),
):
    """Print the changed adapter directories as a JSON array."""
    try:
        config = load_config(config_file, require_store=False)
        vcs = create_vcs_adapter(ProcessRunner(), repo)
        changed = detect_changed_adapters(vcs, base, head, config.adapters_root)
    except DeployError as e:
        _print_error(e)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(changed))


@app.command("publish")
def publish(
    adapter_dirs: List[str] = typer.Argument(
        ..., help="Adapter directories, relative to the repository"
    ),
    repo: Path = typer.Option(Path("."), "--repo", help="Repository working tree"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Check and list targets without building or uploading"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="YAML file with non-secret settings"
    ),
    mode: Optional[PublishMode] = typer.Option(
        None, "--mode", help="versioned or unversioned publishing"
    ),
):
    """Publish the given adapter directories regardless of what changed."""
    try:
        config = load_config(config_file, mode=mode)
        deployer = create_deployer(config, repo_dir=repo)
        results = deployer.publish_dirs(adapter_dirs, dry_run=dry_run)
    except DeployError as e:
        _print_error(e)
        raise typer.Exit(code=1)
    _report(results, dry_run)


def main():
    """Main entry point for adapter-deploy."""
    app()


if __name__ == "__main__":
    main()
