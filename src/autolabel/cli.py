"""CLI entry point for autolabel.

This module provides the Typer-based CLI with commands:
- autolabel run: Label the triggering issue or pull request (GitHub Actions)
- autolabel validate: Validate a filter document and its patterns
- autolabel resolve: Evaluate a filter document against a title and body

Exit codes:
- 0: Success
- 1: Configuration error
- 2: Authentication error
- 3: Event payload error
- 4: Pattern error
- 5: Label apply error
"""

from __future__ import annotations

import asyncio
import json
import os
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from autolabel import __version__
from autolabel.actions import LabelApplyError, LabelSink
from autolabel.config import ConfigError, load_rules, load_settings
from autolabel.github import (
    AuthenticationError,
    EventPayloadError,
    GitHubClient,
    event_kind_from_name,
)
from autolabel.logging import configure_logging, get_logger
from autolabel.rules import (
    LabelResolver,
    MatchContext,
    PatternError,
    check_patterns,
)
from autolabel.service import LabelService

if TYPE_CHECKING:
    from autolabel.config.schema import ActionSettings
    from autolabel.service import LabelingOutcome


class ExitCode(IntEnum):
    """CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    AUTH_ERROR = 2
    EVENT_ERROR = 3
    PATTERN_ERROR = 4
    APPLY_ERROR = 5


app = typer.Typer(
    name="autolabel",
    help="Label issues and pull requests from regex filters on their title and body.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"autolabel {__version__}")
        raise typer.Exit()


def _fail(message: str, code: ExitCode) -> typer.Exit:
    """Print an error in red and build the matching exit."""
    typer.echo(typer.style(f"✗ {message}", fg=typer.colors.RED), err=True)
    return typer.Exit(code)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Label issues and pull requests from regex filters."""


@app.command()
def validate(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to the filter document.",
        ),
    ],
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """Validate a filter document without running.

    Parses every filter and compiles every pattern. Exits with code 0 if
    valid, 1 for a malformed filter or 4 for a broken pattern.
    """
    configure_logging(verbose=verbose, json_output=False)

    try:
        rules = load_rules(config)
        pattern_count = check_patterns(rules)
    except ConfigError as e:
        raise _fail(str(e), ExitCode.CONFIG_ERROR) from e
    except PatternError as e:
        raise _fail(str(e), ExitCode.PATTERN_ERROR) from e

    typer.echo(typer.style("✓ Configuration is valid", fg=typer.colors.GREEN))

    if verbose:
        typer.echo("\nConfiguration summary:")
        typer.echo(f"  Filters: {len(rules)}")
        typer.echo(f"  Distinct patterns: {pattern_count}")
        typer.echo(f"  Labels: {', '.join(dict.fromkeys(r.label for r in rules))}")

    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def resolve(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to the filter document.",
        ),
    ],
    title: Annotated[
        str,
        typer.Option(
            "--title",
            "-t",
            help="Title of the issue or pull request.",
        ),
    ],
    event: Annotated[
        str,
        typer.Option(
            "--event",
            "-e",
            help="Triggering event name (issues, pull_request).",
        ),
    ] = "issues",
    body: Annotated[
        str | None,
        typer.Option(
            "--body",
            "-b",
            help="Body of the issue or pull request.",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print labels as a JSON list.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """Evaluate a filter document against a title and body.

    Prints the labels that would be applied, one per line.
    """
    configure_logging(verbose=verbose, json_output=False)

    try:
        kind = event_kind_from_name(event)
        rules = load_rules(config)
        resolution = LabelResolver(rules).resolve(
            MatchContext(event_kind=kind, title=title, body=body)
        )
    except EventPayloadError as e:
        raise _fail(str(e), ExitCode.EVENT_ERROR) from e
    except ConfigError as e:
        raise _fail(str(e), ExitCode.CONFIG_ERROR) from e
    except PatternError as e:
        raise _fail(str(e), ExitCode.PATTERN_ERROR) from e

    if as_json:
        typer.echo(json.dumps(resolution.labels))
    else:
        for label in resolution.labels:
            typer.echo(label)

    raise typer.Exit(ExitCode.SUCCESS)


@app.command("run")
def run_action(
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Resolve labels without applying them.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    json_logs: Annotated[
        bool,
        typer.Option(
            "--json-logs/--console-logs",
            help="Log as JSON (default) or human-readable lines.",
        ),
    ] = True,
) -> None:
    """Label the triggering issue or pull request.

    Reads the run settings from the GitHub Actions environment, fetches the
    filter document at the triggering commit and adds the resolved labels.
    """
    configure_logging(verbose=verbose, json_output=json_logs)
    log = get_logger("autolabel.cli")

    try:
        settings = load_settings()
    except AuthenticationError as e:
        raise _fail(f"Authentication error: {e}", ExitCode.AUTH_ERROR) from e
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}", ExitCode.CONFIG_ERROR) from e

    if dry_run:
        settings = settings.model_copy(update={"dry_run": True})

    try:
        outcome = asyncio.run(_run(settings))
    except EventPayloadError as e:
        raise _fail(f"Failed to parse event: {e}", ExitCode.EVENT_ERROR) from e
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}", ExitCode.CONFIG_ERROR) from e
    except PatternError as e:
        raise _fail(f"Failed to filter label: {e}", ExitCode.PATTERN_ERROR) from e
    except LabelApplyError as e:
        log.error("label_apply_failed", error=str(e), labels=e.labels)
        raise _fail(str(e), ExitCode.APPLY_ERROR) from e

    write_action_output("labels", json.dumps(outcome.labels))

    if outcome.labels:
        verb = "Would add" if outcome.dry_run else "Added"
        typer.echo(f"{verb} labels to {outcome.target.reference}: {', '.join(outcome.labels)}")
    else:
        typer.echo("No labels to add")

    raise typer.Exit(ExitCode.SUCCESS)


async def _run(settings: ActionSettings) -> LabelingOutcome:
    """Run the labeling service with a client scoped to this run."""
    async with GitHubClient(settings.token, base_url=settings.api_url) as client:
        sink = LabelSink(client, dry_run=settings.dry_run)
        service = LabelService(settings, client, sink)
        return await service.run()


def write_action_output(name: str, value: str) -> None:
    """Append a step output to $GITHUB_OUTPUT when running in Actions.

    Args:
        name: Output name.
        value: Single-line output value.
    """
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return
    with Path(output_path).open("a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")
