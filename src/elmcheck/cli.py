# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line entry point for running the diagnostic pipeline once."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from .analyzer import AnalyzerIssues
from .config import Config, load_config
from .errors import ConfigError, ReportError
from .invocation import CompilerInvocation
from .logging import ConsoleNotifier, configure_logging, fail, get_console, ok, warn
from .project import detect_project_root
from .publisher import DiagnosticCollection, DiagnosticPublisher, SavedDocument
from .reporting import count_errors, diagnostics_to_json, render_diagnostics

EXIT_DIAGNOSTICS = 1
EXIT_FAILURE = 2

app = typer.Typer(
    name="elmcheck",
    help="Compile Elm files and report the compiler's diagnostics per file.",
    no_args_is_help=True,
    add_completion=False,
)

FileArgument = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, resolve_path=True, help="Elm source file that was saved."),
]
WorkspaceOption = Annotated[
    Path | None,
    typer.Option("--workspace-root", file_okay=False, help="Fallback root for files outside an Elm project."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", dir_okay=False, help="TOML configuration file (defaults to elmcheck.toml)."),
]


class _StderrNotifier:
    """Notifier used when stdout carries machine-readable output."""

    def notify(self, message: str) -> None:
        typer.echo(message, err=True)


def _load_config(file: Path, workspace_root: Path | None, config_path: Path | None) -> Config:
    root = detect_project_root(file) or workspace_root or file.parent
    return load_config(root, config_path)


@app.command("check")
def check(
    file: FileArgument,
    workspace_root: WorkspaceOption = None,
    config_path: ConfigOption = None,
    analyzer_report: Annotated[
        Path | None,
        typer.Option("--analyzer-report", exists=True, dir_okay=False, help="JSON array of analyzer issues."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print published diagnostics as JSON.")] = False,
    emoji: Annotated[bool | None, typer.Option("--emoji/--no-emoji", help="Toggle emoji output.")] = None,
    color: Annotated[bool | None, typer.Option("--color/--no-color", help="Toggle coloured output.")] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Log pipeline internals to stderr.")] = False,
) -> None:
    """Handle one save of FILE and print what gets published."""

    configure_logging(debug=debug)
    try:
        config = _load_config(file, workspace_root, config_path)
        analyzer = AnalyzerIssues.from_report(analyzer_report) if analyzer_report else AnalyzerIssues()
    except (ConfigError, ReportError) as exc:
        fail(str(exc), use_emoji=bool(emoji))
        raise typer.Exit(code=EXIT_FAILURE) from exc

    use_emoji = config.emoji if emoji is None else emoji
    use_color = config.color if color is None else color
    compiler_surface = DiagnosticCollection("elm-make-diagnostics")
    analyzer_surface = DiagnosticCollection("elm-analyse-diagnostics")
    publisher = DiagnosticPublisher(
        config=config,
        analyzer=analyzer,
        compiler_surface=compiler_surface,
        analyzer_surface=analyzer_surface,
        workspace_root=workspace_root,
        notifier=_StderrNotifier() if as_json else ConsoleNotifier(use_emoji=use_emoji, use_color=use_color),
    )
    report = asyncio.run(publisher.on_save(SavedDocument.from_path(file)))

    if report.skipped:
        warn(f"Skipped {file}: not an Elm source or linting is disabled", use_emoji=use_emoji, use_color=use_color)
        raise typer.Exit(code=0)
    if report.error is not None:
        fail(f"Compiler run failed: {report.error}", use_emoji=use_emoji, use_color=use_color)
        raise typer.Exit(code=EXIT_FAILURE)

    collections = {
        compiler_surface.name: compiler_surface.snapshot(),
        analyzer_surface.name: analyzer_surface.snapshot(),
    }
    errors = count_errors(collections)
    if as_json:
        typer.echo(diagnostics_to_json(collections))
    else:
        render_diagnostics(collections, console=get_console(color=use_color, emoji=use_emoji), color=use_color)
        if errors:
            fail(f"{errors} error(s) reported", use_emoji=use_emoji, use_color=use_color)
        else:
            ok("No errors reported", use_emoji=use_emoji, use_color=use_color)
    raise typer.Exit(code=EXIT_DIAGNOSTICS if errors else 0)


@app.command("command")
def show_command(
    file: FileArgument,
    workspace_root: WorkspaceOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Print the compiler command that a save of FILE would run."""

    try:
        config = _load_config(file, workspace_root, config_path)
    except ConfigError as exc:
        fail(str(exc), use_emoji=False)
        raise typer.Exit(code=EXIT_FAILURE) from exc
    command, output = CompilerInvocation(file, workspace_root=workspace_root, config=config).prepare()
    typer.echo(f"root: {command.cwd}")
    typer.echo(f"generation: {output.generation.value}")
    typer.echo(f"command: {command.command_line()}")


__all__ = ["app"]
