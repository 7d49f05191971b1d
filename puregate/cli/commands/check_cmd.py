"""File validation command for the puregate CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from puregate.api import validation
from puregate.kernel.config.loader import load_config
from puregate.kernel.exceptions import PureGateError
from puregate.kernel.js.parser import ModuleFormat
from puregate.kernel.linting.style_rules import STYLE_RULE_REGISTRY
from puregate.kernel.logging import configure_logging

if TYPE_CHECKING:
    from puregate.kernel.config.models import PureGateConfig
    from puregate.kernel.diagnostics.models import Diagnostic, StageResult
    from puregate.kernel.orchestration.options import ValidateOptions

console = Console()

_SEVERITY_STYLE = {"error": "red", "warning": "yellow"}


def load_settings(config_path: Path | None, verbose: bool) -> PureGateConfig:
    """Load configuration and apply its logging section.

    Exits with status 1 when the configuration cannot be read.
    """
    try:
        cfg = load_config(config_path)
    except (PureGateError, FileNotFoundError) as e:
        console.print(f"[red]Configuration Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    log = cfg.logging
    configure_logging(
        level="DEBUG" if verbose else log.level,
        format=log.format,
        output_file=log.output_file,
        use_color=log.use_color,
        include_timestamp=log.include_timestamp,
        backtrace=log.backtrace,
        diagnose=log.diagnose,
    )
    return cfg


def _disabled_rules(disable: str) -> dict[str, str]:
    disabled_ids = {r.strip() for r in disable.split(",") if r.strip()}
    unknown = disabled_ids - STYLE_RULE_REGISTRY.keys()
    if unknown:
        console.print(
            f"[yellow]Unknown rule ID(s): {escape(', '.join(sorted(unknown)))}[/yellow]  "
            f"Known: {escape(', '.join(sorted(STYLE_RULE_REGISTRY)))}"
        )
    return dict.fromkeys(sorted(disabled_ids), "off")


def check(
    ctx: typer.Context,
    files: Annotated[
        list[Path],
        typer.Argument(
            help="JavaScript files to validate",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    syntax_only: Annotated[
        bool,
        typer.Option("--syntax-only", help="Run only the syntax gate"),
    ] = False,
    skip_style: Annotated[
        bool,
        typer.Option("--skip-style", help="Skip the style gate"),
    ] = False,
    module_format: Annotated[
        ModuleFormat | None,
        typer.Option("--module-format", "-m", help="Module convention (cjs, esm, infer)"),
    ] = None,
    max_errors: Annotated[
        int | None,
        typer.Option("--max-errors", min=1, help="Maximum syntax errors reported per file"),
    ] = None,
    allow: Annotated[
        list[str] | None,
        typer.Option("--allow", help="Forbidden identifier to permit (repeatable)"),
    ] = None,
    allow_member: Annotated[
        list[str] | None,
        typer.Option("--allow-member", help="Member path or a.b.* prefix to permit (repeatable)"),
    ] = None,
    disable: Annotated[
        str,
        typer.Option(
            "--disable",
            "-d",
            help="Comma-separated style rule IDs to turn off (e.g., no-console,eqeqeq)",
        ),
    ] = "",
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (text, json)"),
    ] = "text",
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a kind: Config YAML or TOML file"),
    ] = None,
) -> None:
    """Validate JavaScript files against the syntax, purity and style gates.

    Exits with status 1 when any file fails validation.

    Examples
    --------
    puregate check transform.js
    puregate check src/*.js --format json
    puregate check transform.js --allow-member "console.debug" --disable no-console
    puregate check transform.js --syntax-only --max-errors 3
    """
    if output_format not in ("text", "json"):
        console.print(f"[red]Invalid format '{escape(output_format)}'.[/red] Choose from: text, json")
        raise typer.Exit(1)

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    cfg = load_settings(config_path, verbose)

    overrides: dict[str, Any] = {}
    if skip_style:
        overrides["skip_style"] = True
    if module_format is not None:
        overrides["module_format"] = module_format
    if max_errors is not None:
        overrides["max_errors"] = max_errors
    if allow:
        overrides["allowed_identifiers"] = frozenset(cfg.allowed_identifiers) | set(allow)
    if allow_member:
        overrides["allowed_members"] = (*cfg.allowed_members, *allow_member)
    if disable:
        overrides["style_rules"] = {**cfg.style_rules, **_disabled_rules(disable)}

    sources: list[tuple[Path, str, ValidateOptions]] = []
    for path in files:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]File Error:[/red] {escape(str(e))}")
            raise typer.Exit(1) from e
        try:
            options = cfg.to_options(filename=str(path), **overrides)
        except ValueError as e:
            console.print(f"[red]Invalid options:[/red] {escape(str(e))}")
            raise typer.Exit(1) from e
        sources.append((path, text, options))

    try:
        if syntax_only:
            results: list[tuple[Path, Any]] = [
                (path, validation.validate_syntax_only(text, options))
                for path, text, options in sources
            ]
        else:
            reports = asyncio.run(
                validation.avalidate_batch([(text, options) for _, text, options in sources])
            )
            results = [(path, report) for (path, _, _), report in zip(sources, reports, strict=True)]
    except PureGateError as e:
        console.print(f"[red]Validation Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if output_format == "json":
        _print_json(results, syntax_only)
    else:
        _print_text(results)

    if not all(result.valid for _, result in results):
        raise typer.Exit(1)


def _diagnostics(result: Any) -> list[Diagnostic]:
    """Errors then warnings for a full report, or the stage diagnostics."""
    if hasattr(result, "syntax"):
        return [*result.errors, *result.warnings]
    stage: StageResult = result
    return list(stage.diagnostics)


def _print_text(results: list[tuple[Path, Any]]) -> None:
    """Print validation results as rich text."""
    console.print()
    for path, result in results:
        diagnostics = _diagnostics(result)
        if result.valid and not diagnostics:
            console.print(
                f"[green]Valid:[/green] {escape(str(path))}  "
                f"[dim]{result.duration_ms:.1f}ms[/dim]"
            )
            continue

        n_err = sum(1 for d in diagnostics if d.is_error)
        n_warn = len(diagnostics) - n_err
        status = "[green]valid[/green]" if result.valid else "[red]invalid[/red]"
        console.print(
            f"[bold]{escape(str(path))}[/bold]  {status}  "
            f"[red]{n_err} error(s)[/red]  "
            f"[yellow]{n_warn} warning(s)[/yellow]"
        )

        table = Table(show_header=True, border_style="dim")
        table.add_column("Stage", style="magenta", width=7)
        table.add_column("Rule", style="cyan")
        table.add_column("Severity", width=8)
        table.add_column("Location", style="green")
        table.add_column("Message")
        table.add_column("Suggestion", style="dim")

        for d in diagnostics:
            style = _SEVERITY_STYLE.get(str(d.severity), "white")
            table.add_row(
                str(d.category),
                escape(d.rule or ""),
                f"[{style}]{d.severity}[/{style}]",
                f"{d.location.line}:{d.location.column}",
                escape(d.message),
                escape(d.suggestion or ""),
            )

        console.print(table)
        console.print()


def _print_json(results: list[tuple[Path, Any]], syntax_only: bool) -> None:
    """Print validation results as JSON."""
    output = []
    for path, result in results:
        if syntax_only:
            body = {
                "valid": result.valid,
                "module_format": result.module_format,
                "duration_ms": round(result.duration_ms, 3),
                "diagnostics": [d.to_dict() for d in result.diagnostics],
            }
        else:
            body = result.to_dict()
        output.append({"file": str(path), **body})
    console.print_json(data=output)
