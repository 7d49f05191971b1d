"""Style rule listing command for the puregate CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from puregate.cli.commands.check_cmd import load_settings
from puregate.kernel.exceptions import ConfigurationError
from puregate.kernel.linting.config import merge_rule_config, normalize_rule_setting
from puregate.kernel.linting.models import SEVERITY_ERROR, SEVERITY_WARN
from puregate.kernel.linting.style_rules import STYLE_RULE_REGISTRY

console = Console()

_LEVEL_NAMES = {SEVERITY_ERROR: "error", SEVERITY_WARN: "warn"}


def rules(
    ctx: typer.Context,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (text, json)"),
    ] = "text",
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a kind: Config YAML or TOML file"),
    ] = None,
) -> None:
    """List the built-in style rules with the severity each is configured at.

    Examples
    --------
    puregate rules
    puregate rules --config puregate.yaml --format json
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    cfg = load_settings(config_path, verbose)
    configured = merge_rule_config(cfg.style_rules)

    rows = []
    try:
        for rule_id, rule in sorted(STYLE_RULE_REGISTRY.items()):
            level, options = normalize_rule_setting(configured.get(rule_id, "off"), rule_id)
            rows.append({
                "rule_id": rule_id,
                "severity": _LEVEL_NAMES.get(level, "off"),
                "options": list(options),
                "description": rule.description,
            })
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if output_format == "json":
        console.print_json(data=rows)
        return

    table = Table(show_header=True, border_style="dim")
    table.add_column("Rule", style="cyan")
    table.add_column("Severity", width=8)
    table.add_column("Description")

    severity_style = {"error": "red", "warn": "yellow", "off": "dim"}
    for row in rows:
        style = severity_style[row["severity"]]
        table.add_row(
            row["rule_id"], f"[{style}]{row['severity']}[/{style}]", escape(row["description"])
        )
    console.print(table)
