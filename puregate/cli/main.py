"""puregate CLI - Main entrypoint."""

import typer
from rich.console import Console

from puregate.cli.commands import check_cmd, rules_cmd

# Create the main Typer app
app = typer.Typer(
    name="puregate",
    help="puregate - Syntax, purity and style gate for generated JavaScript.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

app.command("check", help="Validate JavaScript files")(check_cmd.check)
app.command("rules", help="List style rules and their configured severity")(rules_cmd.rules)


def _version_callback(value: bool) -> None:
    if value:
        from puregate import __version__

        console.print(f"[bold blue]puregate[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    verbose: bool = typer.Option(False, "-V", "--verbose", help="Enable verbose logging"),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """puregate - Validation gate for generated JavaScript.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    if ctx.obj is None:
        ctx.obj = {}
    ctx.obj["verbose"] = verbose


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
