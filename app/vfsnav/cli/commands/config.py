"""Config command implementation.

Shows and initializes the engine configuration file.
"""

from typing import Annotated

import typer
from rich.table import Table

from vfsnav.cli.support import require_config
from vfsnav.core.config import ConfigError, EngineConfig, save_config
from vfsnav.core.paths import get_config_path
from vfsnav.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the engine configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective configuration."""
    config = require_config()
    config_path = get_config_path()

    table = Table(
        title="Engine Configuration",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="bold")
    table.add_column("Value", style="info")
    table.add_column("Description", style="muted")

    for name, field in EngineConfig.model_fields.items():
        table.add_row(name, str(getattr(config, name)), field.description or "")

    console.print(table)
    if config_path.exists():
        console.print(f"\n[dim]Loaded from {config_path}[/dim]")
    else:
        console.print(f"\n[dim]No config file at {config_path}; showing defaults[/dim]")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file populated with the defaults."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_info(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(EngineConfig(), config_path, include_defaults=True)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
