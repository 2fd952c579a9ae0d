"""Config commands.

Shows the effective configuration and writes a default config file.
"""

from typing import Annotated

import typer

from devclean.core.config import (
    API_KEY_ENV,
    ConfigError,
    DevcleanConfig,
    get_api_key,
    load_config_or_default,
    save_config,
)
from devclean.core.paths import get_config_path
from devclean.utils.formatting import console, print_error, print_info, print_success, print_warning

app = typer.Typer(
    help="Show or create the devclean configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the configuration file and effective settings."""
    config_path = get_config_path()
    try:
        config = load_config_or_default(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if config_path.exists():
        print_info(f"Config file: {config_path}")
        console.print(config_path.read_text(), markup=False, highlight=False)
    else:
        print_info(f"No config file at {config_path} (using defaults).")

    console.print("[bold]Effective settings[/bold]")
    console.print(f"  AI model:        {config.effective_model}")
    console.print(f"  AI timeout:      {config.ai_timeout_seconds}s")
    console.print(f"  Quarantine dir:  {config.effective_quarantine_dir}")
    key_state = "set" if get_api_key() else "not set"
    console.print(f"  {API_KEY_ENV}:  {key_state}")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_warning(f"Config already exists: {config_path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    config = DevcleanConfig()
    try:
        saved = save_config(config, config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
    console.print(saved.read_text(), markup=False, highlight=False)
