"""CLI commands for global configuration management."""

import typer
import yaml

from diffnote import global_config

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage global diffnote configuration in ~/.diffnote/",
    add_completion=False,
)

KNOWN_KEYS = ("data_dir", "default_comment_type", "recent_commits", "export.reviewed_only")


@config_app.command("show")
def config_show() -> None:
    """Show the effective global configuration."""
    try:
        config = global_config.load_global_config()
        typer.echo(f"Current diffnote configuration ({global_config.get_config_file_path()}):")
        typer.echo()
        typer.echo(f"  Data dir: {global_config.get_data_dir(config)}")
        typer.echo(f"  Default comment type: {global_config.get_default_comment_type(config).value}")
        typer.echo(f"  Recent commits: {global_config.get_recent_commits(config)}")
        typer.echo(f"  Export reviewed only: {global_config.get_export_reviewed_only(config)}")
    except global_config.GlobalConfigError as e:
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help=f"One of: {', '.join(KNOWN_KEYS)}"),
    value: str = typer.Argument(..., help="New value (parsed as YAML, e.g. true, 20)"),
) -> None:
    """Set a configuration value."""
    if key not in KNOWN_KEYS:
        typer.echo(f"Unknown key: {key}", err=True)
        typer.echo(f"Valid keys: {', '.join(KNOWN_KEYS)}")
        raise typer.Exit(1)

    try:
        parsed = yaml.safe_load(value)
        # Validate before writing so a bad value never reaches the file
        candidate = {}
        target = candidate
        parts = key.split(".")
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = parsed
        global_config.get_default_comment_type(candidate)
        global_config.get_recent_commits(candidate)
        global_config.get_export_reviewed_only(candidate)

        global_config.set_config_value(key, parsed)
    except (yaml.YAMLError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ {key} set to {parsed!r}")
