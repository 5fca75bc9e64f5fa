# Copyright (c) 2025 Trae AI. All rights reserved.

import sys
import logging
import typer
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from ..core.config import Config, read_config_file
from ..core.errors import ConfigError
from ..core.executor import ProcessActionExecutor
from ..core.notifier import WatchdogSource
from ..services.monitor_service import MonitorService

app = typer.Typer(
    help=(
        "DirMon - watch a directory and run an action once changes settle. "
        "Changes arriving less than 5 seconds apart are handled as a single change, "
        "so the action does not run too often."
    ),
)
console = Console()


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def _resolve_config(
    watch_dir: Optional[Path],
    action: Optional[str],
    config_path: Optional[str],
    shell: Optional[bool],
    recursive: Optional[bool],
    verbose: bool,
) -> Config:
    """
    Merges command line values over the optional config file and validates paths.
    """
    data = {}
    if config_path:
        try:
            data = read_config_file(config_path)
        except Exception as e:
            raise ConfigError(f"Error loading config: {e}")

    if watch_dir is not None:
        data["watch_dir"] = watch_dir
    if action is not None:
        data["action"] = action
    if shell is not None:
        data["shell"] = shell
    if recursive is not None:
        data["recursive"] = recursive
    if verbose:
        data["verbose"] = True

    if "watch_dir" not in data:
        raise ConfigError("too few arguments: missing directory to watch")
    if "action" not in data:
        raise ConfigError("too few arguments: missing action")

    try:
        config = Config(**data)
    except ValidationError as e:
        raise ConfigError(str(e))
    config.validate_paths()
    return config


@app.callback(invoke_without_command=True)
def show_usage(ctx: typer.Context):
    """
    Prints the usage when no command is given.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


@app.command("watch")
def watch(
    watch_dir: Optional[Path] = typer.Argument(None, help="Directory to watch."),
    action: Optional[str] = typer.Argument(None, help="Script to run after a burst of changes."),
    config_path: Optional[str] = typer.Option(None, help="YAML config file."),
    shell: Optional[bool] = typer.Option(None, "--shell/--no-shell", help="Run the action through the system shell."),
    recursive: Optional[bool] = typer.Option(None, "--recursive/--no-recursive", help="Watch subdirectories too."),
    verbose: bool = False,
):
    """
    Watch a directory and run ACTION once per burst of changes.
    """
    try:
        config = _resolve_config(watch_dir, action, config_path, shell, recursive, verbose)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _setup_logging(config.verbose)

    source = WatchdogSource(config.watch_dir, recursive=config.recursive)
    try:
        source.start()
    except OSError as e:
        console.print(f"[red]Cannot watch {config.watch_dir}:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    executor = ProcessActionExecutor(shell=config.shell)
    service = MonitorService()

    console.print(f"Start monitoring [cyan]{config.watch_dir}[/cyan] ...")
    service.start(source, executor, config.action)
    try:
        while not service.wait(timeout=1):
            pass
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, stopping...[/yellow]")
    finally:
        service.stop()


if __name__ == "__main__":
    app()
