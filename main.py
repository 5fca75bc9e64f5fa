# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from dirmon.cli.main import app as cli_app, show_usage

app = typer.Typer(help="DirMon - run an action once per burst of directory changes.")

# Add CLI commands
app.registered_commands.extend(cli_app.registered_commands)
app.callback(invoke_without_command=True)(show_usage)

if __name__ == "__main__":
    app()
