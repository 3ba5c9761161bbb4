"""Main cradle-access CLI application."""

import typer
from rich.console import Console

from cradle_access import __version__
from cradle_access.commands import db, permissions, roles, users
from cradle_access.core.logging import configure_logging


console = Console()

app = typer.Typer(
    name="cradle-access",
    help="Administer permissions, roles and user access.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db.app, name="db")
app.add_typer(permissions.app, name="permissions")
app.add_typer(users.app, name="users")
app.add_typer(roles.app, name="roles")


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """cradle-access - Administer the authorization core."""
    if version:
        console.print(f"[bold cyan]cradle-access[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
