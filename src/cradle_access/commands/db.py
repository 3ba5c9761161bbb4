"""Commands: cradle-access db - Database schema migrations."""

import typer
from rich.console import Console


console = Console()

app = typer.Typer(help="Manage the database schema.", no_args_is_help=True)


def _alembic_config():
    """Build an Alembic config pointing at the packaged migrations."""
    from alembic.config import Config

    from cradle_access.config import settings

    config = Config()
    config.set_main_option("script_location", "cradle_access:migrations")
    # ConfigParser interpolation treats "%" as special
    config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))
    return config


@app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
) -> None:
    """Apply migrations up to a revision (the latest by default)."""
    from alembic import command

    command.upgrade(_alembic_config(), revision)
    console.print(f"[green]✓[/green] Database upgraded to {revision}")


@app.command()
def downgrade(
    revision: str = typer.Argument(..., help="Target revision, e.g. -1 or base"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmation prompt"
    ),
) -> None:
    """Revert migrations down to a revision."""
    from alembic import command

    if not force:
        confirm = typer.confirm(f"Downgrade the database to {revision}?")
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    command.downgrade(_alembic_config(), revision)
    console.print(f"[green]✓[/green] Database downgraded to {revision}")
