"""Commands: cradle-access roles - Role maintenance."""

import asyncio

import typer
from rich.console import Console


console = Console()

app = typer.Typer(help="Role maintenance.", no_args_is_help=True)


@app.command()
def collapse(
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmation prompt"
    ),
) -> None:
    """Reduce users holding several roles to their highest-priority role.

    Priority follows the CRADLE_ROLE_PRIORITY setting (admin, parent,
    babysitter by default).
    """
    from cradle_access.commands import session_scope
    from cradle_access.config import settings
    from cradle_access.core.permissions.maintenance import collapse_to_primary_role

    if not force:
        confirm = typer.confirm(
            "Remove every role but the highest-priority one from multi-role users?"
        )
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    async def _collapse():
        async with session_scope() as session:
            return await collapse_to_primary_role(session, settings.role_priority)

    repaired = asyncio.run(_collapse())

    if not repaired:
        console.print("[green]✓[/green] No users hold more than one role.")
        return

    for user_id, role in repaired.items():
        console.print(f"  {user_id}: kept [cyan]{role}[/cyan]")
    console.print(f"\n[green]✓[/green] Collapsed roles for {len(repaired)} user(s)")
