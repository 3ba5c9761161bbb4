"""Commands: cradle-access permissions - Inspect and seed the catalog."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table


console = Console()

app = typer.Typer(help="Inspect and seed the permission catalog.", no_args_is_help=True)


@app.command(name="list")
def list_permissions(
    group: str | None = typer.Option(
        None, "--group", "-g", help="Show only permissions of this group"
    ),
) -> None:
    """List registered permissions and the roles that hold them."""
    from cradle_access.commands import session_scope
    from cradle_access.core.permissions.registry import PermissionRegistry
    from cradle_access.core.permissions.roles import RoleStore

    async def _load():
        async with session_scope() as session:
            registry = PermissionRegistry(session)
            if group:
                permissions = await registry.list_by_group(group)
            else:
                permissions = await registry.list_all()
            roles = await RoleStore(session, registry=registry).list_roles()
            holders = {
                p.slug: [r.slug for r in roles if r.has_permission(p.slug)]
                for p in permissions
            }
            return permissions, holders

    permissions, holders = asyncio.run(_load())

    if not permissions:
        console.print("[yellow]No permissions registered.[/yellow]")
        console.print("Run [bold]cradle-access permissions seed[/bold] to create the defaults.")
        return

    table = Table(title="Permissions", show_header=True)
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Group", style="green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Roles")
    table.add_column("System", no_wrap=True)

    for p in permissions:
        table.add_row(
            p.slug,
            p.group or "",
            p.description or "",
            ", ".join(holders[p.slug]),
            "[dim]yes[/dim]" if p.is_system else "",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def seed() -> None:
    """Create the default permissions, roles and role grants.

    Safe to run repeatedly: only missing entries are created.
    """
    from cradle_access.commands import session_scope
    from cradle_access.core.permissions.catalog import seed_defaults

    async def _seed() -> dict[str, int]:
        async with session_scope() as session:
            return await seed_defaults(session)

    counts = asyncio.run(_seed())

    console.print("\n[bold cyan]Seeded default access control[/bold cyan]\n")
    console.print(f"  Permissions created: {counts['permissions']}")
    console.print(f"  Roles created:       {counts['roles']}")
    console.print(f"  Grants added:        {counts['grants']}")
    console.print("\n[green]✓[/green] Done")
