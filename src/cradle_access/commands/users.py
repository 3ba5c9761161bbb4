"""Commands: cradle-access users - Inspect user access."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table


console = Console()

app = typer.Typer(help="Inspect user access.", no_args_is_help=True)

# Permissions reported by the monitoring checklist
MONITORING_CHECKLIST = [
    "monitoring.view",
    "device.monitor",
    "device.health",
    "monitoring.control",
    "monitoring.alerts",
]


@app.command()
def check(
    email: str = typer.Argument(..., help="Email of the user to check"),
) -> None:
    """Show a user's roles, effective permissions and device access."""
    from sqlalchemy import select

    from cradle_access.commands import session_scope
    from cradle_access.core.permissions.models import Permission
    from cradle_access.core.permissions.resolver import UserGrantResolver
    from cradle_access.modules.devices.ledger import DeviceRelationshipLedger
    from cradle_access.modules.users.models import User

    async def _load():
        async with session_scope() as session:
            user = (
                await session.execute(select(User).where(User.email == email))
            ).scalar_one_or_none()
            if user is None:
                return None

            resolver = UserGrantResolver(session)
            slugs = await resolver.effective_permissions(user)
            permissions = (
                await session.execute(
                    select(Permission)
                    .where(Permission.slug.in_(slugs))
                    .order_by(Permission.position)
                )
            ).scalars().all()
            checklist = {slug: slug in slugs for slug in MONITORING_CHECKLIST}
            links = await DeviceRelationshipLedger(session).relationships_for_user(user)
            return user, permissions, checklist, links

    loaded = asyncio.run(_load())
    if loaded is None:
        console.print(f"[red]Error:[/red] User with email {email} not found.")
        raise typer.Exit(1)

    user, permissions, checklist, links = loaded

    info = Table(title="User", show_header=True)
    info.add_column("Name")
    info.add_column("Email", style="cyan")
    info.add_column("Status")
    info.add_row(user.full_name, user.email, user.status)
    console.print()
    console.print(info)

    roles = Table(title="Roles", show_header=True)
    roles.add_column("Name")
    roles.add_column("Slug", style="cyan")
    for role in user.roles:
        roles.add_row(role.name, role.slug)
    console.print(roles)

    granted = Table(title="Effective Permissions", show_header=True)
    granted.add_column("Name")
    granted.add_column("Slug", style="cyan", no_wrap=True)
    granted.add_column("Description")
    for p in permissions:
        granted.add_row(p.name, p.slug, p.description or "")
    console.print(granted)

    console.print("\n[bold]Monitoring Permissions Check:[/bold]")
    for slug, held in checklist.items():
        mark = "[green]✓[/green]" if held else "[red]✗[/red]"
        console.print(f"  {slug}: {mark}")

    console.print("\n[bold]Device Access:[/bold]")
    if not links:
        console.print("[yellow]No devices assigned to this user.[/yellow]")
        return

    devices = Table(show_header=True)
    devices.add_column("ID", no_wrap=True)
    devices.add_column("Name", no_wrap=True)
    devices.add_column("Relationship", style="green", no_wrap=True)
    devices.add_column("Permissions")
    for link in links:
        devices.add_row(
            str(link.device_id),
            link.device.name,
            link.relationship_type,
            ", ".join(link.permissions),
        )
    console.print(devices)
