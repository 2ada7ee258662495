"""
Tablefront CLI.

Command-line interface for common operations.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="tablefront",
    help="Tablefront QR ordering CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option(None, help="Bind address (default from settings)"),
    port: int = typer.Option(None, help="Port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Run the API and WebSocket gateway."""
    import uvicorn
    from shared.config.settings import settings

    uvicorn.run(
        "rest_api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create all tables (no-op for tables that exist)."""
    from shared.infrastructure.db import engine
    from rest_api.models import Base

    Base.metadata.create_all(bind=engine)
    console.print(f"[green]✓ Tables created on {engine.url.render_as_string(hide_password=True)}[/green]")


@app.command()
def seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed the database with the demo tenant, restaurant, staff and menu."""
    from shared.config.settings import settings
    from shared.infrastructure.db import SessionLocal, engine
    from rest_api.models import Base
    from rest_api.seed import DEMO_USERS, seed as seed_demo

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        tenant = seed_demo(db)
        tenant_id = tenant.id
        restaurant_ids = [r.id for r in tenant.restaurants]

    table = Table(title="Demo credentials")
    table.add_column("Email", style="cyan")
    table.add_column("Role", style="green")
    table.add_column("Password", style="yellow")
    for email, _, role, password in DEMO_USERS:
        table.add_row(email, role, password)
    console.print(table)
    console.print(f"Tenant ID: {tenant_id}  Restaurant IDs: {restaurant_ids}")


@app.command()
def table_links(
    tenant_id: int = typer.Argument(..., help="Tenant ID"),
    restaurant_id: int = typer.Argument(..., help="Restaurant ID"),
):
    """Print the QR target URL of every table in a restaurant."""
    from shared.infrastructure.db import SessionLocal
    from rest_api.repositories import TenantScope
    from rest_api.services.domain import SessionService, VenueService

    scope = TenantScope(tenant_id=tenant_id, restaurant_id=restaurant_id)
    with SessionLocal() as db:
        tables = VenueService(db).list_tables(scope)
        if not tables:
            console.print("[yellow]No tables found[/yellow]")
            raise typer.Exit(1)

        out = Table(title=f"Table links (restaurant {restaurant_id})")
        out.add_column("Code", style="cyan")
        out.add_column("Name")
        out.add_column("URL", style="green")
        sessions = SessionService(db)
        for t in tables:
            _, url = sessions.table_link(scope, t.id)
            out.add_row(t.code, t.name, url)
    console.print(out)


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    url: str = typer.Option("http://localhost:3001", help="Base URL of the running server"),
):
    """Check the running server's health endpoints."""
    import time
    import httpx

    table = Table(title="Service Health")
    table.add_column("Endpoint", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    with httpx.Client(timeout=5.0) as client:
        for path in ("/api/health", "/api/health/detailed", "/ws/health"):
            start = time.time()
            try:
                response = client.get(url.rstrip("/") + path)
            except httpx.HTTPError as e:
                table.add_row(path, f"✗ {type(e).__name__}", "-")
                continue
            elapsed = (time.time() - start) * 1000
            if response.status_code == 200:
                table.add_row(path, "✓ Healthy", f"{elapsed:.0f}ms")
            else:
                table.add_row(path, f"✗ Status {response.status_code}", f"{elapsed:.0f}ms")

    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Tablefront Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "1.0.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
