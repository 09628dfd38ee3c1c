import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from tortoise import Tortoise
from tortoise.exceptions import IntegrityError

from ..core.errors import StockroomError
from ..core.logging_config import configure_logging
from ..features.auth.models import User as AuthUser
from ..features.auth.security import get_password_hash
from ..features.auth.service import create_user, get_user_by_email
from ..features.reports.filters import normalize_export_request
from ..features.reports.service import export_report
from ..main import TORTOISE_ORM_CONFIG

logger = logging.getLogger(__name__)

app = typer.Typer(name="stockroom-cli", help="CLI for managing Stockroom data.")


# Shared async context manager for database connection
class DBConnection:
    async def __aenter__(self):
        await Tortoise.init(config=TORTOISE_ORM_CONFIG)
        await Tortoise.generate_schemas(safe=True)  # Generate schema if it doesn't exist
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level.")):
    configure_logging("DEBUG" if verbose else "WARNING")


# User management commands
user_app = typer.Typer(name="users", help="Manage staff accounts.")
app.add_typer(user_app)


@user_app.command("create-admin")
def create_admin_user_command(
    email: str = typer.Option(..., prompt=True, help="Email for the new admin."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new admin.")
):
    """Creates a new admin user."""
    asyncio.run(_create_admin_user(email, password))


async def _create_admin_user(email: str, password: str):
    async with DBConnection():
        typer.echo(f"Attempting to create admin user: {email}...")
        if await get_user_by_email(email):
            typer.secho(f"Error: User with email '{email}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        try:
            admin_user = await create_user(email, get_password_hash(password), role="admin")
        except IntegrityError as e:
            typer.secho(f"Error creating admin user: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(f"Admin user '{admin_user.email}' created successfully with ID: {admin_user.public_id}", fg=typer.colors.GREEN)


@user_app.command("disable-user")
def disable_user_account_command(
    email: str = typer.Argument(..., help="The email of the user to disable.")
):
    """Disables an existing user's account."""
    asyncio.run(_disable_user_account(email))


async def _disable_user_account(email: str):
    async with DBConnection():
        user = await get_user_by_email(email)
        if not user:
            typer.secho(f"Error: User with email '{email}' not found.", fg=typer.colors.RED)
            raise typer.Exit(code=1)

        if not user.is_active:
            typer.secho(f"User '{email}' is already inactive.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=0)

        user.is_active = False
        await user.save(update_fields=["is_active"])
        typer.secho(f"User account '{email}' has been successfully disabled.", fg=typer.colors.GREEN)


# Report commands
report_app = typer.Typer(name="reports", help="Generate report exports.")
app.add_typer(report_app)


@report_app.command("export")
def export_report_command(
    type: str = typer.Option(..., "--type", help="sales, items or ledger"),
    format: str = typer.Option("excel", "--format", help="excel or pdf"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Where to write the file. Defaults to <type>-report.<ext>."),
    customer_id: Optional[str] = typer.Option(None, "--customer-id", help="Required for the ledger."),
    start_date: Optional[str] = typer.Option(None, "--start-date", help="YYYY-MM-DD, inclusive"),
    end_date: Optional[str] = typer.Option(None, "--end-date", help="YYYY-MM-DD, inclusive"),
):
    """Renders a report export to a file."""
    asyncio.run(_export_report(type, format, output, customer_id, start_date, end_date))


async def _export_report(type, format, output, customer_id, start_date, end_date):
    async with DBConnection():
        try:
            request = normalize_export_request(type, format, customer_id, start_date, end_date)
            result = await export_report(request)
        except StockroomError as e:
            typer.secho(f"Error: {e.detail}", fg=typer.colors.RED)
            raise typer.Exit(code=1)

    path = output or Path(result.filename)
    path.write_bytes(result.content)
    typer.secho(f"Wrote {len(result.content)} bytes to {path}", fg=typer.colors.GREEN)


@app.command("test-db-connection")
def test_db_connection_command_sync():
    """Tests the database connection and counts user accounts."""
    asyncio.run(test_db_connection_command())


async def test_db_connection_command():
    async with DBConnection():
        typer.echo("Successfully connected to the database.")
        user_count = await AuthUser.all().count()
        typer.echo(f"Found {user_count} user(s) in the database.")
        if user_count > 0:
            first_user = await AuthUser.first()
            typer.echo(f"First user: {first_user}")


if __name__ == "__main__":
    app()
