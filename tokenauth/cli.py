"""Command line interface for the token auth service."""

import sys

import click
from alembic import command
from sqlalchemy.exc import SQLAlchemyError

from tokenauth.infrastructure.database.init_db import (
    DEFAULT_SEED_USERS,
    get_alembic_config,
    run_alembic_migrations,
    seed_users,
)
from tokenauth.infrastructure.database.repositories.session_repository import SqlSessionRepository
from tokenauth.infrastructure.database.session import (
    close_db_connections,
    create_tables,
    get_session_maker,
    ping_database,
)
from tokenauth.infrastructure.tasks.maintenance_tasks import purge_expired_sessions
from tokenauth.utils.async_helpers import run_async
from tokenauth.utils.logging import setup_logging


async def _with_cleanup(coro):
    try:
        return await coro
    finally:
        await close_db_connections()


@click.group()
def cli():
    """Token auth service CLI."""
    setup_logging()


@cli.command()
def init_db():
    """Create missing tables directly from the models (no migrations)."""
    click.echo("Creating database tables...")
    run_async(_with_cleanup(create_tables()))
    click.echo("Database initialized successfully!")


@cli.command()
def migrate():
    """Run database migrations to the latest version."""
    click.echo("Running database migrations...")
    run_alembic_migrations()
    click.echo("Migrations completed successfully!")


@cli.command()
@click.option('--message', '-m', required=True, help='Migration message')
def create_migration(message: str):
    """Create a new migration file."""
    click.echo(f"Creating migration: {message}")
    command.revision(get_alembic_config(), message=message, autogenerate=True)
    click.echo("Migration created successfully!")


@cli.command()
def current():
    """Show current migration version."""
    command.current(get_alembic_config(), verbose=True)


@cli.command()
def history():
    """Show migration history."""
    command.history(get_alembic_config(), verbose=True)


@cli.command()
@click.option('--revision', '-r', default="-1", help='Revision to downgrade to')
@click.confirmation_option(prompt="Are you sure you want to downgrade the database?")
def downgrade(revision: str):
    """Downgrade database to a previous migration."""
    click.echo(f"Downgrading to revision: {revision}")
    command.downgrade(get_alembic_config(), revision)
    click.echo("Downgrade completed successfully!")


@cli.command()
def seed():
    """Create the demo admin and user accounts if they are missing."""
    created = run_async(_with_cleanup(seed_users(DEFAULT_SEED_USERS)))
    for email in created:
        click.echo(f"Created {email}")
    click.echo(f"Seeding finished: {len(created)} new account(s)")


@cli.command()
def cleanup_sessions():
    """Delete expired refresh sessions."""
    removed = run_async(purge_expired_sessions())
    click.echo(f"Removed {removed} expired session(s)")


@cli.command()
@click.option('--user-id', '-u', required=True, type=int, help='User whose sessions to revoke')
def revoke_sessions(user_id: int):
    """Revoke every active session of a user."""

    async def revoke() -> int:
        async with get_session_maker()() as session:
            count = await SqlSessionRepository(session).revoke_user_sessions(user_id)
            await session.commit()
            return count

    count = run_async(_with_cleanup(revoke()))
    click.echo(f"Revoked {count} session(s) for user {user_id}")


@cli.command()
def check_db():
    """Check database connectivity."""
    click.echo("Checking database health...")
    try:
        run_async(_with_cleanup(ping_database()))
    except (SQLAlchemyError, OSError) as e:
        click.echo(f"✗ Database connection failed: {e}")
        sys.exit(1)
    click.echo("✓ Database connection is healthy")


if __name__ == "__main__":
    cli()
