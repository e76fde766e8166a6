"""``flask`` sub-commands for database housekeeping."""

from __future__ import annotations

import click
from flask import Flask
from flask.cli import with_appcontext

from .errors import NotFoundError
from .services.maintenance import run_sweep
from .services.seed import clear_database, seed_database
from .services.users import bootstrap_admin


@click.command("seed")
@with_appcontext
def seed_command() -> None:
    """Insert demo users, hackathons, teams, blogs and invitations."""
    counts = seed_database()
    if not counts:
        click.echo("Database already contains data. Skipping seeding.")
        return
    click.echo(", ".join(f"{count} {name}" for name, count in counts.items()) + " created")


@click.command("clear-db")
@with_appcontext
@click.confirmation_option(prompt="This drops every table. Continue?")
def clear_db_command() -> None:
    clear_database()
    click.echo("All tables dropped and recreated")


@click.command("bootstrap-admin")
@with_appcontext
@click.option("--email", default=None, help="Promote this account instead of the earliest one.")
def bootstrap_admin_command(email: str | None) -> None:
    """Promote a user to admin when no admin exists yet."""
    try:
        user = bootstrap_admin(email)
    except NotFoundError as exc:
        raise click.ClickException(exc.message) from exc
    if user is None:
        click.echo("No user promoted (an admin already exists or there are no users)")
    else:
        click.echo(f"{user.email} is now an admin")


@click.command("sweep")
@with_appcontext
def sweep_command() -> None:
    """Delete expired invitations and refresh hackathon statuses."""
    result = run_sweep()
    click.echo(
        f"{result['expiredInvitations']} expired invitations removed, "
        f"{result['updatedHackathons']} hackathon statuses updated"
    )


def register_commands(app: Flask) -> None:
    for command in (seed_command, clear_db_command, bootstrap_admin_command, sweep_command):
        app.cli.add_command(command)
