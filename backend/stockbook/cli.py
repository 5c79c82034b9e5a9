# Overview: Flask CLI command groups for bootstrap and user inspection.

# backend/stockbook/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: python -m flask --app stockbook <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask --app stockbook system init
#   Idempotent bootstrap: creates the storage table and writes seed data for
#   every collection that is not stored yet.
# - python -m flask --app stockbook system reset --yes
#   DEV/TEST only: delete every stored collection and the session, then reseed.
#
# User inspection/bootstrap:
# - python -m flask --app stockbook users list
#   List all users with role and active status.
# - python -m flask --app stockbook users create --username jane --password secret --role MEMBER
#   Create a user (prompts if options are omitted).

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db, store
from .models import UserRole
from .seeds import DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD
from .services import auth_service
from .storage import BACKEND_SQL, COLLECTIONS
from .validation import ValidationError


def _ensure_tables() -> None:
    if current_app.config.get("STORAGE_BACKEND") == BACKEND_SQL:
        db.create_all()


def _load_all_collections() -> dict[str, int]:
    """Touch every collection so missing ones are written from seed data."""
    return {name: store.repository(name).count() for name in COLLECTIONS}


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize storage and seed data.

    Seeds (only for collections not stored yet):
    - User: admin / password (SUPERADMIN)
    - Products: Wireless Mouse, Mechanical Keyboard, USB-C Monitor
    - Categories: Electronics, Monitors
    - Brands: Logitech, Dell

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing Stockbook storage...")
    _ensure_tables()

    for name, count in _load_all_collections().items():
        click.echo(f"PASS {name:<16} {count} record(s)")

    click.echo("\nDefault login:")
    click.echo(f"   {DEFAULT_ADMIN_USERNAME} / {DEFAULT_ADMIN_PASSWORD}")


@system_group.command('reset')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_storage(yes):
    """
    DANGER: Delete every stored collection and reseed.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    _ensure_tables()
    click.echo("DELETE  Clearing stored collections...")
    store.wipe()
    _load_all_collections()
    click.echo("PASS Storage reset to seed data.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(UserRole.ALL)), default=UserRole.MEMBER, show_default=True)
@with_appcontext
def create_user_cli(username, password, role):
    """Create a user with the default flags for the role."""
    _ensure_tables()
    try:
        user = auth_service.register_user(username, password, role)
    except ValidationError as e:
        raise click.ClickException(str(e))

    if user is None:
        raise click.ClickException(f"Username {username!r} already exists")

    click.echo(f"PASS Created {user.role} user {user.username} (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    _ensure_tables()
    users = store.users.all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 100)
    click.echo(f"{'ID':<34} {'Username':<20} {'Role':<12} {'Active':<8} {'Permissions'}")
    click.echo("=" * 100)

    for user in users:
        flags = ", ".join(k for k, v in user.permissions.to_dict().items() if v) or "none"
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<34} {user.username:<20} {user.role:<12} {active_str:<8} {flags}")

    click.echo("=" * 100 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
