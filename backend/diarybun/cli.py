# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/diarybun/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to diarybun (PowerShell: $env:FLASK_APP="diarybun").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with their permissions.
# - python -m flask users create --name Admin --email admin@diarybun.local --password "secret" --permission ADMIN
#   Create a user (prompts if options are omitted).
#
# Permission inspection/repair:
# - python -m flask perms list [--category CATALOG]
#   List permission definitions.
# - python -m flask perms grant admin@diarybun.local ITEMDELETE
#   Grant a permission to a user.

import click
from flask.cli import with_appcontext

from .extensions import db
from .errors import ApiError
from .models import User
from .permissions import PERMISSION_DEFINITIONS, get_all_permission_codes, get_permissions_by_category
from .services import auth_service, permission_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their permissions."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<20} {'Email':<35} {'Permissions'}")
    click.echo("="*90)

    for user in users:
        click.echo(f"{user.id:<5} {user.name:<20} {user.email:<35} {', '.join(user.permissions)}")

    click.echo("="*90 + "\n")


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name (at least 3 characters)')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option(
    '--permission', 'permissions', multiple=True,
    type=click.Choice(get_all_permission_codes()),
    help='Extra permission (repeatable); USER is always granted',
)
@with_appcontext
def create_user_command(name, email, password, permissions):
    """Create a user, optionally with extra permissions."""
    try:
        user, _token = auth_service.signup(name, email, password)
        if permissions:
            permission_service.set_permissions(user, list(user.permissions) + list(permissions))
            db.session.commit()
    except ApiError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created user {user.email} (ID: {user.id}) with {', '.join(user.permissions)}")


@click.group('perms')
def perms_group():
    """Permission inspection and repair commands."""


@perms_group.command('list')
@click.option('--category', help='Filter by category (CATALOG, USERS, SYSTEM)')
def list_permissions(category):
    """List permission definitions."""
    definitions = get_permissions_by_category(category) if category else PERMISSION_DEFINITIONS
    for code, name, description, perm_category in definitions:
        click.echo(f"{code:<18} {perm_category:<10} {name}: {description}")


@perms_group.command('grant')
@click.argument('email')
@click.argument('permission', type=click.Choice(get_all_permission_codes()))
@with_appcontext
def grant_permission(email, permission):
    """Grant a permission to a user."""
    user = db.session.query(User).filter_by(email=auth_service.normalize_email(email)).first()
    if not user:
        raise click.ClickException(f"User {email} not found")

    if permission in user.permissions:
        click.echo(f"SKIP {user.email} already has {permission}")
        return

    permission_service.set_permissions(user, list(user.permissions) + [permission])
    db.session.commit()
    click.echo(f"PASS Granted {permission} to {user.email}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
