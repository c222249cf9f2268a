# Overview: Flask CLI command groups for bootstrap and user management.

# backend/bakery/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply Alembic migrations (Flask-Migrate).
#
# System bootstrap/repair:
# - python -m flask system init --email admin@bakery.local --password "admin123"
#   Create tables if missing, seed sale codes and the first ADMIN user (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --name "Ana" --email ana@bakery.local --password "secret1" --role SELLER
#   Create a user (prompts if options are omitted).

import click
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .models import User
from .permissions import ALL_ROLES, ROLE_ADMIN, ROLE_DESCRIPTIONS
from .services.auth_service import create_user
from .services.document_service import seed_sequences


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--name', default='Administrator', show_default=True, help='Admin display name')
@click.option('--email', default='admin@bakery.local', show_default=True, help='Admin email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
@with_appcontext
def init_system(name, email, password):
    """
    Create all tables, seed document sequences and the first ADMIN account.

    Safe to run repeatedly: an existing admin with the same email is kept.
    """
    click.echo("START Initializing bakery POS...")
    db.create_all()
    click.echo("PASS Tables ready")
    for document_type in seed_sequences():
        click.echo(f"PASS Seeded {document_type} sequence")

    existing = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if existing:
        click.echo(f"PASS Using existing user: {existing.email} (ID: {existing.id}, role: {existing.role})")
        return

    try:
        user = create_user(name=name, email=email, password=password, role=ROLE_ADMIN)
    except ServiceError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created admin: {user.email} (ID: {user.id})")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ALL_ROLES)), prompt=True,
              help='; '.join(f"{r}: {d}" for r, d in ROLE_DESCRIPTIONS.items()))
@click.option('--phone', default=None, help='Phone number')
@with_appcontext
def create_user_cli(name, email, password, role, phone):
    try:
        user = create_user(name=name, email=email, password=password, role=role, phone=phone)
    except ServiceError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user {user.email} (ID: {user.id}, role: {user.role})")


@users_group.command('list')
@with_appcontext
def list_users():
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.email:<32} {user.role:<11} {status}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
