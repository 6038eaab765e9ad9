# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/shopmapper/cli.py
# Commands Legend (run from the repository root):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to shopmapper (PowerShell: $env:FLASK_APP="shopmapper").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system seed [--password "password123"]
#   Idempotent: territories Habaraduwa and Galle, Lorries 1-5, users admin, viewer, rep1..rep5.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and lorry.
# - python -m flask users create --username admin2 --password "password123" --role ADMIN
#   Create a user (prompts if options are omitted).
#
# Maintenance:
# - python -m flask maintenance cleanup-security-events --retention-days 90
#   Delete security events older than the retention window.

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import IntegrityError

from .extensions import db
from .models import Lorry, Territory, User
from .permissions import ALL_ROLES, Role
from .services.auth_service import hash_password, PasswordValidationError
from .services import security_service


SEED_TERRITORIES = ("Habaraduwa", "Galle")

# (lorry name, territory name)
SEED_LORRIES = (
    ("Lorry 1", "Habaraduwa"),
    ("Lorry 2", "Habaraduwa"),
    ("Lorry 3", "Habaraduwa"),
    ("Lorry 4", "Galle"),
    ("Lorry 5", "Galle"),
)

# (username, role, lorry name)
SEED_USERS = (
    ("admin", Role.ADMIN, None),
    ("viewer", Role.VIEWER, None),
    ("rep1", Role.REP, "Lorry 1"),
    ("rep2", Role.REP, "Lorry 2"),
    ("rep3", Role.REP, "Lorry 3"),
    ("rep4", Role.REP, "Lorry 4"),
    ("rep5", Role.REP, "Lorry 5"),
)


def seed_reference_data(password: str) -> dict:
    """
    Create the default territories, lorries and users if missing.

    Existing users keep their password; a rep's lorry binding is reset to
    the seeded lorry. Returns counts of rows created.
    """
    created = {"territories": 0, "lorries": 0, "users": 0}

    territories = {}
    for name in SEED_TERRITORIES:
        territory = db.session.query(Territory).filter_by(name=name).first()
        if not territory:
            territory = Territory(name=name)
            db.session.add(territory)
            db.session.flush()
            created["territories"] += 1
        territories[name] = territory

    lorries = {}
    for name, territory_name in SEED_LORRIES:
        lorry = db.session.query(Lorry).filter_by(name=name).first()
        if not lorry:
            lorry = Lorry(name=name, territory_id=territories[territory_name].id)
            db.session.add(lorry)
            db.session.flush()
            created["lorries"] += 1
        else:
            lorry.territory_id = territories[territory_name].id
        lorries[name] = lorry

    password_hash = hash_password(password)
    for username, role, lorry_name in SEED_USERS:
        lorry_id = lorries[lorry_name].id if lorry_name else None
        user = db.session.query(User).filter_by(username=username).first()
        if not user:
            db.session.add(User(
                username=username,
                password_hash=password_hash,
                role=role,
                lorry_id=lorry_id,
            ))
            created["users"] += 1
        elif lorry_name:
            user.lorry_id = lorry_id

    db.session.commit()
    return created


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('seed')
@click.option('--password', default='password123', show_default=True, help='Password for newly created seed users')
@with_appcontext
def seed_cli(password):
    """
    Seed territories, lorries and the default accounts.

    SECURITY: Change seeded passwords immediately in production!
    """
    click.echo("START Seeding reference data...")
    try:
        created = seed_reference_data(password)
    except PasswordValidationError as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"PASS Seeding completed: {created['territories']} territories, "
        f"{created['lorries']} lorries, {created['users']} users created"
    )
    click.echo("Accounts: admin, viewer, rep1..rep5")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        raise click.ClickException("Refusing to reset without --yes")
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with role and lorry."""
    users = db.session.query(User).order_by(User.username).all()
    if not users:
        click.echo("No users found.")
        return

    for user in users:
        lorry = user.lorry.name if user.lorry else "-"
        click.echo(f"{user.id:>4}  {user.username:<20} {user.role:<7} {lorry}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ALL_ROLES), prompt=True)
@click.option('--lorry-id', type=int, default=None)
@with_appcontext
def create_user_cli(username, password, role, lorry_id):
    """Create a user from the command line (bypasses the session guard)."""
    if lorry_id is not None and role != Role.REP:
        raise click.ClickException("Only REP users can be assigned a lorry")
    if lorry_id is not None and db.session.get(Lorry, lorry_id) is None:
        raise click.ClickException(f"Lorry {lorry_id} not found")

    try:
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            lorry_id=lorry_id,
        )
        db.session.add(user)
        db.session.commit()
    except PasswordValidationError as exc:
        raise click.ClickException(str(exc))
    except IntegrityError:
        db.session.rollback()
        raise click.ClickException(f"Username {username!r} is already taken")

    click.echo(f"PASS Created user {user.username} (ID: {user.id}, role: {user.role})")


@click.group('maintenance')
def maintenance_group():
    """Housekeeping commands."""


@maintenance_group.command('cleanup-security-events')
@click.option('--retention-days', type=int, default=90, show_default=True)
@with_appcontext
def cleanup_security_events_cli(retention_days):
    """
    Cleanup old security events.

    Default retention: 90 days.
    """
    deleted = security_service.cleanup_security_events(retention_days=retention_days)
    click.echo(f"Deleted {deleted} security events older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
