"""User management CLI commands."""

import click
from flask.cli import with_appcontext

from lpb.extensions import db
from lpb.models import Role, User
from lpb.services.auth import normalize_email


def _get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter_by(email=normalize_email(email)).first()


@click.group('user')
def user_commands():
    """User management commands."""
    pass


@user_commands.command('create')
@click.option('--email', required=True, help='User email')
@click.option('--password', required=True, help='User password')
@click.option('--name', default=None, help='Display name')
@click.option('--role', type=click.Choice([r.value for r in Role]), default=Role.ADMIN.value, show_default=True)
@with_appcontext
def create_user(email, password, name, role):
    """Create a user with a password."""
    if len(password) < 8:
        click.echo(click.style('Error: Password must be at least 8 characters', fg='red'))
        return

    if _get_user_by_email(email):
        click.echo(click.style(f'Error: User with email "{email}" already exists', fg='red'))
        return

    user = User(email=normalize_email(email), name=name, role=Role(role), active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    click.echo(click.style('User created successfully!', fg='green'))
    click.echo(f'  Email: {user.email}')
    click.echo(f'  Role: {role}')


@user_commands.command('set-password')
@click.option('--email', required=True, help='User email')
@click.option('--password', required=True, help='New password')
@with_appcontext
def set_password(email, password):
    """Set or reset a user's password."""
    user = _get_user_by_email(email)
    if not user:
        click.echo(click.style(f'Error: No user {email} found', fg='red'))
        return

    user.set_password(password)
    user.needs_password_setup = False
    db.session.commit()
    click.echo(click.style('Password updated.', fg='green'))


@user_commands.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.created_at).all()
    if not users:
        click.echo('No users found.')
        return

    for user in users:
        status = 'active' if user.active else 'inactive'
        click.echo(f'{user.email:<40} {user.role.value:<12} {status}')
