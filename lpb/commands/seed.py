"""Data seeding CLI commands."""

import os

import click
from flask.cli import with_appcontext

from lpb.extensions import db
from lpb.models import Role, Template, User
from lpb.services.auth import normalize_email
from lpb.services.catalog import TemplateCatalog


@click.group('seed')
def seed_commands():
    """Data seeding commands."""
    pass


def upsert_default_templates(catalog: TemplateCatalog | None = None) -> tuple[int, int]:
    """Insert or refresh the built-in templates as system rows (no owner)."""
    created = updated = 0
    for data in (catalog or TemplateCatalog()).all():
        template = db.session.get(Template, data['id'])
        if template is None:
            template = Template(id=data['id'])
            db.session.add(template)
            created += 1
        else:
            updated += 1
        template.name = data['name']
        template.category = data['category']
        template.description = data.get('description')
        template.thumbnail = data.get('thumbnail')
        template.is_public = bool(data.get('isPublic', True))
        template.sections = data['sections']
        template.user_id = None
    db.session.commit()
    return created, updated


@seed_commands.command('defaults')
@click.option('--admin-email', default=lambda: os.getenv('SUPER_ADMIN_EMAIL', 'admin@example.com'),
              show_default='SUPER_ADMIN_EMAIL or admin@example.com', help='SUPER_ADMIN email')
@click.option('--admin-password', default=lambda: os.getenv('SUPER_ADMIN_PASSWORD', 'ChangeMe123!'),
              show_default='SUPER_ADMIN_PASSWORD', help='SUPER_ADMIN password (only used on create)')
@with_appcontext
def seed_defaults(admin_email, admin_password):
    """Seed the SUPER_ADMIN account and the built-in templates.

    Safe to run repeatedly: the admin is created once and templates are
    refreshed in place.

    Example:
        flask seed defaults --admin-email owner@example.com
    """
    email = normalize_email(admin_email)
    admin = db.session.query(User).filter_by(email=email).first()
    if admin is None:
        admin = User(email=email, name='Super Admin', role=Role.SUPER_ADMIN, active=True)
        admin.set_password(admin_password)
        db.session.add(admin)
        click.echo(click.style(f'Created SUPER_ADMIN {email}', fg='green'))
    else:
        admin.role = Role.SUPER_ADMIN
        admin.active = True
        click.echo(f'SUPER_ADMIN {email} already exists')
    db.session.commit()

    created, updated = upsert_default_templates()
    click.echo(click.style(f'Templates: {created} created, {updated} updated', fg='green'))
