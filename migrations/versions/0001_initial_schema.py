"""Initial landing page builder schema

Revision ID: lpb_initial_001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'lpb_initial_001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    bind = op.get_bind()
    dialect = bind.dialect.name
    json_type = postgresql.JSONB(astext_type=sa.Text()) if dialect == 'postgresql' else sa.JSON()

    op.create_table(
        'user',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('role', sa.String(length=11), nullable=False, server_default='USER'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('needs_password_setup', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'refresh_token',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('token', sa.String(length=512), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_refresh_token_token', 'refresh_token', ['token'], unique=True)
    op.create_index('ix_refresh_token_user_id', 'refresh_token', ['user_id'])

    op.create_table(
        'user_invite',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('role', sa.String(length=11), nullable=False, server_default='USER'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('invited_by_id', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['invited_by_id'], ['user.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_user_invite_email', 'user_invite', ['email'])
    op.create_index('ix_user_invite_token', 'user_invite', ['token'], unique=True)
    op.create_index('ix_user_invite_invited_by_id', 'user_invite', ['invited_by_id'])
    op.create_index('ix_user_invite_email_accepted', 'user_invite', ['email', 'accepted_at'])

    op.create_table(
        'template',
        sa.Column('id', sa.String(length=64), nullable=False),
        *_timestamps(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('thumbnail', sa.String(length=1024), nullable=True),
        sa.Column('category', sa.String(length=64), nullable=False, server_default='general'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sections', json_type, nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_template_category', 'template', ['category'])
    op.create_index('ix_template_user_id', 'template', ['user_id'])
    op.create_index('ix_template_public_category', 'template', ['is_public', 'category'])

    op.create_table(
        'page',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('template_id', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='DRAFT'),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('seo_title', sa.String(length=255), nullable=True),
        sa.Column('seo_description', sa.Text(), nullable=True),
        sa.Column('og_image', sa.String(length=1024), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'slug', name='uq_page_user_slug'),
    )
    op.create_index('ix_page_user_id', 'page', ['user_id'])
    op.create_index('ix_page_published_slug', 'page', ['is_published', 'slug'])

    op.create_table(
        'section',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('page_id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('seq', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('template_section_id', sa.String(length=64), nullable=True),
        sa.Column('fields', json_type, nullable=False),
        sa.Column('styles', json_type, nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['page_id'], ['page.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_section_page_id', 'section', ['page_id'])
    op.create_index('ix_section_page_order', 'section', ['page_id', 'order'])

    op.create_table(
        'customization',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('page_id', sa.String(length=36), nullable=False),
        sa.Column('template_id', sa.String(length=64), nullable=True),
        sa.Column('template_name', sa.String(length=255), nullable=True),
        sa.Column('sections', json_type, nullable=False),
        sa.Column('status', sa.String(length=8), nullable=False, server_default='ACTIVE'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['page_id'], ['page.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('page_id'),
    )

    op.create_table(
        'customization_version',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('customization_id', sa.String(length=36), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('changes', json_type, nullable=False),
        sa.Column('snapshot', json_type, nullable=True),
        sa.Column('created_by_id', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['customization_id'], ['customization.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by_id'], ['user.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('customization_id', 'version', name='uq_customization_version'),
    )
    op.create_index('ix_customization_version_customization_id', 'customization_version', ['customization_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('action', sa.String(length=128), nullable=False),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('meta', json_type, nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_audit_log_user_id', 'audit_log', ['user_id'])
    op.create_index('ix_audit_log_entity', 'audit_log', ['entity_type', 'entity_id'])

    op.create_table(
        'component_spec',
        sa.Column('id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.Column('component_name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False, server_default='section'),
        sa.Column('source', sa.String(length=16), nullable=False, server_default='mock'),
        sa.Column('spec', json_type, nullable=False),
        sa.Column('created_by_id', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['created_by_id'], ['user.id'], ondelete='SET NULL'),
    )


def downgrade():
    op.drop_table('component_spec')
    op.drop_index('ix_audit_log_entity', table_name='audit_log')
    op.drop_index('ix_audit_log_user_id', table_name='audit_log')
    op.drop_table('audit_log')
    op.drop_index('ix_customization_version_customization_id', table_name='customization_version')
    op.drop_table('customization_version')
    op.drop_table('customization')
    op.drop_index('ix_section_page_order', table_name='section')
    op.drop_index('ix_section_page_id', table_name='section')
    op.drop_table('section')
    op.drop_index('ix_page_published_slug', table_name='page')
    op.drop_index('ix_page_user_id', table_name='page')
    op.drop_table('page')
    op.drop_index('ix_template_public_category', table_name='template')
    op.drop_index('ix_template_user_id', table_name='template')
    op.drop_index('ix_template_category', table_name='template')
    op.drop_table('template')
    op.drop_index('ix_user_invite_email_accepted', table_name='user_invite')
    op.drop_index('ix_user_invite_invited_by_id', table_name='user_invite')
    op.drop_index('ix_user_invite_token', table_name='user_invite')
    op.drop_index('ix_user_invite_email', table_name='user_invite')
    op.drop_table('user_invite')
    op.drop_index('ix_refresh_token_user_id', table_name='refresh_token')
    op.drop_index('ix_refresh_token_token', table_name='refresh_token')
    op.drop_table('refresh_token')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
