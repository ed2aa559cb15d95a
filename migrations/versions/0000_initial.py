"""Initial schema

Revision ID: 0000_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0000_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('email', sa.String(length=255)),
        sa.Column('display_name', sa.String(length=150)),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False, server_default='author'),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=False)
    op.create_index('ix_users_email', 'users', ['email'], unique=False)

    op.create_table(
        'seoog_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('setting_key', sa.String(length=191), nullable=False),
        sa.Column('setting_value', sa.Text()),
        sa.UniqueConstraint('setting_key', name='uq_seoog_settings_setting_key'),
    )

    op.create_table(
        'content_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.Text()),
        sa.Column('content_type', sa.String(length=40), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('featured_image', sa.String(length=600)),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('content_type', 'slug', name='uq_content_items_type_slug'),
    )
    op.create_index('ix_content_items_slug', 'content_items', ['slug'], unique=False)
    op.create_index('ix_content_items_content_type', 'content_items', ['content_type'], unique=False)
    op.create_index('ix_content_items_status', 'content_items', ['status'], unique=False)
    op.create_index('ix_content_items_author_id', 'content_items', ['author_id'], unique=False)
    op.create_index('ix_content_items_updated_at', 'content_items', ['updated_at'], unique=False)

    op.create_table(
        'content_seo_overrides',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('content_id', sa.Integer(), sa.ForeignKey('content_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('og_title', sa.String(length=300)),
        sa.Column('og_description', sa.Text()),
        sa.Column('og_image', sa.String(length=600)),
        sa.Column('og_type', sa.String(length=20)),
        sa.Column('seo_description', sa.Text()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('content_id', name='uq_content_seo_overrides_content_id'),
    )


def downgrade():
    op.drop_table('content_seo_overrides')

    op.drop_index('ix_content_items_updated_at', table_name='content_items')
    op.drop_index('ix_content_items_author_id', table_name='content_items')
    op.drop_index('ix_content_items_status', table_name='content_items')
    op.drop_index('ix_content_items_content_type', table_name='content_items')
    op.drop_index('ix_content_items_slug', table_name='content_items')
    op.drop_table('content_items')

    op.drop_table('seoog_settings')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
