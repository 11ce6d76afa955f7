"""Add users and passwords

Revision ID: 0002_add_users
Revises: 0001_initial
Create Date: 2026-10-02

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0002_add_users'
down_revision = '0001_initial'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_uid', sa.String(42), unique=True, nullable=False),
        sa.Column('user_name', sa.String(64), nullable=False, server_default=''),
        sa.Column('full_name', sa.String(128), nullable=False, server_default=''),
        sa.Column('primary_email', sa.String(255), nullable=False, server_default=''),
        sa.Column('user_disabled', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('role_admin', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('role_child', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('role_family', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('role_friend', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('role_guest', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('login_attempts', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_user_uid', 'users', ['user_uid'])
    op.create_index('ix_users_user_name', 'users', ['user_name'])
    op.create_index('ix_users_primary_email', 'users', ['primary_email'])

    # bcrypt hashes keyed by user_uid
    op.create_table(
        'passwords',
        sa.Column('uid', sa.String(42), primary_key=True),
        sa.Column('hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )


def downgrade():
    op.drop_table('passwords')
    op.drop_index('ix_users_primary_email', 'users')
    op.drop_index('ix_users_user_name', 'users')
    op.drop_index('ix_users_user_uid', 'users')
    op.drop_table('users')
