"""initial

Revision ID: 0001_initial
Revises: 
Create Date: 2026-09-28 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime, server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'photos',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('photo_uid', sa.String(42), nullable=False, unique=True),
        sa.Column('photo_path', sa.String(500), nullable=False, server_default=''),
        sa.Column('photo_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('photo_title', sa.String(200), nullable=False, server_default=''),
        sa.Column('photo_quality', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('photo_private', sa.Boolean, nullable=False, server_default=sa.text('0')),
        sa.Column('file_count', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('edited_at', sa.DateTime, nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_photos_photo_uid', 'photos', ['photo_uid'])
    op.create_index('ix_photos_photo_path', 'photos', ['photo_path'])
    op.create_index('ix_photos_deleted_at', 'photos', ['deleted_at'])

    op.create_table(
        'files',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('file_uid', sa.String(42), nullable=False, unique=True),
        sa.Column('photo_id', sa.Integer, sa.ForeignKey('photos.id'), nullable=True),
        sa.Column('photo_uid', sa.String(42), nullable=True),
        sa.Column('file_root', sa.String(16), nullable=False, server_default='/'),
        sa.Column('file_name', sa.String(740), nullable=False),
        sa.Column('original_name', sa.String(755), nullable=False, server_default=''),
        sa.Column('file_hash', sa.String(128), nullable=True),
        sa.Column('file_size', sa.BigInteger, nullable=False, server_default=sa.text('0')),
        sa.Column('file_type', sa.String(32), nullable=True),
        sa.Column('file_mime', sa.String(64), nullable=True),
        sa.Column('file_width', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('file_height', sa.Integer, nullable=False, server_default=sa.text('0')),
        sa.Column('file_primary', sa.Boolean, nullable=False, server_default=sa.text('0')),
        sa.Column('file_sidecar', sa.Boolean, nullable=False, server_default=sa.text('0')),
        sa.Column('file_video', sa.Boolean, nullable=False, server_default=sa.text('0')),
        sa.Column('file_missing', sa.Boolean, nullable=False, server_default=sa.text('0')),
        sa.Column('file_error', sa.String(512), nullable=False, server_default=''),
        sa.Column('mod_time', sa.BigInteger, nullable=False, server_default=sa.text('0')),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_files_file_uid', 'files', ['file_uid'])
    op.create_index('ix_files_photo_id', 'files', ['photo_id'])
    op.create_index('ix_files_photo_uid', 'files', ['photo_uid'])
    op.create_index('ix_files_file_hash', 'files', ['file_hash'])
    op.create_index('ix_files_deleted_at', 'files', ['deleted_at'])

    op.create_table(
        'albums',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('album_uid', sa.String(42), nullable=False, unique=True),
        sa.Column('album_title', sa.String(255), nullable=False, server_default=''),
        sa.Column('album_type', sa.String(8), nullable=False, server_default='album'),
        sa.Column('photo_count', sa.Integer, nullable=False, server_default=sa.text('0')),
        *_timestamps(),
    )
    op.create_index('ix_albums_album_uid', 'albums', ['album_uid'])

    op.create_table(
        'photos_albums',
        sa.Column('photo_uid', sa.String(42), primary_key=True),
        sa.Column('album_uid', sa.String(42), primary_key=True),
        sa.Column('hidden', sa.Boolean, nullable=False, server_default=sa.text('0')),
        sa.Column('order', sa.Integer, nullable=False, server_default=sa.text('0')),
        *_timestamps(),
    )
    op.create_index('ix_photos_albums_album_uid', 'photos_albums', ['album_uid'])

    op.create_table(
        'labels',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('label_uid', sa.String(42), nullable=False, unique=True),
        sa.Column('label_slug', sa.String(160), nullable=False, unique=True),
        sa.Column('label_name', sa.String(160), nullable=False),
        sa.Column('photo_count', sa.Integer, nullable=False, server_default=sa.text('0')),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_labels_label_uid', 'labels', ['label_uid'])
    op.create_index('ix_labels_deleted_at', 'labels', ['deleted_at'])

    op.create_table(
        'photos_labels',
        sa.Column('photo_id', sa.Integer, sa.ForeignKey('photos.id'), primary_key=True),
        sa.Column('label_id', sa.Integer, sa.ForeignKey('labels.id'), primary_key=True),
        sa.Column('uncertainty', sa.Integer, nullable=False, server_default=sa.text('0')),
    )
    op.create_index('ix_photos_labels_label_id', 'photos_labels', ['label_id'])

    op.create_table(
        'duplicates',
        sa.Column('file_root', sa.String(16), primary_key=True),
        sa.Column('file_name', sa.String(740), primary_key=True),
        sa.Column('file_hash', sa.String(128), nullable=False, server_default=''),
        sa.Column('file_size', sa.BigInteger, nullable=False, server_default=sa.text('0')),
        sa.Column('mod_time', sa.BigInteger, nullable=False, server_default=sa.text('0')),
    )
    op.create_index('ix_duplicates_file_hash', 'duplicates', ['file_hash'])


def downgrade() -> None:
    op.drop_table('duplicates')
    op.drop_table('photos_labels')
    op.drop_table('labels')
    op.drop_table('photos_albums')
    op.drop_table('albums')
    op.drop_table('files')
    op.drop_table('photos')
