"""create_progress_and_certificate_tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

catalog_status = ('active', 'inactive')
viewing_status = ('not_started', 'in_progress', 'completed')


def upgrade() -> None:
    """Users, catalog, viewing records and certificates."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firebase_uid', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_user_email'),
        sa.UniqueConstraint('firebase_uid', name='uq_user_firebase_uid'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_firebase_uid', 'users', ['firebase_uid'])

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum(*catalog_status, name='course_status_enum'), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_courses_id', 'courses', ['id'])
    op.create_index('ix_courses_title', 'courses', ['title'])

    op.create_table(
        'videos',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('video_order', sa.Integer(), nullable=False),
        sa.Column('duration_seconds', sa.Float(), nullable=True),
        sa.Column('status', sa.Enum(*catalog_status, name='video_status_enum'), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_videos_id', 'videos', ['id'])
    op.create_index('ix_videos_course_id', 'videos', ['course_id'])

    op.create_table(
        'video_view_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('video_id', sa.Integer(), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(255), nullable=True),
        sa.Column('current_position', sa.Float(), nullable=False),
        sa.Column('total_watched_time', sa.Float(), nullable=False),
        sa.Column('progress_percent', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum(*viewing_status, name='viewing_status_enum'), nullable=False),
        sa.Column('start_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('end_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('last_updated', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['video_id'], ['videos.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'video_id', name='uq_user_video_view_log'),
    )
    op.create_index('ix_video_view_logs_id', 'video_view_logs', ['id'])
    op.create_index('ix_video_view_logs_course_id', 'video_view_logs', ['course_id'])
    op.create_index('ix_video_view_logs_status', 'video_view_logs', ['status'])

    op.create_table(
        'certificates',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=False),
        sa.Column('user_name', sa.String(255), nullable=False),
        sa.Column('course_title', sa.String(255), nullable=False),
        sa.Column('completion_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('pdf_url', sa.String(512), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'course_id', name='uq_user_course_certificate'),
    )
    op.create_index('ix_certificates_course_id', 'certificates', ['course_id'])


def downgrade() -> None:
    """Drop everything created in upgrade()."""
    op.drop_index('ix_certificates_course_id', table_name='certificates')
    op.drop_table('certificates')
    op.drop_index('ix_video_view_logs_status', table_name='video_view_logs')
    op.drop_index('ix_video_view_logs_course_id', table_name='video_view_logs')
    op.drop_index('ix_video_view_logs_id', table_name='video_view_logs')
    op.drop_table('video_view_logs')
    op.drop_index('ix_videos_course_id', table_name='videos')
    op.drop_index('ix_videos_id', table_name='videos')
    op.drop_table('videos')
    op.drop_index('ix_courses_title', table_name='courses')
    op.drop_index('ix_courses_id', table_name='courses')
    op.drop_table('courses')
    op.drop_index('ix_users_firebase_uid', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
    if op.get_bind().dialect.name == 'postgresql':
        for enum_name in ('viewing_status_enum', 'video_status_enum', 'course_status_enum'):
            op.execute(f'DROP TYPE IF EXISTS {enum_name}')
