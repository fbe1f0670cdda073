"""create_station_price_tables

Revision ID: 3f1c9a2e7b40
Revises:
Create Date: 2026-10-18 16:40:12.418307

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2e7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('user', 'admin', name='userrole')
fuel_type = sa.Enum('nafta', 'nafta_premium', 'gasoil', 'gasoil_premium', 'gnc', name='fueltype')
time_of_day = sa.Enum('diurno', 'nocturno', 'ambos', name='timeofday')
data_source = sa.Enum('official', 'user', name='datasource')
station_state = sa.Enum('pending', 'approved', 'rejected', name='stationstate')
moderation_action = sa.Enum('approve', 'reject', 'resubmit', name='moderationaction')
report_reason = sa.Enum(
    'spam', 'inappropriate_content', 'false_information', 'other', name='commentreportreason'
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('user_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('image', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, nullable=False, server_default='user'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index('idx_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'stations',
        sa.Column('station_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('company', sa.String(length=100), nullable=False),
        sa.Column('address', sa.String(length=300), nullable=False),
        sa.Column('locality', sa.String(length=100), nullable=False),
        sa.Column('province', sa.String(length=100), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('google_maps_url', sa.String(length=500), nullable=True),
        sa.Column('region', sa.String(length=50), nullable=False, server_default='Otra'),
        sa.Column('source', data_source, nullable=False, server_default='official'),
        sa.Column('state', station_state, nullable=False, server_default='approved'),
        sa.Column('creator_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('station_id'),
        sa.ForeignKeyConstraint(['creator_user_id'], ['users.user_id'], name='fk_stations_creator_user_id', onupdate='CASCADE', ondelete='SET NULL'),
    )
    op.create_index('idx_stations_creator_state', 'stations', ['creator_user_id', 'state'])
    op.create_index('idx_stations_state', 'stations', ['state'])
    op.create_index('idx_stations_province', 'stations', ['province'])

    op.create_table(
        'station_moderations',
        sa.Column('moderation_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('station_id', sa.Integer(), nullable=False),
        sa.Column('moderator_user_id', sa.Integer(), nullable=True),
        sa.Column('action', moderation_action, nullable=False),
        sa.Column('reason', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('moderation_id'),
        sa.ForeignKeyConstraint(['station_id'], ['stations.station_id'], name='fk_station_moderations_station_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['moderator_user_id'], ['users.user_id'], name='fk_station_moderations_moderator_user_id', onupdate='CASCADE', ondelete='SET NULL'),
    )
    op.create_index('idx_station_moderations_station_created', 'station_moderations', ['station_id', 'created_at'])
    op.create_index('idx_station_moderations_moderator', 'station_moderations', ['moderator_user_id'])

    op.create_table(
        'price_reports',
        sa.Column('price_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('station_id', sa.Integer(), nullable=False),
        sa.Column('reporter_user_id', sa.Integer(), nullable=True),
        sa.Column('fuel_type', fuel_type, nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('time_of_day', time_of_day, nullable=False, server_default='diurno'),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('source', data_source, nullable=False, server_default='user'),
        sa.Column('is_validated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('price_id'),
        sa.ForeignKeyConstraint(['station_id'], ['stations.station_id'], name='fk_price_reports_station_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reporter_user_id'], ['users.user_id'], name='fk_price_reports_reporter_user_id', onupdate='CASCADE', ondelete='SET NULL'),
    )
    op.create_index('idx_price_reports_station_fuel', 'price_reports', ['station_id', 'fuel_type', 'time_of_day'])
    op.create_index('idx_price_reports_reporter', 'price_reports', ['reporter_user_id'])
    op.create_index('idx_price_reports_created_at', 'price_reports', ['created_at'])

    op.create_table(
        'price_confirmations',
        sa.Column('confirmation_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('price_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('confirmation_id'),
        sa.ForeignKeyConstraint(['price_id'], ['price_reports.price_id'], name='fk_price_confirmations_price_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_price_confirmations_user_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.UniqueConstraint('price_id', 'user_id', name='uq_price_confirmations_price_user'),
    )
    op.create_index('idx_price_confirmations_user', 'price_confirmations', ['user_id'])

    op.create_table(
        'station_comments',
        sa.Column('comment_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('station_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('text', sa.String(length=144), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('comment_id'),
        sa.ForeignKeyConstraint(['station_id'], ['stations.station_id'], name='fk_station_comments_station_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_station_comments_user_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.UniqueConstraint('station_id', 'user_id', name='uq_station_comments_station_user'),
    )
    op.create_index('idx_station_comments_user', 'station_comments', ['user_id'])
    op.create_index('idx_station_comments_created_at', 'station_comments', ['created_at'])

    op.create_table(
        'comment_votes',
        sa.Column('vote_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('comment_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('vote_id'),
        sa.ForeignKeyConstraint(['comment_id'], ['station_comments.comment_id'], name='fk_comment_votes_comment_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_comment_votes_user_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.UniqueConstraint('comment_id', 'user_id', name='uq_comment_votes_comment_user'),
    )
    op.create_index('idx_comment_votes_user', 'comment_votes', ['user_id'])

    op.create_table(
        'comment_reports',
        sa.Column('report_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('comment_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('reason', report_reason, nullable=False),
        sa.Column('notes', sa.String(length=288), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('report_id'),
        sa.ForeignKeyConstraint(['comment_id'], ['station_comments.comment_id'], name='fk_comment_reports_comment_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_comment_reports_user_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.UniqueConstraint('comment_id', 'user_id', 'reason', name='uq_comment_reports_comment_user_reason'),
    )
    op.create_index('idx_comment_reports_comment_user', 'comment_reports', ['comment_id', 'user_id'])
    op.create_index('idx_comment_reports_user', 'comment_reports', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('comment_reports')
    op.drop_table('comment_votes')
    op.drop_table('station_comments')
    op.drop_table('price_confirmations')
    op.drop_table('price_reports')
    op.drop_table('station_moderations')
    op.drop_table('stations')
    op.drop_table('users')
