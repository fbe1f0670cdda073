"""add_comment_report_submissions

Revision ID: 8d2e41b7c5a3
Revises: 3f1c9a2e7b40
Create Date: 2026-10-19 10:12:48.903114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d2e41b7c5a3'
down_revision: Union[str, Sequence[str], None] = '3f1c9a2e7b40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # One row per (comment, user) report action
    op.create_table(
        'comment_report_submissions',
        sa.Column('submission_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('comment_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('current_timestamp()'), nullable=False),
        sa.PrimaryKeyConstraint('submission_id'),
        sa.ForeignKeyConstraint(['comment_id'], ['station_comments.comment_id'], name='fk_comment_report_submissions_comment_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], name='fk_comment_report_submissions_user_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.UniqueConstraint('comment_id', 'user_id', name='uq_comment_report_submissions_comment_user'),
    )
    op.create_index('idx_comment_report_submissions_user', 'comment_report_submissions', ['user_id'])

    # Backfill one submission per existing (comment, user) pair
    op.execute(
        """
        INSERT INTO comment_report_submissions (comment_id, user_id, created_at)
        SELECT comment_id, user_id, MIN(created_at)
        FROM comment_reports
        GROUP BY comment_id, user_id
        """
    )

    op.add_column('comment_reports', sa.Column('submission_id', sa.Integer(), nullable=True))
    op.execute(
        """
        UPDATE comment_reports r
        JOIN comment_report_submissions s
          ON s.comment_id = r.comment_id AND s.user_id = r.user_id
        SET r.submission_id = s.submission_id
        """
    )
    op.alter_column('comment_reports', 'submission_id', existing_type=sa.Integer(), nullable=False)
    op.create_foreign_key(
        'fk_comment_reports_submission_id',
        'comment_reports',
        'comment_report_submissions',
        ['submission_id'],
        ['submission_id'],
        onupdate='CASCADE',
        ondelete='CASCADE',
    )
    op.create_index('idx_comment_reports_submission', 'comment_reports', ['submission_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_comment_reports_submission', table_name='comment_reports')
    op.drop_constraint('fk_comment_reports_submission_id', 'comment_reports', type_='foreignkey')
    op.drop_column('comment_reports', 'submission_id')

    op.drop_index('idx_comment_report_submissions_user', table_name='comment_report_submissions')
    op.drop_table('comment_report_submissions')
