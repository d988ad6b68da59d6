"""leaderboard view

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op


revision: str = "20261018_0002"
down_revision: Union[str, None] = "20261018_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        """
        CREATE VIEW leaderboard AS
        SELECT
            u.username,
            u.total_score,
            u.has_claimed_prize,
            COUNT(uf.id) AS flags_count,
            RANK() OVER (ORDER BY u.total_score DESC) AS rank,
            u.updated_at
        FROM users u
        LEFT JOIN user_flags uf ON u.username = uf.username
        GROUP BY u.username, u.total_score, u.has_claimed_prize, u.updated_at
        ORDER BY u.total_score DESC, u.username ASC
        """
    )


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS leaderboard")
