"""Add indexes for state filters, plan listing and cache sweeps.

Revision ID: 8c4e0b7a25d1
Revises: 3a1f9c2d7b40
Create Date: 2026-10-05
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c4e0b7a25d1"
down_revision: str = "3a1f9c2d7b40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # parks
    op.create_index("ix_parks_state", "parks", ["state"])

    # plans
    op.create_index("ix_plans_planned_date", "plans", ["planned_date"])
    op.create_index("ix_plans_park_id", "plans", ["park_id"])

    # weather_cache (cleanup sweeps by expiry)
    op.create_index("ix_weather_cache_expires_at", "weather_cache", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_weather_cache_expires_at", table_name="weather_cache")
    op.drop_index("ix_plans_park_id", table_name="plans")
    op.drop_index("ix_plans_planned_date", table_name="plans")
    op.drop_index("ix_parks_state", table_name="parks")
