"""initial schema

Revision ID: 3a1f9c2d7b40
Revises:
Create Date: 2026-10-03 09:14:52.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a1f9c2d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create parks, plans and the forecast cache."""

    # Parks
    op.create_table(
        "parks",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("reference", sa.String(20), nullable=False),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("grid_square", sa.String(10)),
        sa.Column("state", sa.String(10)),
        sa.Column("country", sa.String(100)),
        sa.Column("region", sa.String(100)),
        sa.Column("park_type", sa.String(100)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("pota_url", sa.String(200)),
        sa.Column("park_metadata", sa.JSON, nullable=True),
        sa.Column("synced_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint("reference", name="uq_parks_reference"),
    )

    # Plans
    op.create_table(
        "plans",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "park_id", sa.Integer,
            sa.ForeignKey("parks.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("planned_date", sa.Date, nullable=False),
        sa.Column("planned_time", sa.String(5)),
        sa.Column("duration_hours", sa.Float),
        sa.Column("preset_id", sa.String(50)),
        sa.Column("notes", sa.Text),
        sa.Column("weather_cache", sa.Text),
        sa.Column("bands_cache", sa.Text),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.CheckConstraint(
            "status IN ('draft', 'finalized', 'completed', 'cancelled')",
            name="ck_plans_status",
        ),
    )

    # Forecast cache
    op.create_table(
        "weather_cache",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("forecast_date", sa.Date, nullable=False),
        sa.Column("data", sa.Text, nullable=False),
        sa.Column("fetched_at", sa.DateTime, nullable=False),
        sa.Column("expires_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint(
            "latitude", "longitude", "forecast_date", name="uq_weather_cache_key",
        ),
    )


def downgrade() -> None:
    op.drop_table("weather_cache")
    op.drop_table("plans")
    op.drop_table("parks")
