"""Initial schema"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_init_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto";')

    op.execute("CREATE TYPE ad_platform AS ENUM ('facebook','google','instagram','linkedin','twitter');")
    op.execute("CREATE TYPE ad_status AS ENUM ('draft','active','paused','completed');")
    op.execute("CREATE TYPE meeting_type AS ENUM ('consultation','strategy','review','demo','followup');")
    op.execute("CREATE TYPE meeting_status AS ENUM ('scheduled','completed','cancelled','no-show');")

    uuid = postgresql.UUID(as_uuid=True)

    ad_platform_enum = postgresql.ENUM(name="ad_platform", create_type=False)
    ad_status_enum = postgresql.ENUM(name="ad_status", create_type=False)
    meeting_type_enum = postgresql.ENUM(name="meeting_type", create_type=False)
    meeting_status_enum = postgresql.ENUM(name="meeting_status", create_type=False)

    op.create_table(
        "profiles",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("company", sa.Text(), nullable=True),
        sa.Column("position", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )

    op.create_table(
        "ads",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("platform", ad_platform_enum, nullable=False),
        sa.Column("status", ad_status_enum, nullable=False, server_default=sa.text("'draft'")),
        sa.Column("budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("spent", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("impressions", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("clicks", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("conversions", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("ctr", sa.Numeric(7, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("cpc", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_ads_user_id", "ads", ["user_id"])

    op.create_table(
        "meetings",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.Text(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("meeting_type", meeting_type_enum, nullable=False, server_default=sa.text("'consultation'")),
        sa.Column("status", meeting_status_enum, nullable=False, server_default=sa.text("'scheduled'")),
        sa.Column("room_id", sa.Text(), nullable=False, unique=True),
        sa.Column("attendee_name", sa.Text(), nullable=False),
        sa.Column("attendee_email", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("invite_code", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_meetings_user_id", "meetings", ["user_id"])

    op.create_table(
        "growth_metrics",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("metric_name", sa.Text(), nullable=False),
        sa.Column("metric_value", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("metric_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_growth_metrics_user_id", "growth_metrics", ["user_id"])
    op.create_index("idx_growth_metrics_user_date", "growth_metrics", ["user_id", "metric_date"])


def downgrade() -> None:
    op.drop_index("idx_growth_metrics_user_date", table_name="growth_metrics")
    op.drop_index("ix_growth_metrics_user_id", table_name="growth_metrics")
    op.drop_table("growth_metrics")
    op.drop_index("ix_meetings_user_id", table_name="meetings")
    op.drop_table("meetings")
    op.drop_index("ix_ads_user_id", table_name="ads")
    op.drop_table("ads")
    op.drop_table("profiles")

    op.execute("DROP TYPE IF EXISTS meeting_status;")
    op.execute("DROP TYPE IF EXISTS meeting_type;")
    op.execute("DROP TYPE IF EXISTS ad_status;")
    op.execute("DROP TYPE IF EXISTS ad_platform;")
