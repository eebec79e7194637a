"""Initial schema: sources, scraping_jobs, listings, email_jobs.

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Sources
    op.create_table(
        "sources",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("display_name", sa.String(255)),
        sa.Column("base_url", sa.String(500), nullable=False),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("scrape_interval_minutes", sa.Integer, nullable=False, server_default=sa.text("360")),
        sa.Column("last_scrape_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_source_due", "sources", ["enabled", "last_scrape_at"])

    # Scraping jobs
    op.create_table(
        "scraping_jobs",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("source_id", sa.BigInteger, sa.ForeignKey("sources.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("triggered_by", sa.String(20)),
        sa.Column("attempt", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("started_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("items_scraped", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("items_new", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("items_updated", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("error_message", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_scraping_jobs_source", "scraping_jobs", ["source_id"])
    op.create_index("idx_scraping_jobs_status", "scraping_jobs", ["status", "started_at"])

    # Listings
    op.create_table(
        "listings",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("source_id", sa.BigInteger, sa.ForeignKey("sources.id"), nullable=False),
        sa.Column("url", sa.Text, unique=True, nullable=False),
        sa.Column("external_id", sa.String(255)),
        sa.Column("title", sa.Text),
        sa.Column("description", sa.Text),
        sa.Column("price", sa.Numeric(12, 2)),
        sa.Column("currency", sa.String(3), server_default="EUR"),
        sa.Column("surface_sqm", sa.Numeric(10, 2)),
        sa.Column("price_per_sqm", sa.Numeric(10, 2)),
        sa.Column("rooms", sa.Integer),
        sa.Column("bathrooms", sa.Integer),
        sa.Column("floor", sa.Integer),
        sa.Column("total_floors", sa.Integer),
        sa.Column("year_built", sa.Integer),
        sa.Column("city", sa.String(255)),
        sa.Column("neighborhood", sa.String(255)),
        sa.Column("address", sa.String(500)),
        sa.Column("latitude", sa.Numeric(10, 8)),
        sa.Column("longitude", sa.Numeric(11, 8)),
        sa.Column("image_urls", postgresql.JSONB),
        sa.Column("features", postgresql.JSONB),
        sa.Column("first_scraped_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_scraped_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_listings_city", "listings", ["city"])
    op.create_index("idx_listings_price", "listings", ["price"])
    op.create_index("idx_listings_scraped", "listings", ["last_scraped_at"])
    op.create_index("idx_listings_source_external", "listings", ["source_id", "external_id"])

    # Email jobs
    op.create_table(
        "email_jobs",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("recipient_email", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255)),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
        sa.Column("error_message", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("email_jobs")
    op.drop_table("listings")
    op.drop_table("scraping_jobs")
    op.drop_table("sources")
