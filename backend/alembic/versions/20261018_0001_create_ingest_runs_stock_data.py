"""create ingest_runs and stock_data

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "ingest_runs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("dataset", sa.String(length=64), nullable=False),
        sa.Column("source_name", sa.String(length=255), nullable=True),
        sa.Column("source_hash", sa.String(length=128), nullable=True),
        sa.Column("status", sa.String(length=24), server_default=sa.text("'SUCCESS'"), nullable=False),
        sa.Column("stats", sa.JSON(), nullable=True),
        sa.Column("error", sa.String(length=2000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ingest_runs_dataset", "ingest_runs", ["dataset"], unique=False)
    op.create_index("ix_ingest_runs_source_hash", "ingest_runs", ["source_hash"], unique=False)

    op.create_table(
        "stock_data",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("ingest_run_id", sa.String(length=36), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("symbol", sa.String(length=64), nullable=False),
        sa.Column("series", sa.String(length=64), nullable=False),
        sa.Column("prev_close", sa.Float(), nullable=False),
        sa.Column("open", sa.Float(), nullable=False),
        sa.Column("high", sa.Float(), nullable=False),
        sa.Column("low", sa.Float(), nullable=False),
        sa.Column("last", sa.Float(), nullable=False),
        sa.Column("close", sa.Float(), nullable=False),
        sa.Column("vwap", sa.Float(), nullable=False),
        sa.Column("volume", sa.Float(), nullable=False),
        sa.Column("turnover", sa.Float(), nullable=False),
        sa.Column("trades", sa.Float(), nullable=False),
        sa.Column("deliverable", sa.Float(), nullable=False),
        sa.Column("percentage_deliverable", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["ingest_run_id"], ["ingest_runs.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stock_data_ingest_run_id", "stock_data", ["ingest_run_id"], unique=False)
    op.create_index("ix_stock_data_symbol_date", "stock_data", ["symbol", "date"], unique=False)
    op.create_index("ix_stock_data_date", "stock_data", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_stock_data_date", table_name="stock_data")
    op.drop_index("ix_stock_data_symbol_date", table_name="stock_data")
    op.drop_index("ix_stock_data_ingest_run_id", table_name="stock_data")
    op.drop_table("stock_data")
    op.drop_index("ix_ingest_runs_source_hash", table_name="ingest_runs")
    op.drop_index("ix_ingest_runs_dataset", table_name="ingest_runs")
    op.drop_table("ingest_runs")
