"""record listing and summary cache tables

Revision ID: 0001_digest_schema
Revises:
Create Date: 2026-10-19

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_digest_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "congressional_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("document_key", sa.String(), nullable=False),
        sa.Column("issue_number", sa.String(), nullable=False),
        sa.Column("volume_number", sa.String(), nullable=True),
        sa.Column("congress", sa.Integer(), nullable=True),
        sa.Column("session_number", sa.Integer(), nullable=True),
        sa.Column("issue_date", sa.String(), nullable=True),
        sa.Column("update_date", sa.String(), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("contents", sa.JSON(), nullable=True),
        sa.Column("fetched_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("document_key", name="uq_record_document_key"),
        sa.UniqueConstraint("issue_number", "volume_number", name="uq_record_issue_volume"),
    )
    op.create_index("idx_records_issue_date", "congressional_records", ["issue_date"], unique=False)

    op.create_table(
        "document_summaries",
        sa.Column("document_key", sa.String(), primary_key=True),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("pdf_url", sa.Text(), nullable=True),
        sa.Column("prompt_version", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "chunk_summaries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("document_key", sa.String(), nullable=False),
        sa.Column("chunk_index", sa.Integer(), nullable=False),
        sa.Column("split_key", sa.String(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("prompt_version", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "document_key", "chunk_index", "split_key", name="uq_chunk_identity"
        ),
    )
    op.create_index(
        "idx_chunk_summaries_document", "chunk_summaries", ["document_key"], unique=False
    )


def downgrade() -> None:
    op.drop_index("idx_chunk_summaries_document", table_name="chunk_summaries")
    op.drop_table("chunk_summaries")
    op.drop_table("document_summaries")
    op.drop_index("idx_records_issue_date", table_name="congressional_records")
    op.drop_table("congressional_records")
