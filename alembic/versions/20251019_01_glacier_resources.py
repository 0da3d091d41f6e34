"""
Glacier resource tables.

- films       owning parent of every archived binary
- exports     downloadable renditions (token protected)
- thumbnails  public preview images
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic.
revision = "20251019_01_glacier_resources"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "films",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_films"),
    )

    op.create_table(
        "exports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("film_id", sa.Integer(), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=True),
        sa.Column("mime", sa.String(length=127), nullable=True),
        sa.Column("size", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("(size IS NULL OR size >= 0)", name="ck_exports_size_nonneg"),
        sa.ForeignKeyConstraint(["film_id"], ["films.id"], name="fk_exports_film_id_films", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_exports"),
    )
    op.create_index("ix_exports_film_id", "exports", ["film_id"], unique=False)

    op.create_table(
        "thumbnails",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("film_id", sa.Integer(), nullable=False),
        sa.Column("mime", sa.String(length=127), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("(width IS NULL OR width > 0)", name="ck_thumbnails_width_pos"),
        sa.CheckConstraint("(height IS NULL OR height > 0)", name="ck_thumbnails_height_pos"),
        sa.ForeignKeyConstraint(["film_id"], ["films.id"], name="fk_thumbnails_film_id_films", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_thumbnails"),
    )
    op.create_index("ix_thumbnails_film_id", "thumbnails", ["film_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_thumbnails_film_id", table_name="thumbnails")
    op.drop_table("thumbnails")
    op.drop_index("ix_exports_film_id", table_name="exports")
    op.drop_table("exports")
    op.drop_table("films")
