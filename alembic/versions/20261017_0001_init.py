"""init skill registry schema

Revision ID: 20261017_0001
Revises: 
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

from skill_registry.db.schema import CATALOG_VIEW_DDL, DROP_CATALOG_VIEW

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("id", name="pk_categories"),
        sa.UniqueConstraint("name", name="uq_categories_name"),
    )

    op.create_table(
        "skills",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("id", name="pk_skills"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], name="fk_skills_category_id_categories"),
        sa.UniqueConstraint("name", name="uq_skills_name"),
    )
    op.create_index("ix_skills_category_id", "skills", ["category_id"], unique=False)

    op.create_table(
        "parameters",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("skill_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_parameters"),
        sa.ForeignKeyConstraint(
            ["skill_id"],
            ["skills.id"],
            name="fk_parameters_skill_id_skills",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("skill_id", "name", name="uq_parameters_skill_id_name"),
    )
    op.create_index("ix_parameters_skill_id", "parameters", ["skill_id"], unique=False)

    view_ddl = CATALOG_VIEW_DDL.get(op.get_context().dialect.name)
    if view_ddl:
        op.execute(view_ddl)


def downgrade() -> None:
    op.execute(DROP_CATALOG_VIEW)
    op.drop_index("ix_parameters_skill_id", table_name="parameters")
    op.drop_table("parameters")
    op.drop_index("ix_skills_category_id", table_name="skills")
    op.drop_table("skills")
    op.drop_table("categories")
