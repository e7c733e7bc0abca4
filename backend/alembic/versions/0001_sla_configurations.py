"""sla configurations and tenant reference tables

Revision ID: 0001_sla_configurations
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_sla_configurations"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_companies"),
    )

    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_departments"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], name="fk_departments_company_id_companies"),
    )
    op.create_index("ix_departments_company_id", "departments", ["company_id"])

    op.create_table(
        "incident_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_incident_types"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], name="fk_incident_types_company_id_companies"),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_incident_types_department_id_departments",
        ),
    )
    op.create_index("ix_incident_types_company_id", "incident_types", ["company_id"])

    op.create_table(
        "department_priorities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("weight", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_department_priorities"),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["companies.id"],
            name="fk_department_priorities_company_id_companies",
        ),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_department_priorities_department_id_departments",
        ),
    )
    op.create_index("ix_department_priorities_company_id", "department_priorities", ["company_id"])
    op.create_index("ix_department_priorities_department_id", "department_priorities", ["department_id"])

    op.create_table(
        "sla_configurations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("incident_type_id", sa.Integer(), nullable=False),
        sa.Column("priority_id", sa.Integer(), nullable=True),
        sa.Column("response_time_hours", sa.Float(), nullable=False),
        sa.Column("resolution_time_hours", sa.Float(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_sla_configurations"),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["companies.id"],
            name="fk_sla_configurations_company_id_companies",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["department_id"],
            ["departments.id"],
            name="fk_sla_configurations_department_id_departments",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["incident_type_id"],
            ["incident_types.id"],
            name="fk_sla_configurations_incident_type_id_incident_types",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["priority_id"],
            ["department_priorities.id"],
            name="fk_sla_configurations_priority_id_department_priorities",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("response_time_hours > 0", name="ck_sla_configurations_response_time_positive"),
        sa.CheckConstraint("resolution_time_hours > 0", name="ck_sla_configurations_resolution_time_positive"),
        sa.CheckConstraint(
            "response_time_hours <= resolution_time_hours",
            name="ck_sla_configurations_response_within_resolution",
        ),
    )
    op.create_index(
        "ix_sla_configurations_scope",
        "sla_configurations",
        ["company_id", "department_id", "incident_type_id"],
    )
    # NULL priorities never collide in a plain unique index, hence one partial index per case.
    op.create_index(
        "uq_sla_configurations_active_priority",
        "sla_configurations",
        ["company_id", "department_id", "incident_type_id", "priority_id"],
        unique=True,
        postgresql_where=sa.text("is_active AND priority_id IS NOT NULL"),
    )
    op.create_index(
        "uq_sla_configurations_active_wildcard",
        "sla_configurations",
        ["company_id", "department_id", "incident_type_id"],
        unique=True,
        postgresql_where=sa.text("is_active AND priority_id IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_sla_configurations_active_wildcard", table_name="sla_configurations")
    op.drop_index("uq_sla_configurations_active_priority", table_name="sla_configurations")
    op.drop_index("ix_sla_configurations_scope", table_name="sla_configurations")
    op.drop_table("sla_configurations")
    op.drop_index("ix_department_priorities_department_id", table_name="department_priorities")
    op.drop_index("ix_department_priorities_company_id", table_name="department_priorities")
    op.drop_table("department_priorities")
    op.drop_index("ix_incident_types_company_id", table_name="incident_types")
    op.drop_table("incident_types")
    op.drop_index("ix_departments_company_id", table_name="departments")
    op.drop_table("departments")
    op.drop_table("companies")
