"""Create run engine tables

Revision ID: create_run_engine_tables
Revises:
Create Date: 2026-10-19

Creates resources, apps, runs and dashboards. Structured values (key/value
lists, inputs, SQL configuration, resolved requests, dashboard runtime
configuration) are JSONB. runs.version is the optimistic concurrency token.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision = "create_run_engine_tables"
down_revision = None
branch_labels = None
depends_on = None

RUN_STATUSES = ("Pending", "Running", "Success", "Failure", "InvalidConfiguration")
HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    ]


def upgrade() -> None:
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE run_status AS ENUM (
                'Pending',
                'Running',
                'Success',
                'Failure',
                'InvalidConfiguration'
            );
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$
    """)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE http_method AS ENUM ('GET', 'POST', 'PUT', 'PATCH', 'DELETE');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$
    """)

    op.create_table(
        "resources",
        sa.Column("id", UUID(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("space_id", UUID(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("kind", sa.String(20), nullable=False, server_default="http"),

        # HTTP defaults
        sa.Column("base_url", sa.String(2000), nullable=True),
        sa.Column("url_parameters", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("headers", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("body", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),

        # Database connection
        sa.Column("database_engine", sa.String(50), nullable=True),
        sa.Column("database_host", sa.String(255), nullable=True),
        sa.Column("database_port", sa.Integer(), nullable=True),
        sa.Column("database_name", sa.String(255), nullable=True),
        sa.Column("database_auth_scheme", sa.String(50), nullable=True),
        sa.Column("database_username", sa.String(255), nullable=True),
        sa.Column("database_password", sa.Text(), nullable=True),
        sa.Column("use_ssl", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("connection_options", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("sql_schema", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),

        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "apps",
        sa.Column("id", UUID(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("folder_id", UUID(), nullable=True),
        sa.Column("resource_id", UUID(), nullable=False),
        sa.Column(
            "http_method",
            postgresql.ENUM(*HTTP_METHODS, name="http_method", create_type=False),
            nullable=False,
            server_default="GET",
        ),
        sa.Column("inputs", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("url_path", sa.String(2000), nullable=True),
        sa.Column("url_parameters", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("headers", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("body", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("use_dynamic_json_body", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("sql_config", JSONB(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_apps_resource_id", "apps", ["resource_id"])
    op.create_index("ix_apps_folder_id", "apps", ["folder_id"])

    op.create_table(
        "runs",
        sa.Column("id", UUID(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("app_id", UUID(), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(*RUN_STATUSES, name="run_status", create_type=False),
            nullable=False,
            server_default="Pending",
        ),
        sa.Column("input_values", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("executable_request", JSONB(), nullable=True),
        sa.Column("executed_sql", JSONB(), nullable=True),
        sa.Column("response", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_runs_app_id_status", "runs", ["app_id", "status"])
    op.create_index("ix_runs_status", "runs", ["status"])
    op.create_index("ix_runs_created_at", "runs", ["created_at"])

    op.create_table(
        "dashboards",
        sa.Column("id", UUID(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("folder_id", UUID(), nullable=True),
        sa.Column("prepare_app_id", UUID(), nullable=True),
        sa.Column("configuration", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("dashboards")
    op.drop_index("ix_runs_created_at", table_name="runs")
    op.drop_index("ix_runs_status", table_name="runs")
    op.drop_index("ix_runs_app_id_status", table_name="runs")
    op.drop_table("runs")
    op.drop_index("ix_apps_folder_id", table_name="apps")
    op.drop_index("ix_apps_resource_id", table_name="apps")
    op.drop_table("apps")
    op.drop_table("resources")
    op.execute("DROP TYPE IF EXISTS http_method")
    op.execute("DROP TYPE IF EXISTS run_status")
