"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18

"""
from alembic import op

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Schema is maintained as plain SQL in migrations/
    import os
    sql_file = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
        "migrations",
        "001_initial_schema.sql"
    )

    if os.path.exists(sql_file):
        with open(sql_file, 'r') as f:
            op.execute(f.read())


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS job_templates CASCADE")
    op.execute("DROP TABLE IF EXISTS connections CASCADE")
    op.execute("DROP TABLE IF EXISTS connection_tokens CASCADE")
    op.execute("DROP TABLE IF EXISTS mcp_service_tokens CASCADE")
    op.execute("DROP TABLE IF EXISTS mcp_services CASCADE")
    op.execute("DROP TABLE IF EXISTS team_members CASCADE")
    op.execute("DROP TABLE IF EXISTS account_members CASCADE")
    op.execute("DROP TABLE IF EXISTS user_roles CASCADE")
