"""assignments and organization options

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op


revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS assignments (
            id SERIAL PRIMARY KEY,
            organization_id INTEGER NOT NULL,
            territory_id INTEGER NOT NULL REFERENCES territories(id) ON DELETE CASCADE,
            assignee_user_id INTEGER,
            start_at TIMESTAMPTZ NOT NULL,
            due_at TIMESTAMPTZ NOT NULL,
            returned_at TIMESTAMPTZ,
            status VARCHAR(50) NOT NULL DEFAULT 'active',
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_assignments_org_start ON assignments(organization_id, start_at);"
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS organization_options (
            id SERIAL PRIMARY KEY,
            organization_id INTEGER NOT NULL,
            list_key VARCHAR(50) NOT NULL,
            label VARCHAR(100) NOT NULL,
            value VARCHAR(100) NOT NULL,
            description TEXT,
            sort INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_organization_options_value UNIQUE (organization_id, list_key, value)
        );
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS organization_options;")
    op.execute("DROP TABLE IF EXISTS assignments;")
