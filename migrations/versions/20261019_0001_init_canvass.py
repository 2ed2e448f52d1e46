"""init canvass territories

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS territories (
            id SERIAL PRIMARY KEY,
            organization_id INTEGER NOT NULL,
            parent_id INTEGER REFERENCES territories(id) ON DELETE SET NULL,
            code VARCHAR(50) NOT NULL,
            name VARCHAR(255) NOT NULL,
            territory_type VARCHAR(100),
            dominant_language VARCHAR(100),
            notes TEXT,
            boundary_geojson JSONB,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_territories_org_code UNIQUE (organization_id, code)
        );
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS addresses (
            id SERIAL PRIMARY KEY,
            organization_id INTEGER NOT NULL,
            territory_id INTEGER NOT NULL REFERENCES territories(id) ON DELETE CASCADE,
            civic_number VARCHAR(50),
            unit VARCHAR(50),
            label VARCHAR(255),
            contact_name VARCHAR(255),
            phone VARCHAR(50),
            notes TEXT,
            street VARCHAR(255),
            street2 VARCHAR(255),
            city VARCHAR(255),
            region VARCHAR(255),
            postal_code VARCHAR(50),
            country VARCHAR(255),
            lat NUMERIC(10, 7),
            lng NUMERIC(10, 7),
            status VARCHAR(50) NOT NULL DEFAULT 'not_visited',
            do_not_call BOOLEAN NOT NULL DEFAULT FALSE,
            last_visit_at TIMESTAMPTZ,
            next_visit_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS visits (
            id SERIAL PRIMARY KEY,
            organization_id INTEGER NOT NULL,
            address_id INTEGER NOT NULL REFERENCES addresses(id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL,
            visited_at TIMESTAMPTZ NOT NULL,
            result VARCHAR(100) NOT NULL,
            action VARCHAR(100),
            openness VARCHAR(100),
            observed_language VARCHAR(100),
            notes TEXT,
            person_name VARCHAR(255),
            do_not_call BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS territory_streets (
            id SERIAL PRIMARY KEY,
            territory_id INTEGER NOT NULL REFERENCES territories(id) ON DELETE CASCADE,
            name VARCHAR(255) NOT NULL,
            name_normalized VARCHAR(255) NOT NULL,
            geojson JSONB,
            source VARCHAR(32),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_territory_streets_name UNIQUE (territory_id, name_normalized)
        );
        """
    )

    op.execute("CREATE INDEX IF NOT EXISTS ix_territories_org_parent ON territories (organization_id, parent_id);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_addresses_org_territory ON addresses (organization_id, territory_id);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_visits_org_address ON visits (organization_id, address_id);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_territory_streets_territory ON territory_streets (territory_id);")

    op.execute(
        """
        DO $$
        BEGIN
            IF NOT EXISTS (SELECT 1 FROM pg_constraint WHERE conname = 'chk_addresses_do_not_call') THEN
                ALTER TABLE addresses
                    ADD CONSTRAINT chk_addresses_do_not_call
                    CHECK (status <> 'do_not_call' OR do_not_call);
            END IF;
        END $$;
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS territory_streets;")
    op.execute("DROP TABLE IF EXISTS visits;")
    op.execute("DROP TABLE IF EXISTS addresses;")
    op.execute("DROP TABLE IF EXISTS territories;")
