from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    false,
    text,
    true,
)


metadata = MetaData()


def _timestamps() -> list[Column]:
    return [
        Column("created_at", DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")),
        Column("updated_at", DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    ]


territories = Table(
    "territories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, nullable=False),
    Column("parent_id", Integer, ForeignKey("territories.id", ondelete="SET NULL")),
    Column("code", String(50), nullable=False),
    Column("name", String(255), nullable=False),
    Column("territory_type", String(100)),
    Column("dominant_language", String(100)),
    Column("notes", Text),
    Column("boundary_geojson", JSON),
    *_timestamps(),
    UniqueConstraint("organization_id", "code", name="uq_territories_org_code"),
    Index("ix_territories_org_parent", "organization_id", "parent_id"),
)

addresses = Table(
    "addresses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, nullable=False),
    Column("territory_id", Integer, ForeignKey("territories.id", ondelete="CASCADE"), nullable=False),
    Column("civic_number", String(50)),
    Column("unit", String(50)),
    Column("label", String(255)),
    Column("contact_name", String(255)),
    Column("phone", String(50)),
    Column("notes", Text),
    Column("street", String(255)),
    Column("street2", String(255)),
    Column("city", String(255)),
    Column("region", String(255)),
    Column("postal_code", String(50)),
    Column("country", String(255)),
    Column("lat", Numeric(10, 7, asdecimal=False)),
    Column("lng", Numeric(10, 7, asdecimal=False)),
    Column("status", String(50), nullable=False, server_default="not_visited"),
    Column("do_not_call", Boolean, nullable=False, server_default=false()),
    Column("last_visit_at", DateTime(timezone=True)),
    Column("next_visit_at", DateTime(timezone=True)),
    *_timestamps(),
    Index("ix_addresses_org_territory", "organization_id", "territory_id"),
)

visits = Table(
    "visits",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, nullable=False),
    Column("address_id", Integer, ForeignKey("addresses.id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Integer, nullable=False),
    Column("visited_at", DateTime(timezone=True), nullable=False),
    Column("result", String(100), nullable=False),
    Column("action", String(100)),
    Column("openness", String(100)),
    Column("observed_language", String(100)),
    Column("notes", Text),
    Column("person_name", String(255)),
    Column("do_not_call", Boolean, nullable=False, server_default=false()),
    *_timestamps(),
    Index("ix_visits_org_address", "organization_id", "address_id"),
)

territory_streets = Table(
    "territory_streets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("territory_id", Integer, ForeignKey("territories.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("name_normalized", String(255), nullable=False),
    Column("geojson", JSON),
    Column("source", String(32)),
    *_timestamps(),
    UniqueConstraint("territory_id", "name_normalized", name="uq_territory_streets_name"),
    Index("ix_territory_streets_territory", "territory_id"),
)

assignments = Table(
    "assignments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, nullable=False),
    Column("territory_id", Integer, ForeignKey("territories.id", ondelete="CASCADE"), nullable=False),
    Column("assignee_user_id", Integer),
    Column("start_at", DateTime(timezone=True), nullable=False),
    Column("due_at", DateTime(timezone=True), nullable=False),
    Column("returned_at", DateTime(timezone=True)),
    Column("status", String(50), nullable=False, server_default="active"),
    Column("notes", Text),
    *_timestamps(),
    Index("ix_assignments_org_start", "organization_id", "start_at"),
)

organization_options = Table(
    "organization_options",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, nullable=False),
    Column("list_key", String(50), nullable=False),
    Column("label", String(100), nullable=False),
    Column("value", String(100), nullable=False),
    Column("description", Text),
    Column("sort", Integer, nullable=False, server_default=text("0")),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    *_timestamps(),
    UniqueConstraint("organization_id", "list_key", "value", name="uq_organization_options_value"),
)
