from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import create_engine, delete, desc, event, func, insert, select, update
from sqlalchemy.engine import Engine

from services.canvass_api.app.repositories.schema import (
    addresses,
    assignments,
    metadata,
    organization_options,
    territories,
    territory_streets,
    visits,
)


logger = logging.getLogger(__name__)

_COORDINATE_DECIMALS = 7


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Any) -> Any:
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _prepare(values: dict[str, Any]) -> dict[str, Any]:
    prepared = {key: _as_utc(value) for key, value in values.items()}
    for key in ("lat", "lng"):
        if prepared.get(key) is not None:
            prepared[key] = round(float(prepared[key]), _COORDINATE_DECIMALS)
    return prepared


def _sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class CanvassRepository:
    """Row-level storage for territories, addresses, visits and street geometry.

    Each public method runs in its own transaction. Batch inserts are a single
    statement so a failing row rolls back the whole batch.
    """

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[Engine] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            url = self._database_url
            if url.startswith("sqlite"):
                engine = create_engine(url, connect_args={"check_same_thread": False})
                event.listen(engine, "connect", _sqlite_foreign_keys)
            elif url.startswith("postgresql"):
                engine = create_engine(url, pool_pre_ping=True)
            else:
                raise RuntimeError("DATABASE_URL must be postgresql:// or sqlite://")
            self._engine = engine
        return self._engine

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def _insert_stmt(self, table: Any) -> Any:
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as dialect_insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as dialect_insert
        else:
            raise RuntimeError(f"upsert not supported for dialect {dialect}")
        return dialect_insert(table)

    def _fetch_one(self, stmt: Any) -> Optional[dict[str, Any]]:
        with self.engine.begin() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row else None

    def _fetch_all(self, stmt: Any) -> list[dict[str, Any]]:
        with self.engine.begin() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(item) for item in rows]

    # territories

    def create_territory(self, organization_id: int, values: dict[str, Any]) -> dict[str, Any]:
        now = _utc_now()
        row = {**values, "organization_id": organization_id, "created_at": now, "updated_at": now}
        with self.engine.begin() as conn:
            territory_id = conn.execute(insert(territories).values(**row)).inserted_primary_key[0]
        return self.get_territory(territory_id)

    def get_territory(self, territory_id: int) -> Optional[dict[str, Any]]:
        return self._fetch_one(select(territories).where(territories.c.id == territory_id))

    def find_territory_by_code(self, organization_id: int, code: str) -> Optional[dict[str, Any]]:
        return self._fetch_one(
            select(territories).where(territories.c.organization_id == organization_id, territories.c.code == code)
        )

    def update_territory(self, territory_id: int, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        row = {**values, "updated_at": _utc_now()}
        with self.engine.begin() as conn:
            conn.execute(update(territories).where(territories.c.id == territory_id).values(**row))
        return self.get_territory(territory_id)

    def delete_territory(self, territory_id: int) -> None:
        """Remove a territory with everything filed under it, in one transaction."""
        address_ids = select(addresses.c.id).where(addresses.c.territory_id == territory_id)
        with self.engine.begin() as conn:
            conn.execute(delete(visits).where(visits.c.address_id.in_(address_ids)))
            conn.execute(delete(addresses).where(addresses.c.territory_id == territory_id))
            conn.execute(delete(territory_streets).where(territory_streets.c.territory_id == territory_id))
            conn.execute(delete(assignments).where(assignments.c.territory_id == territory_id))
            conn.execute(
                update(territories).where(territories.c.parent_id == territory_id).values(parent_id=None)
            )
            conn.execute(delete(territories).where(territories.c.id == territory_id))
        logger.info("Deleted territory %s", territory_id)

    def list_territories(self, organization_id: int) -> list[dict[str, Any]]:
        address_count = (
            select(func.count(addresses.c.id))
            .where(addresses.c.territory_id == territories.c.id)
            .scalar_subquery()
            .label("addresses_count")
        )
        stmt = (
            select(
                territories.c.id,
                territories.c.organization_id,
                territories.c.code,
                territories.c.name,
                territories.c.territory_type,
                territories.c.dominant_language,
                territories.c.updated_at,
                address_count,
            )
            .where(territories.c.organization_id == organization_id)
            .order_by(territories.c.code)
        )
        return self._fetch_all(stmt)

    def list_territory_addresses(self, territory_id: int) -> list[dict[str, Any]]:
        stmt = (
            select(addresses)
            .where(addresses.c.territory_id == territory_id)
            .order_by(addresses.c.street, addresses.c.label, addresses.c.id)
        )
        return self._fetch_all(stmt)

    # addresses

    def insert_address(self, values: dict[str, Any]) -> dict[str, Any]:
        now = _utc_now()
        row = _prepare({**values, "created_at": now, "updated_at": now})
        with self.engine.begin() as conn:
            address_id = conn.execute(insert(addresses).values(**row)).inserted_primary_key[0]
        return self.get_address(address_id)

    def insert_addresses(self, rows: list[dict[str, Any]]) -> int:
        if not rows:
            return 0
        now = _utc_now()
        prepared = [_prepare({**row, "created_at": now, "updated_at": now}) for row in rows]
        # executemany needs a uniform key set across rows.
        keys = sorted({key for row in prepared for key in row})
        prepared = [{key: row.get(key) for key in keys} for row in prepared]
        with self.engine.begin() as conn:
            conn.execute(insert(addresses), prepared)
        logger.info("Inserted %s address rows into territory %s", len(prepared), prepared[0].get("territory_id"))
        return len(prepared)

    def get_address(self, address_id: int) -> Optional[dict[str, Any]]:
        return self._fetch_one(select(addresses).where(addresses.c.id == address_id))

    def update_address(self, address_id: int, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        row = _prepare({**values, "updated_at": _utc_now()})
        with self.engine.begin() as conn:
            conn.execute(update(addresses).where(addresses.c.id == address_id).values(**row))
        return self.get_address(address_id)

    def delete_address(self, address_id: int) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(visits).where(visits.c.address_id == address_id))
            conn.execute(delete(addresses).where(addresses.c.id == address_id))

    # visits

    def insert_visit(self, values: dict[str, Any]) -> dict[str, Any]:
        now = _utc_now()
        row = _prepare({**values, "created_at": now, "updated_at": now})
        with self.engine.begin() as conn:
            visit_id = conn.execute(insert(visits).values(**row)).inserted_primary_key[0]
        return self.get_visit(visit_id)

    def get_visit(self, visit_id: int) -> Optional[dict[str, Any]]:
        return self._fetch_one(select(visits).where(visits.c.id == visit_id))

    def update_visit(self, visit_id: int, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        row = _prepare({**values, "updated_at": _utc_now()})
        with self.engine.begin() as conn:
            conn.execute(update(visits).where(visits.c.id == visit_id).values(**row))
        return self.get_visit(visit_id)

    def delete_visit(self, visit_id: int) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(visits).where(visits.c.id == visit_id))

    def latest_visit(self, address_id: int) -> Optional[dict[str, Any]]:
        stmt = (
            select(visits)
            .where(visits.c.address_id == address_id)
            .order_by(desc(visits.c.visited_at), desc(visits.c.id))
            .limit(1)
        )
        return self._fetch_one(stmt)

    def list_visits(self, address_id: int) -> list[dict[str, Any]]:
        stmt = (
            select(visits)
            .where(visits.c.address_id == address_id)
            .order_by(desc(visits.c.visited_at), desc(visits.c.id))
        )
        return self._fetch_all(stmt)

    # street geometry

    def get_street(self, territory_id: int, name_normalized: str) -> Optional[dict[str, Any]]:
        stmt = select(territory_streets).where(
            territory_streets.c.territory_id == territory_id,
            territory_streets.c.name_normalized == name_normalized,
        )
        return self._fetch_one(stmt)

    def list_streets(self, territory_id: int) -> list[dict[str, Any]]:
        stmt = (
            select(territory_streets)
            .where(territory_streets.c.territory_id == territory_id)
            .order_by(territory_streets.c.name)
        )
        return self._fetch_all(stmt)

    def upsert_street(
        self,
        territory_id: int,
        name: str,
        name_normalized: str,
        geojson: Optional[dict[str, Any]],
        source: str,
    ) -> dict[str, Any]:
        now = _utc_now()
        stmt = self._insert_stmt(territory_streets).values(
            territory_id=territory_id,
            name=name,
            name_normalized=name_normalized,
            geojson=geojson,
            source=source,
            created_at=now,
            updated_at=now,
        )
        # A concurrent insert for the same key lands here as an update.
        stmt = stmt.on_conflict_do_update(
            index_elements=[territory_streets.c.territory_id, territory_streets.c.name_normalized],
            set_={
                "name": stmt.excluded.name,
                "geojson": stmt.excluded.geojson,
                "source": stmt.excluded.source,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)
        return self.get_street(territory_id, name_normalized)

    # assignments

    def insert_assignment(self, values: dict[str, Any]) -> dict[str, Any]:
        now = _utc_now()
        row = _prepare({**values, "created_at": now, "updated_at": now})
        with self.engine.begin() as conn:
            assignment_id = conn.execute(insert(assignments).values(**row)).inserted_primary_key[0]
        return self.get_assignment(assignment_id)

    def get_assignment(self, assignment_id: int) -> Optional[dict[str, Any]]:
        return self._fetch_one(select(assignments).where(assignments.c.id == assignment_id))

    def update_assignment(self, assignment_id: int, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        row = _prepare({**values, "updated_at": _utc_now()})
        with self.engine.begin() as conn:
            conn.execute(update(assignments).where(assignments.c.id == assignment_id).values(**row))
        return self.get_assignment(assignment_id)

    def delete_assignment(self, assignment_id: int) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(assignments).where(assignments.c.id == assignment_id))

    def list_assignments(self, organization_id: int) -> list[dict[str, Any]]:
        stmt = (
            select(
                assignments,
                territories.c.code.label("territory_code"),
                territories.c.name.label("territory_name"),
            )
            .join(territories, territories.c.id == assignments.c.territory_id)
            .where(assignments.c.organization_id == organization_id)
            .order_by(desc(assignments.c.start_at), desc(assignments.c.id))
        )
        return self._fetch_all(stmt)

    # organization options

    def list_options(self, organization_id: int) -> list[dict[str, Any]]:
        stmt = (
            select(organization_options)
            .where(organization_options.c.organization_id == organization_id)
            .order_by(organization_options.c.list_key, organization_options.c.sort, organization_options.c.label)
        )
        return self._fetch_all(stmt)

    def get_option(self, option_id: int) -> Optional[dict[str, Any]]:
        return self._fetch_one(select(organization_options).where(organization_options.c.id == option_id))

    def upsert_option(self, organization_id: int, list_key: str, value: str, label: str, sort: int) -> dict[str, Any]:
        now = _utc_now()
        stmt = self._insert_stmt(organization_options).values(
            organization_id=organization_id,
            list_key=list_key,
            value=value,
            label=label,
            sort=sort,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                organization_options.c.organization_id,
                organization_options.c.list_key,
                organization_options.c.value,
            ],
            set_={
                "label": stmt.excluded.label,
                "sort": stmt.excluded.sort,
                "is_active": stmt.excluded.is_active,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)
        return self._fetch_one(
            select(organization_options).where(
                organization_options.c.organization_id == organization_id,
                organization_options.c.list_key == list_key,
                organization_options.c.value == value,
            )
        )

    def delete_option(self, option_id: int) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(organization_options).where(organization_options.c.id == option_id))
