# tests/test_bus_state.py
"""Tests for bus status derivation and reconciliation."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy import event
from app.models.catalogs import BusStatusName, IncidentStatusName, MaintenanceStatusName
from app.services.bus_state import derive_bus_status, reconcile_bus_status
from app.services.catalog_service import catalog_name
from app.models.catalogs import BusStatus
from factories import make_bus, make_incident, make_maintenance, make_user


def bus_status(db, bus):
    db.refresh(bus)
    return catalog_name(db, BusStatus, bus.status_id)


class TestDeriveBusStatus:
    @pytest.mark.parametrize("incidents, maintenances, expected", [
        (0, 0, BusStatusName.OPERATIONAL),
        (0, 2, BusStatusName.MAINTENANCE),
        (1, 0, BusStatusName.OUT_OF_SERVICE),
        (1, 1, BusStatusName.OUT_OF_SERVICE),
    ])
    def test_priority(self, incidents, maintenances, expected):
        assert derive_bus_status(incidents, maintenances) == expected


class TestReconcileBusStatus:
    @pytest.mark.asyncio
    async def test_open_incident_wins_over_maintenance(self, db):
        bus = make_bus(db)
        make_maintenance(db, bus, MaintenanceStatusName.IN_PROCESS)
        make_incident(db, bus, make_user(db), IncidentStatusName.IN_REVIEW)

        await reconcile_bus_status(db, bus.id)
        assert bus_status(db, bus) == "OUT_OF_SERVICE"

    @pytest.mark.asyncio
    async def test_active_maintenance(self, db):
        bus = make_bus(db)
        make_maintenance(db, bus, MaintenanceStatusName.PENDING)

        await reconcile_bus_status(db, bus.id)
        assert bus_status(db, bus) == "MAINTENANCE"

    @pytest.mark.asyncio
    async def test_closed_records_leave_bus_operational(self, db):
        bus = make_bus(db, status=BusStatusName.OUT_OF_SERVICE)
        make_incident(db, bus, make_user(db), IncidentStatusName.RESOLVED)
        make_maintenance(db, bus, MaintenanceStatusName.COMPLETED)

        await reconcile_bus_status(db, bus.id)
        assert bus_status(db, bus) == "OPERATIONAL"

    @pytest.mark.asyncio
    async def test_no_write_when_status_unchanged(self, db, engine):
        bus = make_bus(db, status=BusStatusName.OPERATIONAL)
        updates = []

        def count_bus_updates(conn, cursor, statement, parameters, context, executemany):
            if statement.startswith("UPDATE buses"):
                updates.append(statement)

        event.listen(engine, "before_cursor_execute", count_bus_updates)
        try:
            await reconcile_bus_status(db, bus.id)
        finally:
            event.remove(engine, "before_cursor_execute", count_bus_updates)

        assert updates == []
        assert bus_status(db, bus) == "OPERATIONAL"

    @pytest.mark.asyncio
    async def test_missing_bus_is_noop(self, db):
        await reconcile_bus_status(db, 999)
