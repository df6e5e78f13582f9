# tests/test_alert_sweep.py
"""Scenario tests for the daily alert sweep."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock, patch
from sqlalchemy.exc import OperationalError
from app.models.alert import Alert
from app.models.catalogs import DocumentStatus, DocumentStatusName, IncidentStatusName
from app.services.alert_sweep import SweepReport, run_alert_sweep, scan_expired_documents
from app.services.catalog_service import catalog_name, resolve_or_create
from app.services.recipients import RecipientDirectory
from factories import make_bus, make_document, make_incident, make_role, make_user

TODAY = date(2026, 3, 10)


def alert_keys(db):
    return sorted(key for (key,) in db.query(Alert.dedup_key).all())


class TestStaleIncidents:
    @pytest.mark.asyncio
    async def test_stale_incident_alerts_once_per_day(self, db, mail):
        bus = make_bus(db)
        reporter = make_user(db)
        inc = make_incident(db, bus, reporter, IncidentStatusName.REPORTED,
                            occurred_on=TODAY - timedelta(days=10))

        report = await run_alert_sweep(db, today=TODAY)

        assert report.stale_incidents == 1
        alert = db.query(Alert).one()
        assert alert.dedup_key == f"incident_stale|incident:{inc.id}|2026-03-10"
        assert alert.title == f"Unresolved incident #{inc.id}"
        assert alert.priority == "medium"
        assert alert.incident_id == inc.id

        again = await run_alert_sweep(db, today=TODAY)
        assert again.alerts_created == 0
        assert db.query(Alert).count() == 1

    @pytest.mark.asyncio
    async def test_next_day_creates_new_alert(self, db, mail):
        bus = make_bus(db)
        make_incident(db, bus, make_user(db), IncidentStatusName.IN_REVIEW,
                      occurred_on=TODAY - timedelta(days=8))

        await run_alert_sweep(db, today=TODAY)
        await run_alert_sweep(db, today=TODAY + timedelta(days=1))
        assert db.query(Alert).count() == 2

    @pytest.mark.asyncio
    async def test_recent_or_resolved_incidents_ignored(self, db, mail):
        bus = make_bus(db)
        user = make_user(db)
        make_incident(db, bus, user, IncidentStatusName.REPORTED, occurred_on=TODAY - timedelta(days=6))
        make_incident(db, bus, user, IncidentStatusName.RESOLVED, occurred_on=TODAY - timedelta(days=30))

        report = await run_alert_sweep(db, today=TODAY)
        assert report.stale_incidents == 0


class TestDocuments:
    @pytest.mark.asyncio
    async def test_expired_document_is_corrected_and_alerted(self, db, mail):
        vigent_id = resolve_or_create(db, DocumentStatus, DocumentStatusName.VIGENT)
        doc = make_document(db, TODAY - timedelta(days=1), bus=make_bus(db), status_id=vigent_id)

        report = await run_alert_sweep(db, today=TODAY)

        db.refresh(doc)
        assert catalog_name(db, DocumentStatus, doc.status_id) == "EXPIRED"
        assert report.documents_expired == 1
        assert report.documents_status_updated == 1
        alert = db.query(Alert).one()
        assert alert.dedup_key == f"doc_expired|document:{doc.id}|2026-03-09"
        assert alert.priority == "high"

        again = await run_alert_sweep(db, today=TODAY)
        assert again.alerts_created == 0

    @pytest.mark.asyncio
    async def test_failed_alert_insert_keeps_document_for_next_run(self, db, mail):
        vigent_id = resolve_or_create(db, DocumentStatus, DocumentStatusName.VIGENT)
        doc = make_document(db, TODAY - timedelta(days=2), bus=make_bus(db), status_id=vigent_id)
        directory = RecipientDirectory(db)

        with patch("app.services.alert_sweep.emit_alert", new_callable=AsyncMock,
                   side_effect=OperationalError("insert", {}, Exception("db locked"))):
            with pytest.raises(OperationalError):
                await scan_expired_documents(db, TODAY, directory, SweepReport())

        db.refresh(doc)
        assert catalog_name(db, DocumentStatus, doc.status_id) == "VIGENT"

        report = SweepReport()
        await scan_expired_documents(db, TODAY, directory, report)

        assert report.documents_expired == 1
        db.refresh(doc)
        assert catalog_name(db, DocumentStatus, doc.status_id) == "EXPIRED"

    @pytest.mark.asyncio
    async def test_expiring_document_within_window(self, db, mail):
        owner = make_user(db, email="owner@fleet.test")
        doc = make_document(db, TODAY + timedelta(days=30), user=owner)
        make_document(db, TODAY + timedelta(days=31), user=owner, file_name="later.pdf")

        report = await run_alert_sweep(db, today=TODAY)

        assert report.documents_expiring == 1
        assert alert_keys(db) == [f"doc_expiring|document:{doc.id}|2026-04-09"]
        db.refresh(doc)
        assert catalog_name(db, DocumentStatus, doc.status_id) == "EXPIRING_SOON"
        # owner is always a direct recipient
        assert "owner@fleet.test" in mail.call_args[0][0]

    @pytest.mark.asyncio
    async def test_renewed_expiry_alerts_again(self, db, mail):
        doc = make_document(db, TODAY + timedelta(days=5), bus=make_bus(db))
        await run_alert_sweep(db, today=TODAY)

        doc.expiry_date = TODAY + timedelta(days=20)
        db.commit()
        report = await run_alert_sweep(db, today=TODAY)

        assert report.documents_expiring == 1
        assert db.query(Alert).count() == 2


class TestBusExpiries:
    @pytest.mark.asyncio
    async def test_extinguisher_and_inspection(self, db, mail):
        bus = make_bus(
            db,
            extinguisher_expiry=TODAY + timedelta(days=3),
            technical_inspection_expiry=TODAY + timedelta(days=15),
        )
        make_bus(db, plate="ZZ-9999", extinguisher_expiry=TODAY - timedelta(days=1))

        report = await run_alert_sweep(db, today=TODAY)

        assert report.extinguishers == 1
        assert report.technical_inspections == 1
        assert alert_keys(db) == [
            f"extinguisher|bus:{bus.id}|2026-03-13",
            f"technical_inspection|bus:{bus.id}|2026-03-25",
        ]
        priorities = {a.dedup_key.split("|")[0]: a.priority for a in db.query(Alert).all()}
        assert priorities == {"extinguisher": "high", "technical_inspection": "medium"}

    @pytest.mark.asyncio
    async def test_window_override(self, db, mail):
        make_bus(db, extinguisher_expiry=TODAY + timedelta(days=10))
        report = await run_alert_sweep(db, window_days=5, today=TODAY)
        assert report.extinguishers == 0


class TestRecipients:
    @pytest.mark.asyncio
    async def test_unowned_document_goes_to_fallback_address(self, db, mail, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "ALERTS_DEFAULT_ROLES", "fleet_manager")
        monkeypatch.setattr(settings, "ALERTS_FALLBACK_TO", "admin@fleet.test")
        make_role(db, "fleet_manager")
        make_document(db, TODAY + timedelta(days=10))

        report = await run_alert_sweep(db, today=TODAY)

        assert report.documents_expiring == 1
        assert mail.call_args[0][0] == ["admin@fleet.test"]

    @pytest.mark.asyncio
    async def test_role_members_receive_sweep_alerts(self, db, mail, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "ALERTS_DEFAULT_ROLES", "fleet_manager")
        manager = make_role(db, "fleet_manager")
        make_user(db, name="Boss", email="boss@fleet.test", roles=[manager])
        make_bus(db, extinguisher_expiry=TODAY)

        await run_alert_sweep(db, today=TODAY)

        assert mail.call_args[0][0] == ["boss@fleet.test"]
