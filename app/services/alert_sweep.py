# app/services/alert_sweep.py
"""
Daily alert sweep.
Runs five independent scans, one after the other, each row processed in turn:

  1. documents expiring within the window   → medium, per document + expiry date
  2. documents already expired (status fix) → high,   per document + expiry date
  3. fire extinguishers expiring            → high,   per bus + expiry date
  4. technical inspections expiring         → medium, per bus + expiry date
  5. incidents open for 7+ days             → medium, per incident + today

Time-windowed conditions re-alert at most once per distinct dedup key, so the
sweep can be re-run (or crash half-way and be re-run) safely.
Triggered by app.services.scheduler and POST /api/v1/alerts/generate.
"""

from dataclasses import dataclass, asdict
from datetime import date, timedelta
from functools import partial
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings, AlertCategory
from app.models.bus import Bus
from app.models.catalogs import (
    DocumentStatus, DocumentStatusName, IncidentStatus, ACTIVE_INCIDENT_STATUSES,
)
from app.models.document import Document
from app.models.incident import Incident
from app.services.alert_service import (
    AlertDraft, AlertPriority, dedup_key, detail_list, emit_alert, join_description, paragraph,
)
from app.services.catalog_service import find_catalog_id, resolve_or_create
from app.services.document_status import classify_document
from app.services.recipients import RecipientDirectory, user_email
from app.utils.logger import get_logger
from app.utils.time import today as local_today, ymd

logger = get_logger(__name__)


@dataclass
class SweepReport:
    documents_expiring: int = 0
    documents_expired: int = 0
    documents_status_updated: int = 0
    extinguishers: int = 0
    technical_inspections: int = 0
    stale_incidents: int = 0

    @property
    def alerts_created(self) -> int:
        return (self.documents_expiring + self.documents_expired + self.extinguishers
                + self.technical_inspections + self.stale_incidents)

    def as_dict(self) -> dict:
        return {**asdict(self), "alerts_created": self.alerts_created}


def _document_owner_lines(doc: Document) -> list:
    return [
        ("Document", doc.file_name),
        ("Type", doc.document_type),
        ("Bus", doc.bus.label if doc.bus else None),
        ("User", doc.user.name if doc.user else None),
    ]


def _document_description(doc: Document, expiry_label: str, expiry: str) -> str:
    return join_description([
        doc.document_type and f"Type: {doc.document_type}",
        doc.bus and f"Bus: {doc.bus.label}",
        doc.user and f"User: {doc.user.name or doc.user.id}",
        f"{expiry_label}: {expiry}",
    ])


def _sync_document_status(db: Session, doc: Document, today: date) -> bool:
    """Persist classify_document() as the stored status. True when it changed."""
    status_id = resolve_or_create(db, DocumentStatus, classify_document(doc.expiry_date, today))
    if doc.status_id == status_id:
        return False
    doc.status_id = status_id
    db.commit()
    return True


async def scan_expiring_documents(db: Session, today: date, window_days: int,
                                  directory: RecipientDirectory, report: SweepReport):
    limit = today + timedelta(days=window_days)
    docs = (
        db.query(Document)
        .filter(Document.expiry_date >= today, Document.expiry_date <= limit)
        .order_by(Document.id)
        .all()
    )
    for doc in docs:
        if _sync_document_status(db, doc, today):
            report.documents_status_updated += 1

        expiry = ymd(doc.expiry_date)
        draft = AlertDraft(
            dedup_key=dedup_key("doc_expiring", "document", doc.id, expiry),
            alert_type="document_expiring",
            category="Document",
            title=f"Document expiring: {doc.file_name}",
            description=_document_description(doc, "Expires", expiry),
            priority=AlertPriority.MEDIUM,
            document_id=doc.id,
            bus_id=doc.bus_id,
            user_id=doc.user_id,
            subject=f"⚠️ Document expiring: {doc.file_name}",
            heading="Document about to expire",
            body_html=(
                "<p>A document is about to expire:</p>"
                + detail_list(_document_owner_lines(doc) + [("Expiry date", expiry)])
                + paragraph("Please renew or update this document before it expires.")
            ),
        )
        recipients = partial(directory.recipients, AlertCategory.DOCUMENTS, user_email(doc.user))
        if await emit_alert(db, draft, recipients):
            report.documents_expiring += 1


async def scan_expired_documents(db: Session, today: date,
                                 directory: RecipientDirectory, report: SweepReport):
    expired_id = resolve_or_create(db, DocumentStatus, DocumentStatusName.EXPIRED)
    docs = (
        db.query(Document)
        .filter(
            Document.expiry_date < today,
            or_(Document.status_id.is_(None), Document.status_id != expired_id),
        )
        .order_by(Document.id)
        .all()
    )
    for doc in docs:
        expiry = ymd(doc.expiry_date)
        draft = AlertDraft(
            dedup_key=dedup_key("doc_expired", "document", doc.id, expiry),
            alert_type="document_expired",
            category="Document",
            title=f"Document EXPIRED: {doc.file_name}",
            description=_document_description(doc, "Expired", expiry),
            priority=AlertPriority.HIGH,
            document_id=doc.id,
            bus_id=doc.bus_id,
            user_id=doc.user_id,
            subject=f"⛔ Document expired: {doc.file_name}",
            heading="Document expired",
            body_html=(
                "<p>A document is already <b>EXPIRED</b>:</p>"
                + detail_list(_document_owner_lines(doc) + [("Expiry date", expiry)])
                + paragraph("Please regularise this document or take the vehicle out of service if required.")
            ),
        )
        recipients = partial(directory.recipients, AlertCategory.DOCUMENTS, user_email(doc.user))
        if await emit_alert(db, draft, recipients):
            report.documents_expired += 1

        # Written after the alert insert: a row whose insert failed stays in this scan
        if _sync_document_status(db, doc, today):
            report.documents_status_updated += 1


async def _scan_bus_expiry(db: Session, today: date, window_days: int, column, *,
                           condition: str, alert_type: str, category: str, what: str,
                           priority: AlertPriority, icon: str, advice: str,
                           recipients_category: AlertCategory, directory: RecipientDirectory) -> int:
    limit = today + timedelta(days=window_days)
    buses = (
        db.query(Bus)
        .filter(column >= today, column <= limit)
        .order_by(Bus.id)
        .all()
    )
    created = 0
    for bus in buses:
        expiry = ymd(getattr(bus, column.key))
        draft = AlertDraft(
            dedup_key=dedup_key(condition, "bus", bus.id, expiry),
            alert_type=alert_type,
            category=category,
            title=f"{what} expiring — Bus {bus.label}",
            description=join_description([f"Bus: {bus.label}", f"Expires: {expiry}"]),
            priority=priority,
            bus_id=bus.id,
            subject=f"{icon} {what} expiring — Bus {bus.label}",
            heading=f"{what} about to expire",
            body_html=(
                f"<p>{what} about to expire:</p>"
                + detail_list([("Bus", bus.label), ("Expiry date", expiry)])
                + paragraph(advice)
            ),
        )
        if await emit_alert(db, draft, partial(directory.recipients, recipients_category)):
            created += 1
    return created


async def scan_extinguishers(db: Session, today: date, window_days: int,
                             directory: RecipientDirectory, report: SweepReport):
    report.extinguishers += await _scan_bus_expiry(
        db, today, window_days, Bus.extinguisher_expiry,
        condition="extinguisher", alert_type="extinguisher_expiring", category="Safety",
        what="Fire extinguisher", priority=AlertPriority.HIGH, icon="🔥",
        advice="Please arrange a recharge or replacement in time.",
        recipients_category=AlertCategory.EXTINGUISHERS, directory=directory,
    )


async def scan_technical_inspections(db: Session, today: date, window_days: int,
                                     directory: RecipientDirectory, report: SweepReport):
    report.technical_inspections += await _scan_bus_expiry(
        db, today, window_days, Bus.technical_inspection_expiry,
        condition="technical_inspection", alert_type="technical_inspection_expiring", category="Vehicle",
        what="Technical inspection", priority=AlertPriority.MEDIUM, icon="🔧",
        advice="We recommend booking the inspection as soon as possible.",
        recipients_category=AlertCategory.INSPECTIONS, directory=directory,
    )


async def scan_stale_incidents(db: Session, today: date,
                               directory: RecipientDirectory, report: SweepReport):
    status_ids = [
        sid for sid in (find_catalog_id(db, IncidentStatus, name) for name in ACTIVE_INCIDENT_STATUSES)
        if sid is not None
    ]
    if not status_ids:
        return

    cutoff = today - timedelta(days=settings.ALERTS_STALE_INCIDENT_DAYS)
    incidents = (
        db.query(Incident)
        .filter(Incident.occurred_on <= cutoff, Incident.status_id.in_(status_ids))
        .order_by(Incident.id)
        .all()
    )
    for inc in incidents:
        since = ymd(inc.occurred_on)
        draft = AlertDraft(
            dedup_key=dedup_key("incident_stale", "incident", inc.id, ymd(today)),
            alert_type="incident_stale",
            category="Incident",
            title=f"Unresolved incident #{inc.id}",
            description=join_description([
                f"Since: {since}",
                inc.bus and f"Bus: {inc.bus.label}",
                inc.user and f"User: {inc.user.name or inc.user.id}",
            ]),
            priority=AlertPriority.MEDIUM,
            incident_id=inc.id,
            bus_id=inc.bus_id,
            user_id=inc.user_id,
            subject=f"🚨 Unresolved incident #{inc.id}",
            heading="Incident pending resolution",
            body_html=(
                f"<p>An incident has been open for more than {settings.ALERTS_STALE_INCIDENT_DAYS} days:</p>"
                + detail_list([
                    ("Incident", f"#{inc.id}"),
                    ("Date", since),
                    ("Bus", inc.bus.label if inc.bus else None),
                    ("Reported by", inc.user.name if inc.user else None),
                ])
                + paragraph("Please review it and update its status.")
            ),
        )
        if await emit_alert(db, draft, partial(directory.recipients, AlertCategory.INCIDENTS)):
            report.stale_incidents += 1


async def run_alert_sweep(db: Session, window_days: Optional[int] = None,
                          today: Optional[date] = None) -> SweepReport:
    """Run every scan once. Store failures propagate to the caller."""
    window_days = settings.ALERTS_WINDOW_DAYS if window_days is None else window_days
    today = today or local_today()
    directory = RecipientDirectory(db)
    report = SweepReport()

    logger.info(f"[SWEEP] start — today={today} window={window_days}d")
    await scan_expiring_documents(db, today, window_days, directory, report)
    await scan_expired_documents(db, today, directory, report)
    await scan_extinguishers(db, today, window_days, directory, report)
    await scan_technical_inspections(db, today, window_days, directory, report)
    await scan_stale_incidents(db, today, directory, report)
    logger.info(f"[SWEEP] done — {report.as_dict()}")
    return report
