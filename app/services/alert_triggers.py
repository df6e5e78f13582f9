# app/services/alert_triggers.py
"""
Immediate alerts: one alert per entity event, emitted right after the mutation.

  incident created        → high,   incident_created|incident:<id>
  maintenance created     → medium, maintenance_created|maintenance:<id>
  maintenance completed   → medium, maintenance_completed|maintenance:<id>
  shift assigned          → medium, shift_assigned|shift:<id>
  shift cancelled         → medium, shift_cancelled|shift:<id>

Keys are permanent, so a repeated call for the same entity is a no-op.
A missing entity is a no-op too. Errors propagate; app.services.fleet_events
is the caller that logs and swallows them.
"""

from html import escape
from typing import Optional

from sqlalchemy.orm import Session

from app.config import AlertCategory
from app.models.alert import Alert
from app.models.incident import Incident
from app.models.maintenance import Maintenance
from app.models.shift import Shift
from app.services.alert_service import (
    AlertDraft, AlertPriority, dedup_key, detail_list, emit_alert, join_description, paragraph,
)
from app.services.recipients import RecipientDirectory, merge_recipients, user_email
from app.utils.time import short_datetime, ymd


def _money(value) -> Optional[str]:
    return f"${value}" if value else None


def _maintenance_lines(mant: Maintenance) -> list:
    return [
        ("Bus", mant.bus.label if mant.bus else None),
        ("Type", mant.maintenance_type),
        ("Workshop", mant.workshop.name if mant.workshop else None),
        ("Date", ymd(mant.scheduled_on)),
        ("Labor cost", _money(mant.labor_cost)),
        ("Parts cost", _money(mant.parts_cost)),
        ("Total cost", _money(mant.total_cost)),
    ]


def _maintenance_description(mant: Maintenance) -> str:
    return join_description(f"{label}: {value}" for label, value in _maintenance_lines(mant) if value)


def _shift_lines(shift: Shift, prefix: str = "") -> list:
    route = None
    if shift.route_origin or shift.route_destination:
        route = f"{shift.route_origin or '—'} → {shift.route_destination or '—'}"
    return [
        ("Bus", shift.bus.label if shift.bus else None),
        (f"{prefix}Start", short_datetime(shift.starts_at)),
        (f"{prefix}End", short_datetime(shift.ends_at)),
        ("Route", route),
        ("Status", shift.status.name if shift.status else None),
    ]


async def alert_incident_created(db: Session, incident_id: int) -> Optional[Alert]:
    inc = db.query(Incident).filter(Incident.id == incident_id).first()
    if not inc:
        return None

    draft = AlertDraft(
        dedup_key=dedup_key("incident_created", "incident", inc.id),
        alert_type="incident_created",
        category="Incident",
        title=f"Incident registered #{inc.id}",
        description=join_description([
            f"Type: {inc.incident_type or 'Incident'}",
            inc.bus and f"Bus: {inc.bus.label}",
            inc.user and f"User: {inc.user.name}",
            f"Date: {ymd(inc.occurred_on)}",
            inc.urgency and f"Urgency: {inc.urgency}",
            inc.location and f"Location: {inc.location}",
        ]),
        priority=AlertPriority.HIGH,
        incident_id=inc.id,
        bus_id=inc.bus_id,
        user_id=inc.user_id,
        subject=f"🚨 New incident #{inc.id}",
        heading="New incident registered",
        body_html=(
            "<p>A new incident has been registered:</p>"
            + detail_list([
                ("Incident", f"#{inc.id}"),
                ("Type", inc.incident_type),
                ("Status", inc.status.name if inc.status else None),
                ("Bus", inc.bus.label if inc.bus else None),
                ("Date", ymd(inc.occurred_on)),
                ("Urgency", inc.urgency),
                ("Location", inc.location),
            ])
            + (paragraph(f"Description: {inc.description}") if inc.description else "")
        ),
    )
    directory = RecipientDirectory(db)
    reporter = user_email(inc.user)
    return await emit_alert(db, draft, lambda: directory.recipients(AlertCategory.INCIDENTS, reporter))


async def alert_maintenance_created(db: Session, maintenance_id: int) -> Optional[Alert]:
    mant = db.query(Maintenance).filter(Maintenance.id == maintenance_id).first()
    if not mant:
        return None

    draft = AlertDraft(
        dedup_key=dedup_key("maintenance_created", "maintenance", mant.id),
        alert_type="maintenance_created",
        category="Maintenance",
        title=f"Maintenance registered #{mant.id}",
        description=_maintenance_description(mant),
        priority=AlertPriority.MEDIUM,
        maintenance_id=mant.id,
        bus_id=mant.bus_id,
        subject=f"🛠 New maintenance — Bus {mant.bus.label if mant.bus else mant.bus_id}",
        heading="New maintenance registered",
        body_html=(
            "<p>A new maintenance job has been registered:</p>"
            + detail_list([("Maintenance", f"#{mant.id}")] + _maintenance_lines(mant))
            + (paragraph(f"Notes: {mant.notes}") if mant.notes else "")
        ),
    )
    directory = RecipientDirectory(db)
    return await emit_alert(db, draft, lambda: directory.recipients(AlertCategory.MAINTENANCE))


async def alert_maintenance_completed(db: Session, maintenance_id: int) -> Optional[Alert]:
    mant = db.query(Maintenance).filter(Maintenance.id == maintenance_id).first()
    if not mant:
        return None

    draft = AlertDraft(
        dedup_key=dedup_key("maintenance_completed", "maintenance", mant.id),
        alert_type="maintenance_completed",
        category="Maintenance",
        title=f"Maintenance finished #{mant.id}",
        description=_maintenance_description(mant),
        priority=AlertPriority.MEDIUM,
        maintenance_id=mant.id,
        bus_id=mant.bus_id,
        subject=f"✅ Maintenance finished — Bus {mant.bus.label if mant.bus else mant.bus_id}",
        heading="Maintenance finished",
        body_html=(
            "<p>A maintenance job has been marked <b>COMPLETED</b>:</p>"
            + detail_list([("Maintenance", f"#{mant.id}")] + _maintenance_lines(mant))
        ),
    )
    directory = RecipientDirectory(db)
    return await emit_alert(db, draft, lambda: directory.recipients(AlertCategory.MAINTENANCE))


async def alert_shift_assigned(db: Session, shift_id: int) -> Optional[Alert]:
    shift = db.query(Shift).filter(Shift.id == shift_id).first()
    if not shift:
        return None

    driver = shift.user
    draft = AlertDraft(
        dedup_key=dedup_key("shift_assigned", "shift", shift.id),
        alert_type="shift_assigned",
        category="Shift",
        title=f"Shift assigned #{shift.id}",
        description=join_description(
            [driver and f"Driver: {driver.name or driver.id}"]
            + [f"{label}: {value}" for label, value in _shift_lines(shift) if value]
        ),
        priority=AlertPriority.MEDIUM,
        bus_id=shift.bus_id,
        user_id=shift.user_id,
        subject="🚌 New shift assigned",
        heading="New shift assigned",
        body_html=(
            f"<p>Hello {escape(driver.name) if driver else ''},</p>"
            + "<p>You have been assigned a new shift:</p>"
            + detail_list(_shift_lines(shift))
            + paragraph("Please review your schedule before the shift starts.")
        ),
    )
    return await emit_alert(db, draft, lambda: merge_recipients([user_email(driver)]))


async def alert_shift_cancelled(db: Session, shift_id: int) -> Optional[Alert]:
    shift = db.query(Shift).filter(Shift.id == shift_id).first()
    if not shift:
        return None

    driver = shift.user
    draft = AlertDraft(
        dedup_key=dedup_key("shift_cancelled", "shift", shift.id),
        alert_type="shift_cancelled",
        category="Shift",
        title=f"Shift cancelled #{shift.id}",
        description=join_description(
            [driver and f"Driver: {driver.name or driver.id}"]
            + [f"{label}: {value}" for label, value in _shift_lines(shift, "Original ") if value]
        ),
        priority=AlertPriority.MEDIUM,
        bus_id=shift.bus_id,
        user_id=shift.user_id,
        subject="⚠️ Shift cancelled",
        heading="Shift cancelled",
        body_html=(
            f"<p>Hello {escape(driver.name) if driver else ''},</p>"
            + "<p>One of your shifts has been cancelled:</p>"
            + detail_list(_shift_lines(shift, "Original "))
            + paragraph("If you have questions about this cancellation, please contact your coordinator.")
        ),
    )
    return await emit_alert(db, draft, lambda: merge_recipients([user_email(driver)]))
