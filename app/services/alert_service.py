# app/services/alert_service.py
"""
Shared alert creation service.
Used by the daily sweep (alert_sweep) and the immediate triggers (alert_triggers).

Every alert carries a dedup key identifying one condition instance:
    "<condition>|<entity-kind>:<entity-id>|<discriminator>"
The alerts table has a unique constraint on that key. Inserting an existing key
is a no-op, and only a fresh insert goes on to notify recipients, so each
condition instance produces at most one alert and at most one e-mail no matter
how many times (or how concurrently) it is evaluated.
"""

from dataclasses import dataclass
from enum import Enum
from html import escape
from typing import Callable, Iterable, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.alert import Alert
from app.models.catalogs import AlertStatus, AlertStatusName, AlertType
from app.services.catalog_service import resolve_or_create
from app.services.notifier import send_alert_email
from app.utils.logger import get_logger

logger = get_logger(__name__)


class AlertPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def dedup_key(condition: str, entity_kind: str, entity_id: int, discriminator: Optional[str] = None) -> str:
    """Permanent one-shot keys omit the discriminator."""
    key = f"{condition}|{entity_kind}:{entity_id}"
    return f"{key}|{discriminator}" if discriminator else key


@dataclass
class AlertDraft:
    dedup_key: str
    alert_type: str
    category: str
    title: str
    priority: AlertPriority
    description: Optional[str] = None
    bus_id: Optional[int] = None
    user_id: Optional[int] = None
    document_id: Optional[int] = None
    incident_id: Optional[int] = None
    maintenance_id: Optional[int] = None
    # e-mail
    subject: str = ""
    heading: str = ""
    body_html: str = ""


Recipients = Union[Iterable[str], Callable[[], Iterable[str]]]


def join_description(parts: Iterable[Optional[str]]) -> str:
    return " · ".join(p for p in parts if p)


def detail_list(items: Iterable[tuple]) -> str:
    """<ul> of (label, value) pairs; pairs with an empty value are skipped."""
    rows = [
        f"<li><b>{escape(label)}:</b> {escape(str(value))}</li>"
        for label, value in items
        if value not in (None, "")
    ]
    return '<ul style="padding-left:18px;">' + "".join(rows) + "</ul>"


def paragraph(text: str, small: bool = False) -> str:
    style = "margin-top:8px;font-size:12px;color:#6b7280;" if small else "margin-top:12px;"
    return f'<p style="{style}">{escape(text)}</p>'


def alert_exists(db: Session, key: str) -> bool:
    return db.query(Alert.id).filter(Alert.dedup_key == key).first() is not None


async def create_alert(db: Session, draft: AlertDraft) -> Optional[Alert]:
    """
    Insert the alert. Returns the new row, or None when an alert with the same
    dedup key already exists. Any other store failure propagates.
    """
    status_id = resolve_or_create(db, AlertStatus, AlertStatusName.ACTIVE)
    type_id = resolve_or_create(db, AlertType, draft.alert_type, category=draft.category)

    alert = Alert(
        dedup_key=draft.dedup_key,
        title=draft.title,
        description=draft.description,
        priority=draft.priority.value,
        status_id=status_id,
        type_id=type_id,
        bus_id=draft.bus_id,
        user_id=draft.user_id,
        document_id=draft.document_id,
        incident_id=draft.incident_id,
        maintenance_id=draft.maintenance_id,
    )
    db.add(alert)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if alert_exists(db, draft.dedup_key):
            logger.debug(f"[ALERT] duplicate {draft.dedup_key} — skipped")
            return None
        raise

    logger.warning(f"[ALERT][{draft.alert_type.upper()}] {draft.title}")
    return alert


async def emit_alert(db: Session, draft: AlertDraft, recipients: Recipients) -> Optional[Alert]:
    """
    create_alert() then, only for a fresh insert, resolve recipients and send
    the e-mail. Delivery failures are logged; the alert row stays.
    """
    alert = await create_alert(db, draft)
    if alert is None:
        return None

    to = list(recipients() if callable(recipients) else recipients)
    if not to:
        logger.info(f"[ALERT] {draft.dedup_key}: no recipients resolved, e-mail skipped")
        return alert

    body = draft.body_html + (
        '<p style="margin-top:8px;font-size:12px;color:#6b7280;">'
        f"<b>Alert ID:</b> <code>{alert.id}</code></p>"
    )
    try:
        await send_alert_email(to, draft.subject or draft.title, draft.heading or draft.title, body)
    except Exception as exc:
        logger.error(f"[ALERT] {draft.dedup_key}: e-mail to {to} failed: {exc}", exc_info=True)
    return alert
