# app/services/fleet_events.py
"""
Fleet mutation hooks: the single place CRUD handlers report a committed change.

Every hook that touches an incident or a maintenance re-derives the owning
bus status, then fires the matching immediate alert. Routers call these hooks
and nothing else, so no mutation path can forget the bus reconciliation.

Alert failures are logged and never reach the caller: the caller's mutation
is already committed and must succeed regardless. Reconciliation failures
(store errors) do propagate.
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.models.catalogs import MaintenanceStatusName, ShiftStatusName
from app.models.incident import Incident
from app.models.maintenance import Maintenance
from app.services import alert_triggers
from app.services.bus_state import reconcile_bus_status
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _norm(status) -> str:
    return (getattr(status, "value", status) or "").strip().upper()


def entered(previous: Optional[str], new: Optional[str], target) -> bool:
    """True only on the transition *into* target (not on every update while in it)."""
    return _norm(new) == _norm(target) and _norm(previous) != _norm(target)


async def _fire(trigger, db: Session, entity_id: int):
    try:
        await trigger(db, entity_id)
    except Exception as exc:
        db.rollback()
        logger.error(f"[EVENTS] {trigger.__name__}({entity_id}) failed: {exc}", exc_info=True)


async def _reconcile_owner(db: Session, model, entity_id: int):
    row = db.query(model.bus_id).filter(model.id == entity_id).first()
    if row:
        await reconcile_bus_status(db, row[0])


async def on_incident_created(db: Session, incident_id: int):
    await _reconcile_owner(db, Incident, incident_id)
    await _fire(alert_triggers.alert_incident_created, db, incident_id)


async def on_incident_updated(db: Session, incident_id: int, previous_bus_id: Optional[int] = None):
    """Status or bus changed. previous_bus_id lets the old bus be freed on a move."""
    await _reconcile_owner(db, Incident, incident_id)
    if previous_bus_id is not None:
        await reconcile_bus_status(db, previous_bus_id)


async def on_maintenance_created(db: Session, maintenance_id: int):
    await _reconcile_owner(db, Maintenance, maintenance_id)
    await _fire(alert_triggers.alert_maintenance_created, db, maintenance_id)


async def on_maintenance_updated(db: Session, maintenance_id: int,
                                 previous_status: Optional[str], new_status: Optional[str]):
    await _reconcile_owner(db, Maintenance, maintenance_id)
    if entered(previous_status, new_status, MaintenanceStatusName.COMPLETED):
        await _fire(alert_triggers.alert_maintenance_completed, db, maintenance_id)


async def on_shift_created(db: Session, shift_id: int):
    await _fire(alert_triggers.alert_shift_assigned, db, shift_id)


async def on_shift_updated(db: Session, shift_id: int,
                           previous_status: Optional[str], new_status: Optional[str]):
    if entered(previous_status, new_status, ShiftStatusName.CANCELLED):
        await _fire(alert_triggers.alert_shift_cancelled, db, shift_id)


async def reconcile_bus_state(db: Session, bus_id: int):
    """Explicit recompute for one bus (admin repair, data imports)."""
    await reconcile_bus_status(db, bus_id)
