# app/services/bus_state.py
"""
Bus state reconciliation.
A bus's status is derived from its dependent records, by strict priority:
  open incident (REPORTED / IN_REVIEW)        → OUT_OF_SERVICE
  active maintenance (PENDING / IN_PROCESS)   → MAINTENANCE
  otherwise                                   → OPERATIONAL
Called from app.services.fleet_events after every incident/maintenance mutation.
"""

from sqlalchemy.orm import Session

from app.models.bus import Bus
from app.models.catalogs import (
    BusStatus, BusStatusName, IncidentStatus, MaintenanceStatus,
    ACTIVE_INCIDENT_STATUSES, ACTIVE_MAINTENANCE_STATUSES,
)
from app.models.incident import Incident
from app.models.maintenance import Maintenance
from app.services.catalog_service import find_catalog_id, resolve_or_create
from app.utils.logger import get_logger

logger = get_logger(__name__)


def derive_bus_status(active_incidents: int, active_maintenances: int) -> BusStatusName:
    if active_incidents > 0:
        return BusStatusName.OUT_OF_SERVICE
    if active_maintenances > 0:
        return BusStatusName.MAINTENANCE
    return BusStatusName.OPERATIONAL


def _existing_ids(db: Session, model, names) -> list[int]:
    ids = (find_catalog_id(db, model, name) for name in names)
    return [i for i in ids if i is not None]


def count_active_incidents(db: Session, bus_id: int) -> int:
    status_ids = _existing_ids(db, IncidentStatus, ACTIVE_INCIDENT_STATUSES)
    if not status_ids:
        return 0
    return db.query(Incident).filter(
        Incident.bus_id == bus_id, Incident.status_id.in_(status_ids)
    ).count()


def count_active_maintenances(db: Session, bus_id: int) -> int:
    status_ids = _existing_ids(db, MaintenanceStatus, ACTIVE_MAINTENANCE_STATUSES)
    if not status_ids:
        return 0
    return db.query(Maintenance).filter(
        Maintenance.bus_id == bus_id, Maintenance.status_id.in_(status_ids)
    ).count()


async def reconcile_bus_status(db: Session, bus_id: int):
    """Recompute and persist the bus status. No write when it is already right."""
    bus = db.query(Bus).filter(Bus.id == bus_id).first()
    if not bus:
        return

    incidents = count_active_incidents(db, bus_id)
    maintenances = count_active_maintenances(db, bus_id)
    target = derive_bus_status(incidents, maintenances)

    target_id = resolve_or_create(db, BusStatus, target)
    if bus.status_id == target_id:
        return

    previous = bus.status_id
    bus.status_id = target_id
    db.commit()
    logger.info(
        f"[BUS] {bus.label}: status {previous} → {target.value} "
        f"(open incidents={incidents}, active maintenances={maintenances})"
    )
