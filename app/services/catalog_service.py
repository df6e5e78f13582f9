# app/services/catalog_service.py
"""
Status / type catalog resolution.
Looks a catalog row up by name (case-insensitive) and creates it when missing.
Nothing is cached across calls: every lookup hits the store.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.catalogs import BusStatus
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _normalise(name) -> str:
    if isinstance(name, Enum):
        name = name.value
    return str(name).strip()


def find_catalog_id(db: Session, model, name) -> Optional[int]:
    """Case-insensitive exact match on model.name. Returns None if absent."""
    wanted = _normalise(name).lower()
    row = db.query(model.id).filter(func.lower(model.name) == wanted).first()
    return row[0] if row else None


def resolve_or_create(db: Session, model, name, description: Optional[str] = None, **extra) -> int:
    """
    Return the id of the catalog row called `name`, creating it if needed.
    A concurrent creator winning the unique(name) race is handled by re-reading.
    """
    name = _normalise(name)
    existing = find_catalog_id(db, model, name)
    if existing is not None:
        return existing

    if description is None and model is BusStatus:
        description = f"Created automatically ({name})"

    row = model(name=name, description=description, **extra)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_catalog_id(db, model, name)
        if existing is None:
            raise
        return existing

    logger.info(f"[CATALOG] {model.__tablename__}: created '{name}' (id={row.id})")
    return row.id


def resolve_many(db: Session, model, names) -> list[int]:
    """Ids for several names of the same catalog, creating missing rows."""
    return [resolve_or_create(db, model, name) for name in names]


def catalog_name(db: Session, model, catalog_id: Optional[int]) -> Optional[str]:
    """Upper-cased name of a catalog row, None if the id is unset or unknown."""
    if catalog_id is None:
        return None
    row = db.query(model.name).filter(model.id == catalog_id).first()
    return row[0].strip().upper() if row else None


def seed_catalogs(db: Session) -> None:
    """Make sure every well-known status name exists. Idempotent."""
    from app.models import catalogs as c

    for model, names in (
        (c.AlertStatus, c.AlertStatusName),
        (c.DocumentStatus, c.DocumentStatusName),
        (c.IncidentStatus, c.IncidentStatusName),
        (c.MaintenanceStatus, c.MaintenanceStatusName),
        (c.BusStatus, c.BusStatusName),
        (c.ShiftStatus, c.ShiftStatusName),
    ):
        resolve_many(db, model, list(names))
