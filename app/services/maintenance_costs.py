# app/services/maintenance_costs.py
"""
Maintenance cost bookkeeping.
Invariant: total_cost == labor_cost + parts_cost after every change to either.
parts_cost is the sum of unit_cost × quantity over the job's part lines.
"""

from decimal import Decimal

from sqlalchemy.orm import Session

from app.models.maintenance import Maintenance, MaintenancePart
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def parts_total(lines) -> Decimal:
    return sum((_dec(line.part.unit_cost) * line.quantity for line in lines), Decimal("0"))


def set_labor_cost(mant: Maintenance, labor_cost) -> None:
    """Update labor cost and keep the total in step (caller commits)."""
    if labor_cost is not None and _dec(labor_cost) < 0:
        raise ValueError("labor_cost cannot be negative")
    mant.labor_cost = _dec(labor_cost)
    mant.total_cost = mant.labor_cost + _dec(mant.parts_cost)


def recompute_maintenance_costs(db: Session, maintenance_id: int):
    """Recalculate parts_cost from the part lines, then total_cost. Commits."""
    mant = db.query(Maintenance).filter(Maintenance.id == maintenance_id).first()
    if not mant:
        return None

    lines = db.query(MaintenancePart).filter(MaintenancePart.maintenance_id == maintenance_id).all()
    mant.parts_cost = parts_total(lines)
    mant.total_cost = _dec(mant.labor_cost) + mant.parts_cost
    db.commit()
    logger.info(f"[MAINT] #{maintenance_id}: parts={mant.parts_cost} total={mant.total_cost}")
    return mant


def upsert_part_line(db: Session, maintenance_id: int, part_id: int, quantity: int = 1):
    """Add a part to a job (or replace its quantity) and recompute costs."""
    if quantity <= 0:
        raise ValueError("quantity must be greater than 0")
    line = db.query(MaintenancePart).filter(
        MaintenancePart.maintenance_id == maintenance_id, MaintenancePart.part_id == part_id
    ).first()
    if line:
        line.quantity = quantity
    else:
        db.add(MaintenancePart(maintenance_id=maintenance_id, part_id=part_id, quantity=quantity))
    db.commit()
    return recompute_maintenance_costs(db, maintenance_id)


def remove_part_line(db: Session, maintenance_id: int, part_id: int):
    """Drop a part from a job and recompute costs. None when the line does not exist."""
    line = db.query(MaintenancePart).filter(
        MaintenancePart.maintenance_id == maintenance_id, MaintenancePart.part_id == part_id
    ).first()
    if not line:
        return None
    db.delete(line)
    db.commit()
    return recompute_maintenance_costs(db, maintenance_id)
