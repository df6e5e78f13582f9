# app/routers/shifts.py
"""Driver shifts: assign / update. The driver is notified via fleet_events."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.bus import Bus
from app.models.catalogs import ShiftStatus, ShiftStatusName
from app.models.shift import Shift
from app.models.user import User
from app.schemas.shift import ShiftCreate, ShiftOut, ShiftUpdate
from app.services import fleet_events
from app.services.catalog_service import catalog_name, find_catalog_id, resolve_or_create

router = APIRouter()

# Statuses that keep a bus / driver busy for the shift window
OCCUPYING_STATUSES = (ShiftStatusName.SCHEDULED, ShiftStatusName.IN_PROGRESS)


def _find_conflict(db: Session, column, value: int, starts_at: datetime, ends_at: datetime,
                   exclude_id: Optional[int] = None) -> Optional[Shift]:
    status_ids = [i for i in (find_catalog_id(db, ShiftStatus, s) for s in OCCUPYING_STATUSES) if i is not None]
    q = db.query(Shift).filter(
        column == value,
        Shift.starts_at < ends_at,
        Shift.ends_at > starts_at,
        Shift.status_id.in_(status_ids),
    )
    if exclude_id is not None:
        q = q.filter(Shift.id != exclude_id)
    return q.first()


def _check_conflicts(db, bus_id, user_id, starts_at, ends_at, exclude_id=None):
    if _find_conflict(db, Shift.bus_id, bus_id, starts_at, ends_at, exclude_id):
        raise HTTPException(status_code=409, detail="Bus already assigned in that time window")
    if _find_conflict(db, Shift.user_id, user_id, starts_at, ends_at, exclude_id):
        raise HTTPException(status_code=409, detail="Driver already has a shift in that time window")


@router.post("/shifts", response_model=ShiftOut, status_code=201, summary="Assign a shift")
async def create_shift(body: ShiftCreate, db: Session = Depends(get_db)):
    if not db.query(Bus.id).filter(Bus.id == body.bus_id).first():
        raise HTTPException(status_code=400, detail="Bus not found")
    if not db.query(User.id).filter(User.id == body.user_id).first():
        raise HTTPException(status_code=400, detail="Driver not found")
    _check_conflicts(db, body.bus_id, body.user_id, body.starts_at, body.ends_at)

    shift = Shift(**body.model_dump(), status_id=resolve_or_create(db, ShiftStatus, ShiftStatusName.SCHEDULED))
    db.add(shift)
    db.commit()

    await fleet_events.on_shift_created(db, shift.id)
    db.refresh(shift)
    return shift


@router.put("/shifts/{shift_id}", response_model=ShiftOut, summary="Update / cancel a shift")
async def update_shift(shift_id: int, body: ShiftUpdate, db: Session = Depends(get_db)):
    shift = db.query(Shift).filter(Shift.id == shift_id).first()
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")

    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    status = changes.pop("status", None)
    starts_at = changes.get("starts_at") or shift.starts_at
    ends_at = changes.get("ends_at") or shift.ends_at
    if starts_at >= ends_at:
        raise HTTPException(status_code=400, detail="starts_at must be before ends_at")
    bus_id = changes.get("bus_id") or shift.bus_id
    _check_conflicts(db, bus_id, shift.user_id, starts_at, ends_at, exclude_id=shift.id)

    previous_status = catalog_name(db, ShiftStatus, shift.status_id)
    if status:
        shift.status_id = resolve_or_create(db, ShiftStatus, status)
    for field, value in changes.items():
        setattr(shift, field, value)
    db.commit()

    new_status = catalog_name(db, ShiftStatus, shift.status_id)
    await fleet_events.on_shift_updated(db, shift.id, previous_status, new_status)
    db.refresh(shift)
    return shift
