# app/routers/maintenances.py
"""Maintenance jobs: create / update / part lines. Costs kept consistent by maintenance_costs."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.bus import Bus
from app.models.catalogs import MaintenanceStatus
from app.models.maintenance import Maintenance, Part
from app.schemas.maintenance import MaintenanceCreate, MaintenanceOut, MaintenanceUpdate, PartLineIn
from app.services import fleet_events
from app.services.catalog_service import catalog_name, resolve_or_create
from app.services.maintenance_costs import remove_part_line, set_labor_cost, upsert_part_line

router = APIRouter()


@router.post("/maintenances", response_model=MaintenanceOut, status_code=201, summary="Register a maintenance job")
async def create_maintenance(body: MaintenanceCreate, db: Session = Depends(get_db)):
    if not db.query(Bus.id).filter(Bus.id == body.bus_id).first():
        raise HTTPException(status_code=400, detail="Bus not found")

    mant = Maintenance(
        bus_id=body.bus_id,
        workshop_id=body.workshop_id,
        maintenance_type=body.maintenance_type,
        scheduled_on=body.scheduled_on,
        notes=body.notes,
        parts_cost=0,
        status_id=resolve_or_create(db, MaintenanceStatus, body.status),
    )
    set_labor_cost(mant, body.labor_cost)
    db.add(mant)
    db.commit()

    await fleet_events.on_maintenance_created(db, mant.id)
    db.refresh(mant)
    return mant


@router.put("/maintenances/{maintenance_id}", response_model=MaintenanceOut, summary="Update a maintenance job")
async def update_maintenance(maintenance_id: int, body: MaintenanceUpdate, db: Session = Depends(get_db)):
    mant = db.query(Maintenance).filter(Maintenance.id == maintenance_id).first()
    if not mant:
        raise HTTPException(status_code=404, detail="Maintenance not found")

    previous_status = catalog_name(db, MaintenanceStatus, mant.status_id)
    if body.status:
        mant.status_id = resolve_or_create(db, MaintenanceStatus, body.status)
    if body.labor_cost is not None:
        set_labor_cost(mant, body.labor_cost)
    if body.notes is not None:
        mant.notes = body.notes
    db.commit()

    new_status = catalog_name(db, MaintenanceStatus, mant.status_id)
    await fleet_events.on_maintenance_updated(db, mant.id, previous_status, new_status)
    db.refresh(mant)
    return mant


@router.post("/maintenances/{maintenance_id}/parts", response_model=MaintenanceOut, summary="Add or replace a part line")
def add_part(maintenance_id: int, body: PartLineIn, db: Session = Depends(get_db)):
    if not db.query(Maintenance.id).filter(Maintenance.id == maintenance_id).first():
        raise HTTPException(status_code=404, detail="Maintenance not found")
    if not db.query(Part.id).filter(Part.id == body.part_id).first():
        raise HTTPException(status_code=400, detail="Part not found")
    return upsert_part_line(db, maintenance_id, body.part_id, body.quantity)


@router.delete("/maintenances/{maintenance_id}/parts/{part_id}", response_model=MaintenanceOut,
               summary="Remove a part line")
def remove_part(maintenance_id: int, part_id: int, db: Session = Depends(get_db)):
    mant = remove_part_line(db, maintenance_id, part_id)
    if not mant:
        raise HTTPException(status_code=404, detail="Part line not found")
    return mant
