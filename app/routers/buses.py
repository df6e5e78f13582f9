# app/routers/buses.py
"""Buses: read endpoints plus a manual status recompute."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.bus import Bus
from app.schemas.bus import BusOut
from app.services import fleet_events

router = APIRouter()


@router.get("/buses", response_model=list[BusOut], summary="List buses with their derived status")
def list_buses(db: Session = Depends(get_db)):
    return db.query(Bus).order_by(Bus.id).all()


@router.get("/buses/{bus_id}", response_model=BusOut, summary="One bus")
def get_bus(bus_id: int, db: Session = Depends(get_db)):
    bus = db.query(Bus).filter(Bus.id == bus_id).first()
    if not bus:
        raise HTTPException(status_code=404, detail="Bus not found")
    return bus


@router.post("/buses/{bus_id}/reconcile", response_model=BusOut, summary="Recompute bus status")
async def reconcile_bus(bus_id: int, db: Session = Depends(get_db)):
    bus = db.query(Bus).filter(Bus.id == bus_id).first()
    if not bus:
        raise HTTPException(status_code=404, detail="Bus not found")
    await fleet_events.reconcile_bus_state(db, bus_id)
    db.refresh(bus)
    return bus
