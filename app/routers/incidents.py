# app/routers/incidents.py
"""Incidents: create / update. Bus status and alerts follow via fleet_events."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.bus import Bus
from app.models.catalogs import IncidentStatus, IncidentStatusName
from app.models.incident import Incident
from app.models.user import User
from app.schemas.incident import IncidentCreate, IncidentOut, IncidentUpdate
from app.services import fleet_events
from app.services.catalog_service import resolve_or_create

router = APIRouter()


@router.post("/incidents", response_model=IncidentOut, status_code=201, summary="Report an incident")
async def create_incident(body: IncidentCreate, db: Session = Depends(get_db)):
    if not db.query(Bus.id).filter(Bus.id == body.bus_id).first():
        raise HTTPException(status_code=400, detail="Bus not found")
    if not db.query(User.id).filter(User.id == body.user_id).first():
        raise HTTPException(status_code=400, detail="User not found")

    incident = Incident(
        **body.model_dump(),
        status_id=resolve_or_create(db, IncidentStatus, IncidentStatusName.REPORTED, "Raised by user"),
    )
    db.add(incident)
    db.commit()

    await fleet_events.on_incident_created(db, incident.id)
    db.refresh(incident)
    return incident


@router.put("/incidents/{incident_id}", response_model=IncidentOut, summary="Update an incident")
async def update_incident(incident_id: int, body: IncidentUpdate, db: Session = Depends(get_db)):
    incident = db.query(Incident).filter(Incident.id == incident_id).first()
    if not incident:
        raise HTTPException(status_code=404, detail="Incident not found")

    previous_bus_id = incident.bus_id
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    status = changes.pop("status", None)
    if status:
        incident.status_id = resolve_or_create(db, IncidentStatus, status)
    if changes.get("bus_id") is not None and not db.query(Bus.id).filter(Bus.id == changes["bus_id"]).first():
        raise HTTPException(status_code=400, detail="Bus not found")
    for field, value in changes.items():
        setattr(incident, field, value)
    db.commit()

    moved_from = previous_bus_id if incident.bus_id != previous_bus_id else None
    await fleet_events.on_incident_updated(db, incident.id, previous_bus_id=moved_from)
    db.refresh(incident)
    return incident
