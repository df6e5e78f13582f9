from pydantic import BaseModel
from datetime import date
from typing import Optional

from app.models.catalogs import IncidentStatusName


class IncidentCreate(BaseModel):
    bus_id: int
    user_id: int
    occurred_on: date
    incident_type: Optional[str] = None
    urgency: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


class IncidentUpdate(BaseModel):
    status: Optional[IncidentStatusName] = None
    bus_id: Optional[int] = None
    urgency: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


class IncidentOut(BaseModel):
    id: int
    bus_id: int
    user_id: int
    occurred_on: date
    status_id: int
    incident_type: Optional[str]
    urgency: Optional[str]
    location: Optional[str]
    description: Optional[str]

    class Config:
        from_attributes = True
