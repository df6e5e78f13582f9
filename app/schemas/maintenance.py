from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import Optional

from app.models.catalogs import MaintenanceStatusName


class MaintenanceCreate(BaseModel):
    bus_id: int
    workshop_id: Optional[int] = None
    maintenance_type: Optional[str] = None
    scheduled_on: Optional[date] = None
    labor_cost: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None
    status: MaintenanceStatusName = MaintenanceStatusName.PENDING


class MaintenanceUpdate(BaseModel):
    status: Optional[MaintenanceStatusName] = None
    labor_cost: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class PartLineIn(BaseModel):
    part_id: int
    quantity: int = Field(default=1, gt=0)


class MaintenanceOut(BaseModel):
    id: int
    bus_id: int
    workshop_id: Optional[int]
    status_id: int
    maintenance_type: Optional[str]
    scheduled_on: Optional[date]
    labor_cost: Decimal
    parts_cost: Decimal
    total_cost: Decimal
    notes: Optional[str]

    class Config:
        from_attributes = True
