from pydantic import BaseModel, model_validator
from datetime import datetime
from typing import Optional

from app.models.catalogs import ShiftStatusName


class ShiftCreate(BaseModel):
    user_id: int
    bus_id: int
    starts_at: datetime
    ends_at: datetime
    route_origin: Optional[str] = None
    route_destination: Optional[str] = None

    @model_validator(mode="after")
    def _check_window(self):
        if self.starts_at >= self.ends_at:
            raise ValueError("starts_at must be before ends_at")
        return self


class ShiftUpdate(BaseModel):
    status: Optional[ShiftStatusName] = None
    bus_id: Optional[int] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    route_origin: Optional[str] = None
    route_destination: Optional[str] = None


class ShiftOut(BaseModel):
    id: int
    user_id: int
    bus_id: int
    starts_at: datetime
    ends_at: datetime
    status_id: int
    route_origin: Optional[str]
    route_destination: Optional[str]

    class Config:
        from_attributes = True
