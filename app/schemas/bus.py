from pydantic import BaseModel
from datetime import date
from typing import Optional

from app.schemas.alert import CatalogOut


class BusOut(BaseModel):
    id: int
    plate: str
    model: Optional[str]
    status_id: Optional[int]
    status: Optional[CatalogOut]
    technical_inspection_expiry: Optional[date]
    extinguisher_expiry: Optional[date]

    class Config:
        from_attributes = True
