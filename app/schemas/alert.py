from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional


class CatalogOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class AlertTypeOut(CatalogOut):
    category: Optional[str] = None


class AlertOut(BaseModel):
    id: int
    dedup_key: str
    title: str
    description: Optional[str]
    priority: str
    status_id: int
    status: Optional[CatalogOut]
    type_id: int
    type: Optional[AlertTypeOut]
    created_at: datetime
    bus_id: Optional[int]
    user_id: Optional[int]
    document_id: Optional[int]
    incident_id: Optional[int]
    maintenance_id: Optional[int]

    class Config:
        from_attributes = True


class AlertPage(BaseModel):
    items: list[AlertOut]
    total: int
    page: int
    page_size: int


class AlertUpdate(BaseModel):
    attend: bool = False
    close: bool = False
    status_id: Optional[int] = None
    priority: Optional[Literal["low", "medium", "high"]] = None


class SweepRequest(BaseModel):
    window_days: Optional[int] = Field(default=None, ge=0, le=365)


class AlertCatalogs(BaseModel):
    statuses: list[CatalogOut]
    types: list[AlertTypeOut]
