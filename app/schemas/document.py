from pydantic import BaseModel
from datetime import date
from typing import Optional


class DocumentOut(BaseModel):
    id: int
    file_name: str
    document_type: Optional[str]
    bus_id: Optional[int]
    user_id: Optional[int]
    expiry_date: Optional[date]
    status: str                 # effective status, recomputed from expiry_date
