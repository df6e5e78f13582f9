# app/routers/documents.py
"""Documents: read-only listing with the effective (date-derived) status."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.models.document import Document
from app.schemas.document import DocumentOut
from app.services.document_status import classify_document
from app.utils.time import today

router = APIRouter()


@router.get("/documents", response_model=list[DocumentOut], summary="List documents")
def list_documents(
    bus_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """status filters on the effective status (VIGENT / EXPIRING_SOON / EXPIRED), not the stored one."""
    q = db.query(Document)
    if bus_id is not None:
        q = q.filter(Document.bus_id == bus_id)
    if user_id is not None:
        q = q.filter(Document.user_id == user_id)

    current_day = today()
    items = []
    for doc in q.order_by(Document.expiry_date.asc(), Document.id).all():
        effective = classify_document(doc.expiry_date, current_day).value
        if status and effective != status.upper():
            continue
        items.append(DocumentOut(
            id=doc.id,
            file_name=doc.file_name,
            document_type=doc.document_type,
            bus_id=doc.bus_id,
            user_id=doc.user_id,
            expiry_date=doc.expiry_date,
            status=effective,
        ))
    return items
