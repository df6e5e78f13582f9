# app/routers/alerts.py
"""Alert listing and status updates, plus the on-demand sweep."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.models.alert import Alert
from app.models.catalogs import AlertStatus, AlertStatusName, AlertType
from app.schemas.alert import AlertCatalogs, AlertOut, AlertPage, AlertUpdate, SweepRequest
from app.services.alert_sweep import run_alert_sweep
from app.services.catalog_service import resolve_or_create

router = APIRouter()


@router.get("/alerts", response_model=AlertPage, summary="Search and paginate alerts")
def list_alerts(
    q: Optional[str] = None,
    status_id: Optional[int] = None,
    type_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 30,
    db: Session = Depends(get_db),
):
    """Newest first. q matches title or description (case-insensitive)."""
    page = max(page, 1)
    page_size = min(max(page_size, 1), 200)

    query = db.query(Alert)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Alert.title.ilike(like), Alert.description.ilike(like)))
    if status_id is not None:
        query = query.filter(Alert.status_id == status_id)
    if type_id is not None:
        query = query.filter(Alert.type_id == type_id)

    total = query.count()
    items = (
        query.order_by(Alert.created_at.desc(), Alert.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/alerts/catalogs", response_model=AlertCatalogs, summary="Alert statuses and types")
def alert_catalogs(db: Session = Depends(get_db)):
    return {
        "statuses": db.query(AlertStatus).order_by(AlertStatus.id).all(),
        "types": db.query(AlertType).order_by(AlertType.id).all(),
    }


@router.put("/alerts/{alert_id}", response_model=AlertOut, summary="Attend / close an alert")
def update_alert(alert_id: int, body: AlertUpdate, db: Session = Depends(get_db)):
    """close wins over attend; an explicit status_id is used only when neither is set."""
    alert = db.query(Alert).filter(Alert.id == alert_id).first()
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")

    if body.close:
        alert.status_id = resolve_or_create(db, AlertStatus, AlertStatusName.CLOSED)
    elif body.attend:
        alert.status_id = resolve_or_create(db, AlertStatus, AlertStatusName.ATTENDED)
    elif body.status_id is not None:
        if not db.query(AlertStatus.id).filter(AlertStatus.id == body.status_id).first():
            raise HTTPException(status_code=400, detail="Unknown alert status")
        alert.status_id = body.status_id

    if body.priority is not None:
        alert.priority = body.priority

    db.commit()
    db.refresh(alert)
    return alert


@router.post("/alerts/generate", summary="Run the alert sweep now")
async def generate_alerts(body: Optional[SweepRequest] = None, db: Session = Depends(get_db)):
    """Same sweep as the daily cron job. Safe to repeat: existing alerts are not duplicated."""
    window = body.window_days if body else None
    report = await run_alert_sweep(db, window)
    return {"ok": True, **report.as_dict()}
