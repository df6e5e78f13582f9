# app/services/document_status.py
"""
Document status policy.
classify_document() is the one place that turns an expiry date into
VIGENT / EXPIRING_SOON / EXPIRED. The documents listing uses it to display the
effective status and the alert sweep uses it to decide what to persist.
"""

from datetime import date, datetime
from typing import Optional

from app.models.catalogs import DocumentStatusName
from app.utils.time import today as local_today

EXPIRING_SOON_DAYS = 30


def classify_document(expiry_date: Optional[date], today: Optional[date] = None) -> DocumentStatusName:
    if expiry_date is None:
        return DocumentStatusName.VIGENT
    if isinstance(expiry_date, datetime):
        expiry_date = expiry_date.date()
    today = today or local_today()

    days_left = (expiry_date - today).days
    if days_left < 0:
        return DocumentStatusName.EXPIRED
    if days_left <= EXPIRING_SOON_DAYS:
        return DocumentStatusName.EXPIRING_SOON
    return DocumentStatusName.VIGENT
