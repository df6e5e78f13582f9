# app/models/catalogs.py
"""
Status / type catalog tables.
Small reference tables resolved by name (case-insensitive) and grown on demand
by app.services.catalog_service. Rows are never pruned.
"""

from enum import Enum

from sqlalchemy import Column, Integer, String
from app.database import Base


class CatalogMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(String(255))

    def __repr__(self):
        return f"<{type(self).__name__} {self.id} name={self.name}>"


class AlertStatus(CatalogMixin, Base):
    __tablename__ = "alert_statuses"


class AlertType(CatalogMixin, Base):
    __tablename__ = "alert_types"

    category = Column(String(50))


class DocumentStatus(CatalogMixin, Base):
    __tablename__ = "document_statuses"


class IncidentStatus(CatalogMixin, Base):
    __tablename__ = "incident_statuses"


class MaintenanceStatus(CatalogMixin, Base):
    __tablename__ = "maintenance_statuses"


class BusStatus(CatalogMixin, Base):
    __tablename__ = "bus_statuses"


class ShiftStatus(CatalogMixin, Base):
    __tablename__ = "shift_statuses"


# ── Well-known catalog names ─────────────────────────────────────────────────

class AlertStatusName(str, Enum):
    ACTIVE = "ACTIVE"
    ATTENDED = "ATTENDED"
    CLOSED = "CLOSED"


class DocumentStatusName(str, Enum):
    VIGENT = "VIGENT"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"


class IncidentStatusName(str, Enum):
    REPORTED = "REPORTED"
    IN_REVIEW = "IN_REVIEW"
    RESOLVED = "RESOLVED"
    DISCARDED = "DISCARDED"


class MaintenanceStatusName(str, Enum):
    PENDING = "PENDING"
    IN_PROCESS = "IN_PROCESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class BusStatusName(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    MAINTENANCE = "MAINTENANCE"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


class ShiftStatusName(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


ACTIVE_INCIDENT_STATUSES = (IncidentStatusName.REPORTED, IncidentStatusName.IN_REVIEW)
ACTIVE_MAINTENANCE_STATUSES = (MaintenanceStatusName.PENDING, MaintenanceStatusName.IN_PROCESS)
