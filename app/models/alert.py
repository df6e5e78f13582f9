# app/models/alert.py
"""
Alerts table: one row per alertable condition instance.
dedup_key is unique: inserting an alert whose key already exists is a no-op
(see app.services.alert_service). Written by the sweep and the immediate
triggers; attended/closed through the alerts router; never deleted by the core.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dedup_key = Column(String(255), unique=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    priority = Column(String(10), nullable=False, index=True)   # low | medium | high
    status_id = Column(Integer, ForeignKey("alert_statuses.id"), nullable=False, index=True)
    type_id = Column(Integer, ForeignKey("alert_types.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    bus_id = Column(Integer, ForeignKey("buses.id"))
    user_id = Column(Integer, ForeignKey("users.id"))
    document_id = Column(Integer, ForeignKey("documents.id"))
    incident_id = Column(Integer, ForeignKey("incidents.id"))
    maintenance_id = Column(Integer, ForeignKey("maintenances.id"))

    status = relationship("AlertStatus")
    type = relationship("AlertType")

    def __repr__(self):
        return f"<Alert {self.id} key={self.dedup_key} priority={self.priority}>"
