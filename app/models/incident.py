# app/models/incident.py
"""
Incidents reported against a bus.
Lifecycle: REPORTED → IN_REVIEW → RESOLVED | DISCARDED.
An open incident (REPORTED / IN_REVIEW) puts its bus OUT_OF_SERVICE.
"""

from sqlalchemy import Column, Integer, String, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bus_id = Column(Integer, ForeignKey("buses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    occurred_on = Column(Date, nullable=False, index=True)
    status_id = Column(Integer, ForeignKey("incident_statuses.id"), nullable=False)
    incident_type = Column(String(100))
    urgency = Column(String(20))
    location = Column(String(255))
    description = Column(Text)

    bus = relationship("Bus")
    user = relationship("User")
    status = relationship("IncidentStatus")

    def __repr__(self):
        return f"<Incident {self.id} bus={self.bus_id} status={self.status_id}>"
