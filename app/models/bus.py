# app/models/bus.py
"""
Fleet buses.
status_id is derived by app.services.bus_state and must not be set by hand
once the bus exists. The two expiry dates feed the daily alert sweep.
"""

from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Bus(Base):
    __tablename__ = "buses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate = Column(String(20), unique=True, nullable=False, index=True)
    model = Column(String(100))
    status_id = Column(Integer, ForeignKey("bus_statuses.id"))
    technical_inspection_expiry = Column(Date, index=True)
    extinguisher_expiry = Column(Date, index=True)

    status = relationship("BusStatus")

    @property
    def label(self) -> str:
        """Plate when set, otherwise '#<id>'."""
        plate = (self.plate or "").strip()
        return plate if plate else f"#{self.id}"

    def __repr__(self):
        return f"<Bus {self.id} plate={self.plate} status={self.status_id}>"
