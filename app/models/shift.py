# app/models/shift.py
"""Driver shifts: one driver on one bus between starts_at and ends_at."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Shift(Base):
    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    bus_id = Column(Integer, ForeignKey("buses.id"), nullable=False, index=True)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    status_id = Column(Integer, ForeignKey("shift_statuses.id"), nullable=False)
    route_origin = Column(String(200))
    route_destination = Column(String(200))

    user = relationship("User")
    bus = relationship("Bus")
    status = relationship("ShiftStatus")

    def __repr__(self):
        return f"<Shift {self.id} driver={self.user_id} bus={self.bus_id}>"
