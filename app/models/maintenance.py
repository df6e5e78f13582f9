# app/models/maintenance.py
"""
Maintenance jobs, workshops and the parts used on each job.
Lifecycle: PENDING → IN_PROCESS → COMPLETED | CANCELLED.
total_cost is always labor_cost + parts_cost (app.services.maintenance_costs).
"""

from sqlalchemy import Column, Integer, String, Date, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Workshop(Base):
    __tablename__ = "workshops"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)

    def __repr__(self):
        return f"<Workshop {self.id} name={self.name}>"


class Part(Base):
    __tablename__ = "parts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    unit_cost = Column(Numeric(12, 2), nullable=False, default=0)

    def __repr__(self):
        return f"<Part {self.id} name={self.name} cost={self.unit_cost}>"


class Maintenance(Base):
    __tablename__ = "maintenances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bus_id = Column(Integer, ForeignKey("buses.id"), nullable=False, index=True)
    workshop_id = Column(Integer, ForeignKey("workshops.id"))
    status_id = Column(Integer, ForeignKey("maintenance_statuses.id"), nullable=False)
    maintenance_type = Column(String(100))
    scheduled_on = Column(Date)
    labor_cost = Column(Numeric(12, 2), nullable=False, default=0)
    parts_cost = Column(Numeric(12, 2), nullable=False, default=0)
    total_cost = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text)

    bus = relationship("Bus")
    workshop = relationship("Workshop")
    status = relationship("MaintenanceStatus")
    part_lines = relationship("MaintenancePart", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Maintenance {self.id} bus={self.bus_id} total={self.total_cost}>"


class MaintenancePart(Base):
    __tablename__ = "maintenance_parts"

    maintenance_id = Column(Integer, ForeignKey("maintenances.id", ondelete="CASCADE"), primary_key=True)
    part_id = Column(Integer, ForeignKey("parts.id"), primary_key=True)
    quantity = Column(Integer, nullable=False, default=1)

    part = relationship("Part")

    def __repr__(self):
        return f"<MaintenancePart maint={self.maintenance_id} part={self.part_id} qty={self.quantity}>"
