# app/models/document.py
"""
Fleet documents (registration permits, insurance, driver licences, ...).
Owned by a bus or by a user. The stored status_id is only a cache: the
effective status is always classify_document(expiry_date).
"""

from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(String(255), nullable=False)
    document_type = Column(String(100))
    bus_id = Column(Integer, ForeignKey("buses.id"), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    expiry_date = Column(Date, index=True)
    status_id = Column(Integer, ForeignKey("document_statuses.id"))

    bus = relationship("Bus")
    user = relationship("User")
    status = relationship("DocumentStatus")

    def __repr__(self):
        return f"<Document {self.id} file={self.file_name} expires={self.expiry_date}>"
