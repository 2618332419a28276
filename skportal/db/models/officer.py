import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from skportal.db.base import Base


class Officer(Base):
    """One roster entry of an SK request. ``position`` orders the roster."""
    __tablename__ = "officers"
    __table_args__ = (
        UniqueConstraint("request_id", "position", name="uq_officers_request_position"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    request_id = Column(Uuid, ForeignKey("sk_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    structure_category = Column(String(100), nullable=False)
    division = Column(String(255), nullable=True)  # bureaus only
    role_title = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    gender = Column(String(20), nullable=False)
    id_document_key = Column(String(512), nullable=False)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    request = relationship("SKRequest", back_populates="officers")

    def __repr__(self) -> str:
        return f"<Officer #{self.position} {self.role_title}: {self.full_name}>"
