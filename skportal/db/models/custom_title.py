import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from skportal.db.base import Base


class CustomRoleTitle(Base):
    """Extra role title a chapter added to one structure category."""
    __tablename__ = "custom_role_titles"
    __table_args__ = (
        UniqueConstraint("chapter_id", "structure_category", "title", name="uq_custom_role_titles"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    chapter_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    structure_category = Column(String(100), nullable=False)
    title = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    chapter = relationship("Profile", back_populates="custom_titles")
