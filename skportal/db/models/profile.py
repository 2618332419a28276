import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship

from skportal.db.base import Base
from skportal.core.approval.states import ActorRole
from skportal.core.rbac.roles import get_role_permissions


class Profile(Base):
    """Identity, role and region of a portal user.

    A regional filer's profile id doubles as its chapter reference.
    """
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default=ActorRole.REGIONAL_FILER.value, index=True)
    region = Column(String(100), nullable=True, index=True)  # province
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    requests = relationship(
        "SKRequest", back_populates="chapter", foreign_keys="SKRequest.chapter_id"
    )
    custom_titles = relationship("CustomRoleTitle", back_populates="chapter")

    @property
    def actor_role(self) -> ActorRole:
        return ActorRole(self.role)

    @property
    def permissions(self) -> list[str]:
        return get_role_permissions(self.actor_role)

    def __repr__(self) -> str:
        return f"<Profile {self.full_name} [{self.role}]>"
