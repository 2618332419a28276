"""SK request database models.

Stores decree requests and their state transition history.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, Integer, ForeignKey, Index, Text, JSON, Uuid, text
from sqlalchemy.orm import relationship

from skportal.db.base import Base
from skportal.core.approval.states import RequestStatus


class SKRequest(Base):
    """
    One decree request per filing cycle per chapter.

    Status changes go through the approval state machine only; the
    version counter rejects writes based on a stale read.
    """
    __tablename__ = "sk_requests"
    __table_args__ = (
        # At most one request per chapter outside the terminal state
        Index(
            "uq_sk_requests_active_chapter",
            "chapter_id",
            unique=True,
            sqlite_where=text(f"status <> '{RequestStatus.DECREE_ISSUED.value}'"),
            postgresql_where=text(f"status <> '{RequestStatus.DECREE_ISSUED.value}'"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    chapter_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)

    # Meeting report
    meeting_date = Column(Date, nullable=False)
    meeting_location = Column(String(255), nullable=False)
    meeting_report_key = Column(String(512), nullable=True)

    # Workflow state
    status = Column(String(50), nullable=False, default=RequestStatus.DRAFT.value, index=True)
    revision_note = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=True)

    # Verification
    verified_by = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    verified_at = Column(DateTime, nullable=True)

    # Tier-1 sign-off
    tier1_approved_by = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    tier1_approved_at = Column(DateTime, nullable=True)

    # Tier-2 sign-off
    tier2_approved_by = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    tier2_approved_at = Column(DateTime, nullable=True)

    decree_issued_at = Column(DateTime, nullable=True)

    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    chapter = relationship("Profile", back_populates="requests", foreign_keys=[chapter_id])
    verifier = relationship("Profile", foreign_keys=[verified_by])
    tier1_approver = relationship("Profile", foreign_keys=[tier1_approved_by])
    tier2_approver = relationship("Profile", foreign_keys=[tier2_approved_by])
    officers = relationship(
        "Officer",
        back_populates="request",
        order_by="Officer.position",
        cascade="all, delete-orphan",
    )
    history = relationship(
        "RequestHistory",
        back_populates="request",
        order_by="RequestHistory.created_at",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<SKRequest {self.id} [{self.status}]>"


class RequestHistory(Base):
    """
    Records every applied transition of an SK request.

    Provides the audit trail of the approval workflow.
    """
    __tablename__ = "request_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    request_id = Column(Uuid, ForeignKey("sk_requests.id", ondelete="CASCADE"), nullable=False, index=True)

    # Transition details
    from_status = Column(String(50), nullable=False)
    to_status = Column(String(50), nullable=False)
    decision = Column(String(50), nullable=False)

    # Actor
    actor_id = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    # Revision note (rejections only)
    note = Column(Text, nullable=True)

    extra_data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    request = relationship("SKRequest", back_populates="history")
    actor = relationship("Profile")

    def __repr__(self) -> str:
        return f"<RequestHistory {self.from_status} -> {self.to_status}>"
