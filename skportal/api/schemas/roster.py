"""Officer roster schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from skportal.core.quota import Gender, QuotaSummary
from skportal.core.structure import StructureCategory
from skportal.services.roster import OfficerEntry, RosterBuffer


class OfficerIn(BaseModel):
    id: Optional[UUID] = None
    structure_category: StructureCategory
    division: Optional[str] = None
    role_title: str = Field(..., min_length=1, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    gender: Gender
    id_document_key: str = Field(..., min_length=1, max_length=512)
    position: Optional[int] = Field(None, ge=0)

    def to_entry(self, index: int) -> OfficerEntry:
        return OfficerEntry(
            structure_category=self.structure_category,
            role_title=self.role_title,
            full_name=self.full_name,
            gender=self.gender,
            id_document_key=self.id_document_key,
            division=self.division,
            id=self.id,
            position=self.position if self.position is not None else index,
        )


class RosterIn(BaseModel):
    officers: List[OfficerIn]
    expected_version: Optional[int] = None

    def to_buffer(self) -> RosterBuffer:
        return RosterBuffer.from_positions(
            [officer.to_entry(i) for i, officer in enumerate(self.officers)]
        )


class OfficerResponse(BaseModel):
    id: UUID
    structure_category: StructureCategory
    division: Optional[str]
    role_title: str
    full_name: str
    gender: Gender
    id_document_key: str
    position: int
    created_at: datetime

    class Config:
        from_attributes = True


class QuotaResponse(BaseModel):
    female_count: int
    total: int
    percentage: float
    threshold: int
    met: bool
    needed: int

    @classmethod
    def from_summary(cls, summary: QuotaSummary) -> "QuotaResponse":
        return cls(
            female_count=summary.female_count,
            total=summary.total,
            percentage=round(summary.percentage, 1),
            threshold=summary.threshold,
            met=summary.met,
            needed=summary.needed,
        )


class RosterResponse(BaseModel):
    request_id: UUID
    version: int
    officers: List[OfficerResponse]
    quota: QuotaResponse


class DocumentUploadResponse(BaseModel):
    id_document_key: str
