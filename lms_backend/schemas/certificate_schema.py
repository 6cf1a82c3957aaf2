from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class CertificateBase(BaseModel):
    user_id: int
    course_id: int
    user_name: str
    course_title: str
    completion_date: datetime


class CertificateDisplay(CertificateBase):
    id: str
    pdf_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CertificateStatusUpdate(BaseModel):
    is_active: bool = Field(..., description="False revokes the certificate without deleting it")


# Outcome of an issuance attempt. created=False means the certificate already existed.
class IssueResult(BaseModel):
    certificate_id: str
    created: bool


# Returned instead of IssueResult when the course is not complete for the user
class NotEligible(BaseModel):
    user_id: int
    course_id: int
    completed_videos: int
    total_videos: int

    @property
    def reason(self) -> str:
        if self.total_videos == 0:
            return "Course has no active videos."
        return f"Course not yet completed ({self.completed_videos}/{self.total_videos} videos completed)."
