from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from lms_backend.models.enums import ViewingStatus

class ProgressUpdateBase(BaseModel):
    video_id: int = Field(..., gt=0)
    course_id: int = Field(..., gt=0)
    current_position: float = Field(..., ge=0, description="Playback position in seconds")
    total_watched_time: float = Field(0, ge=0, description="Accumulated watch time in seconds")
    progress_percent: Optional[int] = Field(None, ge=0, le=100, description="Explicit percent; derived from position/duration when omitted")
    video_duration: Optional[float] = Field(None, gt=0, description="Video duration in seconds as reported by the player")
    session_id: Optional[str] = Field(None, max_length=255)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


# Body of POST /learn/progress. The user comes from the auth token.
class ProgressUpdateRequest(ProgressUpdateBase):
    pass


# Full telemetry update as consumed by the progress tracker
class ProgressUpdate(ProgressUpdateBase):
    user_id: int = Field(..., gt=0)


class ViewingRecordDisplay(BaseModel):
    id: int
    user_id: int
    video_id: int
    course_id: int
    session_id: Optional[str] = None
    current_position: float
    total_watched_time: float
    progress_percent: int
    status: ViewingStatus
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Admin: reopen a viewing record
class ProgressResetRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    video_id: int = Field(..., gt=0)


class CourseCompletionSummary(BaseModel):
    course_id: int
    total_videos: int = Field(..., description="Active videos currently required by the course")
    completed_videos: int = Field(..., description="Required videos the user has completed")
    completion_percentage: float = Field(..., ge=0, le=100)
    is_complete: bool
