from pydantic import BaseModel, Field
from typing import List

from lms_backend.core.exceptions import PartialSweepFailure

# --- Reconciliation sweep reporting ---
class UserIssueError(BaseModel):
    user_id: int
    error: str

class CourseSweepResult(BaseModel):
    course_id: int
    required_videos: int = Field(..., description="Active videos required at sweep time")
    enrolled_users: int = Field(..., description="Users with at least one viewing record in the course")
    issued: int = 0
    already_issued: int = 0
    incomplete_users: int = 0
    user_errors: List[UserIssueError] = Field(default_factory=list)

class CourseSweepFailure(BaseModel):
    course_id: int
    error: str

class SweepReport(BaseModel):
    issued: int = 0
    already_issued: int = 0
    incomplete_users: int = 0
    courses_scanned: int = 0
    courses_skipped: int = Field(0, description="Courses with no active videos")
    courses: List[CourseSweepResult] = Field(default_factory=list)
    failures: List[CourseSweepFailure] = Field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def add_course(self, result: CourseSweepResult) -> None:
        self.courses.append(result)
        self.courses_scanned += 1
        self.issued += result.issued
        self.already_issued += result.already_issued
        self.incomplete_users += result.incomplete_users

    def raise_for_failures(self) -> None:
        """Raises PartialSweepFailure if any course could not be processed."""
        if self.failures:
            raise PartialSweepFailure(self)
