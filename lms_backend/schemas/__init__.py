# This file makes the 'schemas' directory a Python package.

from .user_schema import TokenData

from .viewing_record_schema import (
    ProgressUpdateBase, ProgressUpdateRequest, ProgressUpdate, ViewingRecordDisplay,
    ProgressResetRequest, CourseCompletionSummary
)

from .certificate_schema import (
    CertificateBase, CertificateDisplay, CertificateStatusUpdate, IssueResult, NotEligible
)

from .admin_schema import (
    UserIssueError, CourseSweepResult, CourseSweepFailure, SweepReport
)


__all__ = [
    # User Schemas
    "TokenData",

    # Viewing Record Schemas
    "ProgressUpdateBase", "ProgressUpdateRequest", "ProgressUpdate", "ViewingRecordDisplay",
    "ProgressResetRequest", "CourseCompletionSummary",

    # Certificate Schemas
    "CertificateBase", "CertificateDisplay", "CertificateStatusUpdate", "IssueResult", "NotEligible",

    # Admin / Sweep Schemas
    "UserIssueError", "CourseSweepResult", "CourseSweepFailure", "SweepReport",
]
