# This file makes the 'models' directory a Python package.

from lms_backend.core.database import Base # Base must be imported before models that use it

from .enums import ViewingStatus, CatalogStatus, UserRole

from .user_model import User
from .course_model import Course, Video
from .viewing_record_model import ViewingRecord
from .certificate_model import Certificate, generate_certificate_id


__all__ = [
    "Base",
    # Models
    "User",
    "Course",
    "Video",
    "ViewingRecord",
    "Certificate",
    "generate_certificate_id",
    # Enums
    "ViewingStatus",
    "CatalogStatus",
    "UserRole",
]
