"""
Read-only accessors over the course/video catalog.

Course and video management live elsewhere; the progress pipeline only needs
to know which videos a course currently requires and how long they are.
"""
from sqlalchemy.orm import Session
from dataclasses import dataclass
from typing import List, Optional
import logging

from lms_backend.models.course_model import Course, Video
from lms_backend.models.enums import CatalogStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveVideo:
    video_id: int
    duration: Optional[float]


def list_active_videos(db: Session, course_id: int) -> List[ActiveVideo]:
    """Active videos of a course, in course order."""
    logger.debug(f"Fetching active videos for course_id {course_id}")
    rows = db.query(Video.id, Video.duration_seconds).filter(
        Video.course_id == course_id,
        Video.status == CatalogStatus.ACTIVE
    ).order_by(Video.video_order, Video.id).all()
    return [ActiveVideo(video_id=row.id, duration=row.duration_seconds) for row in rows]

def get_video(db: Session, video_id: int) -> Optional[Video]:
    logger.debug(f"Fetching video with ID: {video_id}")
    return db.query(Video).filter(Video.id == video_id).first()

def get_course(db: Session, course_id: int) -> Optional[Course]:
    logger.debug(f"Fetching course with ID: {course_id}")
    return db.query(Course).filter(Course.id == course_id).first()

def get_course_title(db: Session, course_id: int) -> Optional[str]:
    course = get_course(db, course_id)
    return course.title if course else None

def list_course_ids(db: Session) -> List[int]:
    """
    Ids of every course regardless of course status, ascending. Completion only
    looks at active videos, so an inactive course can still be completed.
    """
    logger.debug("Fetching course ids")
    rows = db.query(Course.id).order_by(Course.id).all()
    return [row.id for row in rows]
