"""
Course completion evaluation.

A course is complete for a user when every currently active video of the
course has a viewing record in `completed` status. A course with no active
videos is never complete. Everything here is read-only.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lms_backend.core.exceptions import DependencyUnavailable, StorageFailure
from lms_backend.crud import catalog_crud, viewing_record_crud
from lms_backend.schemas.viewing_record_schema import CourseCompletionSummary

logger = logging.getLogger(__name__)


def evaluate_completion(required_video_ids: Iterable[int], completed_video_ids: Iterable[int]) -> bool:
    """True iff the required set is non-empty and contained in the completed set."""
    required = set(required_video_ids)
    if not required:
        return False
    return required.issubset(set(completed_video_ids))


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for TIMESTAMP(timezone=True) columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def required_video_ids(db: Session, course_id: int) -> Set[int]:
    try:
        return {video.video_id for video in catalog_crud.list_active_videos(db, course_id)}
    except SQLAlchemyError as e:
        logger.error(f"Catalog lookup failed for course {course_id}: {e}", exc_info=True)
        raise DependencyUnavailable(f"Could not load videos for course {course_id}") from e


def _completed_video_ids(db: Session, user_id: int, course_id: int) -> Set[int]:
    try:
        return viewing_record_crud.get_completed_video_ids(db, user_id, course_id)
    except SQLAlchemyError as e:
        logger.error(f"Viewing record lookup failed for user {user_id}, course {course_id}: {e}", exc_info=True)
        raise StorageFailure("Could not load viewing records") from e


def is_course_complete(db: Session, user_id: int, course_id: int) -> bool:
    required = required_video_ids(db, course_id)
    completed = _completed_video_ids(db, user_id, course_id)
    complete = evaluate_completion(required, completed)
    logger.debug(f"User {user_id} course {course_id}: {len(required & completed)}/{len(required)} required videos completed (complete={complete})")
    return complete


def course_completion_summary(db: Session, user_id: int, course_id: int) -> CourseCompletionSummary:
    """Completed/total counts over the currently required videos."""
    required = required_video_ids(db, course_id)
    completed = _completed_video_ids(db, user_id, course_id) & required
    total = len(required)
    percentage = round(len(completed) / total * 100, 2) if total else 0.0
    return CourseCompletionSummary(
        course_id=course_id,
        total_videos=total,
        completed_videos=len(completed),
        completion_percentage=percentage,
        is_complete=evaluate_completion(required, completed),
    )


def latest_completion_timestamp(db: Session, user_id: int, course_id: int) -> Optional[datetime]:
    """
    Latest completion time across the user's completed records for the course's
    required videos. Records without completed_at fall back to last_updated, then
    to the current time. None if the user has no qualifying record.
    """
    required = required_video_ids(db, course_id)
    try:
        records = viewing_record_crud.get_completed_records_for_user_course(db, user_id, course_id)
    except SQLAlchemyError as e:
        logger.error(f"Viewing record lookup failed for user {user_id}, course {course_id}: {e}", exc_info=True)
        raise StorageFailure("Could not load viewing records") from e

    latest = None
    for record in records:
        if record.video_id not in required:
            continue
        stamp = record.completed_at or record.last_updated
        stamp = as_utc(stamp) if stamp else datetime.now(timezone.utc)
        if latest is None or stamp > latest:
            latest = stamp
    return latest
