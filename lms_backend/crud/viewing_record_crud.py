from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import List, Optional, Set
import logging

from lms_backend.core.exceptions import StorageConflict, StorageFailure
from lms_backend.crud.integrity import is_unique_violation
from lms_backend.models.viewing_record_model import ViewingRecord
from lms_backend.models.enums import ViewingStatus

logger = logging.getLogger(__name__)

def get_viewing_record(db: Session, user_id: int, video_id: int) -> Optional[ViewingRecord]:
    """Fetches the viewing record for a user and video."""
    logger.debug(f"Fetching viewing record for user_id {user_id}, video_id {video_id}")
    return db.query(ViewingRecord).filter(
        ViewingRecord.user_id == user_id,
        ViewingRecord.video_id == video_id
    ).first()

def insert_viewing_record(db: Session, record: ViewingRecord) -> ViewingRecord:
    """
    Inserts a new viewing record.
    Raises StorageConflict when (user_id, video_id) already exists, StorageFailure otherwise.
    """
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info(f"Viewing record created (ID: {record.id}) for user {record.user_id}, video {record.video_id}.")
        return record
    except IntegrityError as e:
        db.rollback()
        if not is_unique_violation(e, "uq_user_video_view_log", "video_view_logs", ("user_id", "video_id")):
            logger.error(f"Integrity error creating viewing record for user {record.user_id}, video {record.video_id}: {e}", exc_info=True)
            raise StorageFailure("Failed to create viewing record") from e
        logger.info(f"Viewing record for user {record.user_id}, video {record.video_id} was created concurrently.")
        raise StorageConflict(f"Viewing record for user {record.user_id}, video {record.video_id} already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating viewing record for user {record.user_id}, video {record.video_id}: {e}", exc_info=True)
        raise StorageFailure("Failed to create viewing record") from e

def save_viewing_record(db: Session, record: ViewingRecord) -> ViewingRecord:
    """Commits pending changes on an existing viewing record."""
    try:
        db.commit()
        db.refresh(record)
        logger.debug(f"Viewing record {record.id} saved (status={record.status}, percent={record.progress_percent}).")
        return record
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving viewing record {record.id}: {e}", exc_info=True)
        raise StorageFailure("Failed to save viewing record") from e

def get_records_for_user_course(db: Session, user_id: int, course_id: int) -> List[ViewingRecord]:
    """All of a user's viewing records in a course, most recently updated first."""
    logger.debug(f"Fetching viewing records for user_id {user_id}, course_id {course_id}")
    return db.query(ViewingRecord).filter(
        ViewingRecord.user_id == user_id,
        ViewingRecord.course_id == course_id
    ).order_by(ViewingRecord.last_updated.desc(), ViewingRecord.id.desc()).all()

def get_completed_records_for_user_course(db: Session, user_id: int, course_id: int) -> List[ViewingRecord]:
    logger.debug(f"Fetching completed viewing records for user_id {user_id}, course_id {course_id}")
    return db.query(ViewingRecord).filter(
        ViewingRecord.user_id == user_id,
        ViewingRecord.course_id == course_id,
        ViewingRecord.status == ViewingStatus.COMPLETED
    ).all()

def get_completed_video_ids(db: Session, user_id: int, course_id: int) -> Set[int]:
    rows = db.query(ViewingRecord.video_id).filter(
        ViewingRecord.user_id == user_id,
        ViewingRecord.course_id == course_id,
        ViewingRecord.status == ViewingStatus.COMPLETED
    ).all()
    return {row.video_id for row in rows}

def get_records_for_course(db: Session, course_id: int, skip: int = 0, limit: Optional[int] = None) -> List[ViewingRecord]:
    """Every viewing record of a course (sweep input and admin viewing history)."""
    logger.debug(f"Fetching viewing records for course_id {course_id} with skip: {skip}, limit: {limit}")
    query = db.query(ViewingRecord).filter(
        ViewingRecord.course_id == course_id
    ).order_by(ViewingRecord.user_id, ViewingRecord.video_id).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()

def reset_viewing_record(db: Session, user_id: int, video_id: int) -> Optional[ViewingRecord]:
    """Reopens a viewing record. Returns None if the user never watched the video."""
    record = get_viewing_record(db, user_id, video_id)
    if not record:
        logger.warning(f"No viewing record to reset for user {user_id}, video {video_id}.")
        return None

    record.current_position = 0
    record.progress_percent = 0
    record.status = ViewingStatus.NOT_STARTED
    record.completed_at = None
    record = save_viewing_record(db, record)
    logger.info(f"Viewing record {record.id} reset for user {user_id}, video {video_id}.")
    return record
