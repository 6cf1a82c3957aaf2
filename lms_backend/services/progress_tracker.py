"""
Per-video viewing progress.

Playback telemetry is upserted into one ViewingRecord per (user, video) and a
status is derived from the progress percent. A record that reaches
`completed` stays completed: later, smaller updates still move the playback
position but never reopen it. Every write that leaves the record completed
triggers certificate issuance for the course (idempotent downstream).
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lms_backend.core.config import settings
from lms_backend.core.exceptions import DependencyUnavailable, InvalidInput, PipelineError, StorageConflict, StorageFailure
from lms_backend.core.validators import require_ids
from lms_backend.crud import catalog_crud, viewing_record_crud
from lms_backend.models.course_model import Video
from lms_backend.models.enums import ViewingStatus
from lms_backend.models.viewing_record_model import ViewingRecord
from lms_backend.schemas.viewing_record_schema import ProgressUpdate
from lms_backend.services import certificate_issuer

logger = logging.getLogger(__name__)


def compute_progress_percent(current_position: float, video_duration: float) -> int:
    """Percent of the video reached, halves rounded up, capped at 100."""
    if video_duration <= 0:
        raise InvalidInput("video_duration must be positive")
    percent = int(math.floor(current_position / video_duration * 100 + 0.5))
    return max(0, min(percent, 100))


def derive_status(progress_percent: int) -> ViewingStatus:
    if progress_percent >= settings.COMPLETION_THRESHOLD_PERCENT:
        return ViewingStatus.COMPLETED
    if progress_percent == 0:
        return ViewingStatus.NOT_STARTED
    return ViewingStatus.IN_PROGRESS


def _coerce_update(update: Union[ProgressUpdate, Mapping[str, Any]]) -> ProgressUpdate:
    if isinstance(update, ProgressUpdate):
        validated = update
    else:
        try:
            validated = ProgressUpdate.model_validate(update)
        except ValidationError as e:
            raise InvalidInput(f"Malformed progress update: {e.errors()}") from e
    require_ids(user_id=validated.user_id, video_id=validated.video_id, course_id=validated.course_id)
    if validated.current_position < 0 or validated.total_watched_time < 0:
        raise InvalidInput("Playback position and watched time must not be negative")
    return validated


def _load_video(db: Session, update: ProgressUpdate) -> Video:
    """The catalog video the update is about; it must belong to update.course_id."""
    try:
        video = catalog_crud.get_video(db, update.video_id)
    except SQLAlchemyError as e:
        logger.error(f"Catalog lookup failed for video {update.video_id}: {e}", exc_info=True)
        raise DependencyUnavailable(f"Could not load video {update.video_id}") from e
    if video is None:
        raise InvalidInput(f"Video {update.video_id} does not exist")
    if video.course_id != update.course_id:
        raise InvalidInput(f"Video {update.video_id} belongs to course {video.course_id}, not {update.course_id}")
    return video


def _resolve_percent(update: ProgressUpdate, video: Video, existing_percent: Optional[int]) -> int:
    if update.progress_percent is not None:
        return update.progress_percent

    duration = update.video_duration or video.duration_seconds

    if duration and duration > 0:
        return compute_progress_percent(update.current_position, duration)

    logger.debug(f"No duration known for video {update.video_id}; keeping stored percent {existing_percent or 0}")
    return existing_percent or 0


def _apply_update(record: ViewingRecord, update: ProgressUpdate, percent: int, now: datetime) -> None:
    event_time = update.end_time or now

    record.current_position = update.current_position
    record.total_watched_time = max(record.total_watched_time or 0, update.total_watched_time)
    if update.session_id is not None:
        record.session_id = update.session_id

    if record.status == ViewingStatus.COMPLETED:
        # Completion is sticky; only the percent may still grow
        record.progress_percent = max(record.progress_percent or 0, percent)
    else:
        record.progress_percent = percent
        record.status = derive_status(percent)
        if record.status == ViewingStatus.COMPLETED and record.completed_at is None:
            record.completed_at = event_time

    if record.start_time is None:
        record.start_time = update.start_time or event_time
    record.end_time = event_time
    record.last_updated = now


def _signal_completion(db: Session, user_id: int, course_id: int) -> None:
    try:
        outcome = certificate_issuer.issue_certificate_if_eligible(db, user_id, course_id)
    except (PipelineError, SQLAlchemyError) as e:
        # Progress is already stored; the reconciliation sweep picks this up later
        logger.warning(f"Certificate check after completion failed for user {user_id}, course {course_id}: {e}")
        return
    logger.debug(f"Completion signal for user {user_id}, course {course_id}: {outcome}")


def record_progress(db: Session, update: Union[ProgressUpdate, Mapping[str, Any]]) -> ViewingRecord:
    update = _coerce_update(update)
    video = _load_video(db, update)
    now = datetime.now(timezone.utc)
    logger.debug(f"Recording progress for user {update.user_id}, video {update.video_id}: position={update.current_position}, percent={update.progress_percent}")

    try:
        record = viewing_record_crud.get_viewing_record(db, update.user_id, update.video_id)
    except SQLAlchemyError as e:
        logger.error(f"Could not read viewing record for user {update.user_id}, video {update.video_id}: {e}", exc_info=True)
        raise StorageFailure("Could not read viewing record") from e

    if record is None:
        percent = _resolve_percent(update, video, None)
        record = ViewingRecord(user_id=update.user_id, video_id=update.video_id, course_id=update.course_id)
        _apply_update(record, update, percent, now)
        try:
            record = viewing_record_crud.insert_viewing_record(db, record)
        except StorageConflict:
            # Another session created the row first; fold this update into it
            record = viewing_record_crud.get_viewing_record(db, update.user_id, update.video_id)
            if record is None:
                raise StorageFailure("Viewing record insert conflicted but no record exists")
            _apply_update(record, update, percent, now)
            record = viewing_record_crud.save_viewing_record(db, record)
    else:
        percent = _resolve_percent(update, video, record.progress_percent)
        record.course_id = video.course_id
        _apply_update(record, update, percent, now)
        record = viewing_record_crud.save_viewing_record(db, record)

    logger.info(f"Progress saved for user {record.user_id}, video {record.video_id}: {record.progress_percent}% ({record.status.value}).")

    if record.status == ViewingStatus.COMPLETED:
        _signal_completion(db, record.user_id, record.course_id)

    return record


def get_progress(db: Session, user_id: int, video_id: int, create_if_missing: bool = False) -> Optional[ViewingRecord]:
    """
    The user's record for a video. With create_if_missing, a `not_started`
    record is created on first access.
    """
    require_ids(user_id=user_id, video_id=video_id)
    record = viewing_record_crud.get_viewing_record(db, user_id, video_id)
    if record is not None or not create_if_missing:
        return record

    video = catalog_crud.get_video(db, video_id)
    if video is None:
        raise InvalidInput(f"Video {video_id} does not exist")

    now = datetime.now(timezone.utc)
    record = ViewingRecord(
        user_id=user_id,
        video_id=video_id,
        course_id=video.course_id,
        current_position=0,
        total_watched_time=0,
        progress_percent=0,
        status=ViewingStatus.NOT_STARTED,
        last_updated=now,
    )
    try:
        return viewing_record_crud.insert_viewing_record(db, record)
    except StorageConflict:
        return viewing_record_crud.get_viewing_record(db, user_id, video_id)


def list_course_progress(db: Session, user_id: int, course_id: int) -> List[ViewingRecord]:
    require_ids(user_id=user_id, course_id=course_id)
    return viewing_record_crud.get_records_for_user_course(db, user_id, course_id)


def reset_progress(db: Session, user_id: int, video_id: int) -> Optional[ViewingRecord]:
    """Administrative reset; reopens a completed record. Certificates are left alone."""
    require_ids(user_id=user_id, video_id=video_id)
    return viewing_record_crud.reset_viewing_record(db, user_id, video_id)
