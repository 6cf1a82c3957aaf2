from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from lms_backend.core.database import get_db
from lms_backend.core.dependencies import get_current_active_user, get_course_or_404
from lms_backend.models.user_model import User
from lms_backend.models.course_model import Course
from lms_backend.schemas import (
    viewing_record_schema as vr_schemas,
    certificate_schema as cert_schemas,
)
from lms_backend.services import (
    progress_tracker,
    completion_evaluator,
    certificate_issuer,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/learn", tags=["Learning & Progress"])


# --- Viewing progress ---

@router.post("/progress", response_model=vr_schemas.ViewingRecordDisplay)
def record_video_progress(
    progress_in: vr_schemas.ProgressUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Player telemetry: position, watched time and (optionally) percent for one video.
    Completing the last required video of a course issues the certificate.
    """
    logger.info(f"User {current_user.id} reporting progress for video {progress_in.video_id}")
    update = vr_schemas.ProgressUpdate(user_id=current_user.id, **progress_in.model_dump())
    return progress_tracker.record_progress(db, update)


@router.get("/progress/videos/{video_id}", response_model=vr_schemas.ViewingRecordDisplay)
def get_video_progress(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    The current user's progress on a video. A not_started record is created on first access.
    """
    return progress_tracker.get_progress(db, current_user.id, video_id, create_if_missing=True)


@router.get("/progress/courses/{course_id}", response_model=List[vr_schemas.ViewingRecordDisplay])
def get_course_progress(
    course: Course = Depends(get_course_or_404),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return progress_tracker.list_course_progress(db, current_user.id, course.id)


@router.get("/courses/{course_id}/completion", response_model=vr_schemas.CourseCompletionSummary)
def get_course_completion(
    course: Course = Depends(get_course_or_404),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return completion_evaluator.course_completion_summary(db, current_user.id, course.id)


# --- Certificates ---

@router.post("/courses/{course_id}/certificate", response_model=cert_schemas.IssueResult)
def issue_course_certificate(
    course: Course = Depends(get_course_or_404),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Issues the certificate for a completed course. Safe to call repeatedly:
    later calls return the same certificate with created=false.
    """
    logger.info(f"User {current_user.id} requesting certificate for course_id {course.id}")
    outcome = certificate_issuer.issue_certificate_if_eligible(db, current_user.id, course.id)
    if isinstance(outcome, cert_schemas.NotEligible):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": outcome.reason,
                "completed_videos": outcome.completed_videos,
                "total_videos": outcome.total_videos,
            },
        )
    return outcome


@router.get("/certificates/my-certificates", response_model=List[cert_schemas.CertificateDisplay])
def get_my_certificates_list(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Lists all active certificates issued to the current authenticated user.
    """
    return certificate_issuer.list_certificates_for_user(db, current_user.id)


@router.get("/certificates/{certificate_id}", response_model=cert_schemas.CertificateDisplay)
def verify_certificate(
    certificate_id: str,
    db: Session = Depends(get_db)
):
    """
    Verifies a certificate by its id. Publicly accessible; revoked certificates are not shown.
    """
    logger.info(f"Verifying certificate with id: {certificate_id}")
    certificate = certificate_issuer.get_certificate(db, certificate_id)
    if not certificate or not certificate.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Certificate not found or no longer valid.")
    return certificate
