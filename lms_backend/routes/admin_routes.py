from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List
import logging

from lms_backend.core.database import get_db, SessionLocal
from lms_backend.core.dependencies import get_current_admin_user, get_course_or_404
from lms_backend.crud import certificate_crud, viewing_record_crud
from lms_backend.models.user_model import User
from lms_backend.models.course_model import Course
from lms_backend.schemas import (
    viewing_record_schema as vr_schemas,
    certificate_schema as cert_schemas,
    admin_schema,
)
from lms_backend.services import certificate_issuer, progress_tracker, reconciliation


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin Panel"])


def get_session_factory():
    """Session factory used by the sweep workers (one session per course)."""
    return SessionLocal


# --- Certificates ---

@router.post("/certificates/reconcile", response_model=admin_schema.SweepReport)
def admin_run_reconciliation_sweep(
    session_factory=Depends(get_session_factory),
    current_admin: User = Depends(get_current_admin_user)
):
    """
    Admin: issue certificates to every learner who completed a course but has none.
    Safe to run repeatedly.
    """
    logger.info(f"Admin {current_admin.email} started a reconciliation sweep.")
    return reconciliation.run_reconciliation_sweep(session_factory=session_factory)


@router.get("/courses/{course_id}/certificates", response_model=List[cert_schemas.CertificateDisplay])
def admin_list_course_certificates(
    course: Course = Depends(get_course_or_404),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500)
):
    return certificate_crud.get_certificates_for_course(db, course.id, skip=skip, limit=limit)


@router.patch("/certificates/{certificate_id}", response_model=cert_schemas.CertificateDisplay)
def admin_update_certificate_status(
    certificate_id: str,
    status_in: cert_schemas.CertificateStatusUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user)
):
    """
    Admin: revoke (is_active=false) or reinstate a certificate. Certificates are never deleted here.
    """
    logger.info(f"Admin {current_admin.email} setting is_active={status_in.is_active} on certificate {certificate_id}")
    certificate = certificate_issuer.set_certificate_active(db, certificate_id, status_in.is_active)
    if not certificate:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Certificate not found.")
    return certificate


# --- Viewing history ---

@router.get("/courses/{course_id}/viewing-history", response_model=List[vr_schemas.ViewingRecordDisplay])
def admin_course_viewing_history(
    course: Course = Depends(get_course_or_404),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=1000)
):
    return viewing_record_crud.get_records_for_course(db, course.id, skip=skip, limit=limit)


@router.post("/progress/reset", response_model=vr_schemas.ViewingRecordDisplay)
def admin_reset_progress(
    reset_in: vr_schemas.ProgressResetRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user)
):
    """
    Admin: reopen a learner's viewing record. Issued certificates are not affected.
    """
    logger.info(f"Admin {current_admin.email} resetting progress for user {reset_in.user_id}, video {reset_in.video_id}")
    record = progress_tracker.reset_progress(db, reset_in.user_id, reset_in.video_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Viewing record not found.")
    return record
