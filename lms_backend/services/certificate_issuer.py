"""
Certificate issuance.

issue_certificate() creates at most one certificate per (user, course). It
does not check completion itself; callers go through
issue_certificate_if_eligible() or establish completion first (the sweep).
Races between concurrent issuers are settled by the unique constraint on
(user_id, course_id): the loser re-reads the winner's row.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lms_backend.core.config import settings
from lms_backend.core.exceptions import DependencyUnavailable, InvalidInput, StorageConflict, StorageFailure
from lms_backend.core.validators import require_ids
from lms_backend.crud import catalog_crud, certificate_crud, user_crud
from lms_backend.models.certificate_model import Certificate, generate_certificate_id
from lms_backend.schemas.certificate_schema import IssueResult, NotEligible
from lms_backend.services import completion_evaluator

logger = logging.getLogger(__name__)


def _find_existing(db: Session, user_id: int, course_id: int) -> Optional[Certificate]:
    try:
        return certificate_crud.get_certificate_for_user_course(db, user_id, course_id)
    except SQLAlchemyError as e:
        logger.error(f"Certificate lookup failed for user {user_id}, course {course_id}: {e}", exc_info=True)
        raise StorageFailure("Could not read certificates") from e


def _snapshot(db: Session, user_id: int, course_id: int) -> Tuple[str, str]:
    """user_name / course_title as they are right now."""
    try:
        identity = user_crud.get_display_identity(db, user_id)
        course_title = catalog_crud.get_course_title(db, course_id)
    except SQLAlchemyError as e:
        logger.error(f"Identity/title lookup failed for user {user_id}, course {course_id}: {e}", exc_info=True)
        raise DependencyUnavailable("Could not load user or course details") from e

    if identity is None:
        raise DependencyUnavailable(f"User {user_id} not found")
    if not course_title:
        raise DependencyUnavailable(f"Course {course_id} not found")

    user_name = identity.name or identity.fallback_email or settings.CERTIFICATE_FALLBACK_USER_NAME
    return user_name, course_title


def issue_certificate(db: Session, user_id: int, course_id: int) -> IssueResult:
    require_ids(user_id=user_id, course_id=course_id)

    existing = _find_existing(db, user_id, course_id)
    if existing:
        logger.info(f"Certificate already exists for user_id {user_id}, course_id {course_id} (ID: {existing.id}).")
        return IssueResult(certificate_id=existing.id, created=False)

    user_name, course_title = _snapshot(db, user_id, course_id)
    completion_date = completion_evaluator.latest_completion_timestamp(db, user_id, course_id)
    now = datetime.now(timezone.utc)

    certificate = Certificate(
        id=generate_certificate_id(),
        user_id=user_id,
        course_id=course_id,
        user_name=user_name,
        course_title=course_title,
        completion_date=completion_date or now,
        is_active=True,
        created_at=now,
    )

    try:
        certificate_crud.insert_certificate(db, certificate)
    except StorageConflict as conflict:
        winner = _find_existing(db, user_id, course_id)
        if winner is None:
            # Not a (user, course) duplicate, e.g. an id collision
            logger.error(f"Certificate insert conflict for user {user_id}, course {course_id} with no existing certificate.")
            raise StorageFailure("Certificate insert conflicted without an existing certificate") from conflict
        logger.info(f"Concurrent issuance for user_id {user_id}, course_id {course_id}; using existing certificate {winner.id}.")
        return IssueResult(certificate_id=winner.id, created=False)

    logger.info(f"Certificate {certificate.id} issued to user {user_id} ('{user_name}') for course {course_id} ('{course_title}').")
    return IssueResult(certificate_id=certificate.id, created=True)


def issue_certificate_if_eligible(db: Session, user_id: int, course_id: int) -> Union[IssueResult, NotEligible]:
    require_ids(user_id=user_id, course_id=course_id)

    summary = completion_evaluator.course_completion_summary(db, user_id, course_id)
    if not summary.is_complete:
        not_eligible = NotEligible(
            user_id=user_id,
            course_id=course_id,
            completed_videos=summary.completed_videos,
            total_videos=summary.total_videos,
        )
        logger.info(f"User {user_id} not eligible for a certificate in course {course_id}: {not_eligible.reason}")
        return not_eligible

    return issue_certificate(db, user_id, course_id)


def get_certificate(db: Session, certificate_id: str) -> Optional[Certificate]:
    if not certificate_id:
        raise InvalidInput("certificate_id is required")
    return certificate_crud.get_certificate_by_id(db, certificate_id)


def list_certificates_for_user(db: Session, user_id: int, include_inactive: bool = False) -> List[Certificate]:
    require_ids(user_id=user_id)
    return certificate_crud.get_certificates_for_user(db, user_id, include_inactive=include_inactive)


def set_certificate_active(db: Session, certificate_id: str, is_active: bool) -> Optional[Certificate]:
    """Soft revoke / reinstate. The snapshot fields never change."""
    if not certificate_id:
        raise InvalidInput("certificate_id is required")
    return certificate_crud.update_certificate_active(db, certificate_id, is_active)
