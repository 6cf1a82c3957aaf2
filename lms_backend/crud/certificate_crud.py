from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import List, Optional
import logging

from lms_backend.core.exceptions import StorageConflict, StorageFailure
from lms_backend.crud.integrity import is_unique_violation
from lms_backend.models.certificate_model import Certificate

logger = logging.getLogger(__name__)

def insert_certificate(db: Session, certificate: Certificate) -> Certificate:
    """
    Inserts a certificate row.
    The caller is responsible for the eligibility check and for the snapshot fields.
    Raises StorageConflict when (user_id, course_id) already has a certificate (a
    concurrent issuer won the race), StorageFailure for any other storage error,
    including other integrity violations such as an id collision.
    """
    logger.debug(f"Inserting certificate {certificate.id} for user_id {certificate.user_id}, course_id {certificate.course_id}")
    try:
        db.add(certificate)
        db.commit()
        db.refresh(certificate)
        logger.info(f"Certificate created successfully for user_id {certificate.user_id}, course_id {certificate.course_id} (ID: {certificate.id}).")
        return certificate
    except IntegrityError as e:
        db.rollback()
        if not is_unique_violation(e, "uq_user_course_certificate", "certificates", ("user_id", "course_id")):
            logger.error(f"Integrity error creating certificate for user_id {certificate.user_id}, course_id {certificate.course_id}: {e}", exc_info=True)
            raise StorageFailure("Failed to create certificate") from e
        logger.info(f"Certificate insert for user_id {certificate.user_id}, course_id {certificate.course_id} hit a uniqueness constraint.")
        raise StorageConflict(f"Certificate for user {certificate.user_id}, course {certificate.course_id} already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating certificate for user_id {certificate.user_id}, course_id {certificate.course_id}: {e}", exc_info=True)
        raise StorageFailure("Failed to create certificate") from e

def get_certificate_by_id(db: Session, certificate_id: str) -> Optional[Certificate]:
    """Fetches a certificate by its id."""
    logger.debug(f"Fetching certificate by ID: {certificate_id}")
    return db.query(Certificate).filter(Certificate.id == certificate_id).first()

def get_certificate_for_user_course(db: Session, user_id: int, course_id: int) -> Optional[Certificate]:
    logger.debug(f"Fetching certificate for user_id {user_id}, course_id {course_id}")
    return db.query(Certificate).filter(
        Certificate.user_id == user_id,
        Certificate.course_id == course_id
    ).first()

def get_certificates_for_user(db: Session, user_id: int, include_inactive: bool = False) -> List[Certificate]:
    """Fetches all certificates issued to a specific user."""
    logger.debug(f"Fetching certificates for user_id {user_id} (include_inactive={include_inactive})")
    query = db.query(Certificate).filter(Certificate.user_id == user_id)
    if not include_inactive:
        query = query.filter(Certificate.is_active.is_(True))
    return query.order_by(Certificate.created_at.desc(), Certificate.id).all()

def get_certificates_for_course(db: Session, course_id: int, skip: int = 0, limit: int = 100) -> List[Certificate]:
    """Fetches all certificates issued for a specific course."""
    logger.debug(f"Fetching certificates for course_id {course_id} with skip: {skip}, limit: {limit}")
    return db.query(Certificate).filter(Certificate.course_id == course_id).order_by(Certificate.created_at.desc(), Certificate.id).offset(skip).limit(limit).all()

def update_certificate_active(db: Session, certificate_id: str, is_active: bool) -> Optional[Certificate]:
    """Soft-revokes or reinstates a certificate."""
    logger.debug(f"Setting is_active={is_active} for certificate ID: {certificate_id}")
    certificate = get_certificate_by_id(db, certificate_id)
    if not certificate:
        logger.warning(f"Certificate with ID {certificate_id} not found for status update.")
        return None

    certificate.is_active = is_active
    try:
        db.commit()
        db.refresh(certificate)
        logger.info(f"Certificate {certificate_id} is_active set to {is_active}.")
        return certificate
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating certificate {certificate_id}: {e}", exc_info=True)
        raise StorageFailure("Failed to update certificate") from e
