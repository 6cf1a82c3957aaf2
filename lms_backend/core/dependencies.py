from fastapi import Depends, HTTPException, status, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session
import logging

from lms_backend.core.database import get_db
from lms_backend.core.security import verify_firebase_id_token
from lms_backend.crud.user_crud import get_user_by_firebase_uid
from lms_backend.crud.catalog_crud import get_course
from lms_backend.models.user_model import User
from lms_backend.models.course_model import Course
from lms_backend.models.enums import UserRole

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> str:
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() != "bearer" or not token:
        logger.warning(f"Request to {request.url.path} without a Bearer token.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Bearer token required.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


async def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Resolves the caller from the Firebase ID token in the Authorization header.
    Users must already exist locally (matched on firebase_uid); 403 otherwise.
    """
    token_data = verify_firebase_id_token(_bearer_token(request))

    user = get_user_by_firebase_uid(db, firebase_uid=token_data.firebase_uid)
    if user is None:
        logger.warning(f"No local user for Firebase UID {token_data.firebase_uid}.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account not found or not fully registered in the system.",
        )

    logger.debug(f"Request authenticated as user {user.id} ({user.email}).")
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    # Hook for an is_active flag once user management exposes one
    return current_user


async def get_current_admin_user(current_user: User = Depends(get_current_active_user)) -> User:
    if current_user.role != UserRole.ADMIN.value:
        logger.warning(f"User {current_user.id} ({current_user.role}) denied access to an admin route.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operation not permitted: Requires admin privileges.",
        )
    return current_user


def get_course_or_404(course_id: int, db: Session = Depends(get_db)) -> Course:
    course = get_course(db, course_id)
    if course is None:
        logger.warning(f"Course {course_id} not found.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Course with ID {course_id} not found.")
    return course
