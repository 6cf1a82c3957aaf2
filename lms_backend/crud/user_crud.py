from sqlalchemy.orm import Session
from dataclasses import dataclass
import logging
from typing import Optional

from lms_backend.models.user_model import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayIdentity:
    name: Optional[str]
    fallback_email: Optional[str]


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Fetches a user by their internal database ID."""
    logger.debug(f"Fetching user by ID: {user_id}")
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_firebase_uid(db: Session, firebase_uid: str) -> User | None:
    """Fetches a user by their Firebase UID."""
    logger.debug(f"Fetching user by Firebase UID: {firebase_uid}")
    return db.query(User).filter(User.firebase_uid == firebase_uid).first()

def get_display_identity(db: Session, user_id: int) -> Optional[DisplayIdentity]:
    """Name/email pair used for the certificate snapshot. None if the user does not exist."""
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    return DisplayIdentity(name=user.display_name, fallback_email=user.email)
