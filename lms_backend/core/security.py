"""Firebase ID token verification for the bearer-token dependencies."""
import logging

from fastapi import HTTPException, status
from firebase_admin import auth
from pydantic import ValidationError

from lms_backend.core.config import settings
from lms_backend.core.firebase_config import initialize_firebase_app
from lms_backend.schemas.user_schema import TokenData

logger = logging.getLogger(__name__)

# Checked in order; ExpiredIdTokenError and RevokedIdTokenError subclass InvalidIdTokenError
_TOKEN_ERROR_DETAILS = (
    (auth.ExpiredIdTokenError, "Authentication token has expired. Please log in again."),
    (auth.RevokedIdTokenError, "Authentication token has been revoked. Please log in again."),
    (auth.UserDisabledError, "This account has been disabled."),
    (auth.InvalidIdTokenError, "Invalid or expired authentication token."),
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_firebase_id_token(id_token: str) -> TokenData:
    """
    Decodes a Firebase ID token into TokenData (uid + email).
    401 for bad, expired, revoked or claim-less tokens; 500 if the SDK itself fails.
    """
    if not id_token:
        raise _unauthorized("Not authenticated. Bearer token required.")

    try:
        initialize_firebase_app()
        claims = auth.verify_id_token(id_token, check_revoked=settings.FIREBASE_CHECK_REVOKED)
    except (auth.InvalidIdTokenError, auth.UserDisabledError) as e:
        logger.warning(f"Firebase ID token rejected: {e}")
        detail = next(message for error_type, message in _TOKEN_ERROR_DETAILS if isinstance(e, error_type))
        raise _unauthorized(detail) from e
    except Exception as e:
        logger.error(f"Firebase ID token verification failed unexpectedly: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not verify authentication token due to a server error.",
        ) from e

    try:
        token_data = TokenData(firebase_uid=claims.get("uid"), email=claims.get("email"))
    except ValidationError:
        logger.warning(f"Firebase ID token for uid {claims.get('uid')} lacks a usable uid/email claim.")
        raise _unauthorized("Invalid authentication credentials: Missing essential token claims.")

    logger.debug(f"Firebase ID token verified for UID: {token_data.firebase_uid}")
    return token_data
