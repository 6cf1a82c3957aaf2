import os
import logging

import firebase_admin
from firebase_admin import credentials

from lms_backend.core.config import settings

logger = logging.getLogger(__name__)


def initialize_firebase_app() -> firebase_admin.App:
    """
    Returns the default Firebase app, creating it on first use.

    With GOOGLE_APPLICATION_CREDENTIALS pointing at a service account key the
    key is used; otherwise the SDK falls back to Application Default Credentials
    (e.g. the runtime service account on Cloud Run).
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass  # not initialized yet

    key_path = settings.GOOGLE_APPLICATION_CREDENTIALS
    if key_path:
        if not os.path.exists(key_path):
            logger.error(f"Firebase service account key file not found at path: {key_path}")
            raise FileNotFoundError(f"Firebase service account key file not found at path: {key_path}")
        cred = credentials.Certificate(key_path)
        logger.info(f"Initializing Firebase Admin SDK with service account key {key_path}")
    else:
        cred = credentials.ApplicationDefault()
        logger.info("GOOGLE_APPLICATION_CREDENTIALS not set; initializing Firebase Admin SDK with default credentials.")

    app = firebase_admin.initialize_app(cred)
    logger.info("Firebase Admin SDK initialized.")
    return app
