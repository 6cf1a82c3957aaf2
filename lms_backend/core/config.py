import os
from dotenv import load_dotenv
from typing import Optional, List

# Load .env file from the package directory (parent of 'core')
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
load_dotenv(dotenv_path)

class Settings:
    PROJECT_NAME: str = "LMS Progress & Certificates API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./lms.db")
    # Create tables on startup (dev). In production, use Alembic migrations.
    AUTO_CREATE_TABLES: bool = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"

    # Firebase
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    # Also reject tokens revoked since issuance (one extra Firebase call per request)
    FIREBASE_CHECK_REVOKED: bool = os.getenv("FIREBASE_CHECK_REVOKED", "false").lower() == "true"

    # CORS
    CORS_ALLOWED_ORIGINS_STR: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    @property
    def CORS_ALLOWED_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ALLOWED_ORIGINS_STR.split(',') if origin.strip()]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Progress tracking
    # Players rarely report an exact end-of-stream position, so "completed" starts below 100.
    COMPLETION_THRESHOLD_PERCENT: int = int(os.getenv("COMPLETION_THRESHOLD_PERCENT", "95"))

    # Certificates
    CERTIFICATE_ID_PREFIX: str = os.getenv("CERTIFICATE_ID_PREFIX", "CERT")
    CERTIFICATE_FALLBACK_USER_NAME: str = os.getenv("CERTIFICATE_FALLBACK_USER_NAME", "Learner")

    # Reconciliation sweep
    SWEEP_MAX_WORKERS: int = int(os.getenv("SWEEP_MAX_WORKERS", "4"))


settings = Settings()

# Example usage:
# from lms_backend.core.config import settings
# threshold = settings.COMPLETION_THRESHOLD_PERCENT
