from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import secrets
import string
import time

from lms_backend.core.database import Base
from lms_backend.core.config import settings

_ID_ALPHABET = string.digits + string.ascii_uppercase

def generate_certificate_id() -> str:
    """
    Generates a human-inspectable certificate id: CERT-<epoch millis>-<7 base36 chars>.
    Uniqueness is ultimately enforced by the primary key.
    """
    timestamp = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"{settings.CERTIFICATE_ID_PREFIX}-{timestamp}-{suffix}"

class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(String(64), primary_key=True, default=generate_certificate_id)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshot taken at issuance time; not updated if the user or course is renamed later
    user_name = Column(String(255), nullable=False)
    course_title = Column(String(255), nullable=False)
    completion_date = Column(TIMESTAMP(timezone=True), nullable=False)

    pdf_url = Column(String(512), nullable=True) # Filled in by the PDF renderer
    is_active = Column(Boolean, nullable=False, default=True) # Soft revocation

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="certificates")
    course = relationship("Course", back_populates="issued_certificates")

    __table_args__ = (
        UniqueConstraint('user_id', 'course_id', name='uq_user_course_certificate'), # User gets one certificate per course
    )

    def __repr__(self):
        return f"<Certificate(id='{self.id}', user_id={self.user_id}, course_id={self.course_id}, active={self.is_active})>"
