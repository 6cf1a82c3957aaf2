from sqlalchemy import (
    Column, Integer, String, Text, Float, ForeignKey, TIMESTAMP,
    Enum as SAEnum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from lms_backend.core.database import Base
from lms_backend.models.enums import CatalogStatus

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(
        SAEnum(CatalogStatus, name="course_status_enum", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=CatalogStatus.ACTIVE,
    )

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    videos = relationship("Video", back_populates="course", cascade="all, delete-orphan", order_by="Video.video_order")
    viewing_records = relationship("ViewingRecord", back_populates="course", cascade="all, delete-orphan")
    issued_certificates = relationship("Certificate", back_populates="course", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Course(id={self.id}, title='{self.title}', status='{self.status}')>"

class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    video_order = Column(Integer, nullable=False, default=0) # To order videos within a course
    duration_seconds = Column(Float, nullable=True) # Unknown until the asset has been processed
    status = Column(
        SAEnum(CatalogStatus, name="video_status_enum", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=CatalogStatus.ACTIVE,
    )

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("Course", back_populates="videos")
    viewing_records = relationship("ViewingRecord", back_populates="video", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Video(id={self.id}, course_id={self.course_id}, title='{self.title}', status='{self.status}')>"
