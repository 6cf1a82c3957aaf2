from sqlalchemy import Column, Integer, Float, String, TIMESTAMP, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from lms_backend.core.database import Base
from lms_backend.models.enums import ViewingStatus

class ViewingRecord(Base):
    __tablename__ = "video_view_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True) # Denormalized for easier querying

    session_id = Column(String(255), nullable=True) # Player session that sent the latest update

    current_position = Column(Float, nullable=False, default=0) # Seconds
    total_watched_time = Column(Float, nullable=False, default=0) # Seconds, never decreases
    progress_percent = Column(Integer, nullable=False, default=0)
    status = Column(
        SAEnum(ViewingStatus, name="viewing_status_enum", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=ViewingStatus.NOT_STARTED,
        index=True,
    )

    start_time = Column(TIMESTAMP(timezone=True), nullable=True)
    end_time = Column(TIMESTAMP(timezone=True), nullable=True)
    last_updated = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="viewing_records")
    video = relationship("Video", back_populates="viewing_records")
    course = relationship("Course", back_populates="viewing_records")

    __table_args__ = (
        UniqueConstraint('user_id', 'video_id', name='uq_user_video_view_log'),
    )

    def __repr__(self):
        return f"<ViewingRecord(id={self.id}, user_id={self.user_id}, video_id={self.video_id}, course_id={self.course_id}, status='{self.status}', percent={self.progress_percent})>"
