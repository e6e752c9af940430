"""One row per (video, user) like. Composite primary key: a user likes a video at most once."""
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, String
from app.database import Base


class VideoLike(Base):
    __tablename__ = "video_likes"

    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
