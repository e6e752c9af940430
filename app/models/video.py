"""Uploaded video: metadata record pointing at one object in the asset store."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from app.database import Base


class VideoVisibility(str, enum.Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


DEFAULT_TITLE = "Untitled"
MAX_TITLE_LENGTH = 255
MAX_FILENAME_LENGTH = 255
MAX_THUMBNAIL_URL_LENGTH = 1024


class Video(Base):
    __tablename__ = "videos"
    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
        CheckConstraint("likes_count >= 0", name="ck_videos_likes_count_non_negative"),
    )

    # Surrogate key; insertion order, used as the stable tie-breaker in listings
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False, index=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(MAX_TITLE_LENGTH), nullable=False, default=DEFAULT_TITLE)
    description = Column(Text, nullable=True)
    asset_path = Column(String(512), nullable=False, unique=True)  # owner_id/uuid.ext in the asset store
    original_filename = Column(String(MAX_FILENAME_LENGTH), nullable=True)
    content_type = Column(String(100), nullable=True)  # video/mp4 etc
    file_size = Column(Integer, nullable=True)
    thumbnail_url = Column(String(MAX_THUMBNAIL_URL_LENGTH), nullable=True)
    visibility = Column(String(16), nullable=False, default=VideoVisibility.PRIVATE.value, index=True)
    views = Column(Integer, nullable=False, default=0)
    likes_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_public(self) -> bool:
        return self.visibility == VideoVisibility.PUBLIC.value
