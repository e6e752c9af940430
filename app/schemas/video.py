from pydantic import BaseModel, Field, field_validator
from app.models.video import MAX_TITLE_LENGTH, VideoVisibility


class VideoUpdate(BaseModel):
    """Owner edit. Omitted fields stay unchanged; description "" clears it."""
    title: str | None = Field(None, max_length=MAX_TITLE_LENGTH)
    description: str | None = None
    visibility: VideoVisibility | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("title must not be blank")
        return v


class VideoResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str | None
    asset_path: str
    video_url: str
    thumbnail_url: str | None
    content_type: str | None
    file_size: int | None
    visibility: VideoVisibility
    views: int
    likes_count: int
    created_at: str
    updated_at: str
    liked: bool | None = None  # only on detail responses


class LikeToggleResponse(BaseModel):
    liked: bool
    likes_count: int
