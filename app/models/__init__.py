from app.models.user import User
from app.models.video import Video, VideoVisibility
from app.models.video_like import VideoLike

__all__ = ["User", "Video", "VideoVisibility", "VideoLike"]
