"""
Engagement counters: view increments and like toggles.
Both are single database-side operations (UPDATE ... SET n = n + 1, row-locked check-and-flip);
never read-modify-write in Python, so concurrent callers do not lose updates.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NotFound, VideoServiceError
from app.identity import Identity
from app.models.video import Video
from app.models.video_like import VideoLike
from app.services.catalog import can_view

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LikeToggleResult:
    liked: bool
    likes_count: int


def increment_view(db: Session, video_id: str) -> None:
    """Best effort: failures are logged and swallowed so playback is never blocked."""
    try:
        db.query(Video).filter(Video.id == video_id).update(
            {Video.views: Video.views + 1},
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("View increment failed for video %s: %s", video_id, e)


def _toggle_like_once(db: Session, video_id: str, user_id: str) -> LikeToggleResult:
    # Lock the video row so concurrent toggles on it run one after another (no-op on SQLite,
    # which serializes writers anyway)
    video = db.query(Video).filter(Video.id == video_id).with_for_update().first()
    if not video or not can_view(video, user_id):
        raise NotFound()

    removed = (
        db.query(VideoLike)
        .filter(VideoLike.video_id == video_id, VideoLike.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if removed:
        delta = -1
    else:
        db.add(VideoLike(video_id=video_id, user_id=user_id))
        db.flush()
        delta = 1
    db.query(Video).filter(Video.id == video_id).update(
        {Video.likes_count: Video.likes_count + delta},
        synchronize_session=False,
    )
    likes_count = db.query(Video.likes_count).filter(Video.id == video_id).scalar()
    db.commit()
    return LikeToggleResult(liked=not removed, likes_count=likes_count)


def toggle_like(db: Session, identity: Identity, video_id: str) -> LikeToggleResult:
    """
    Flip the caller's like on a video and return the resulting state with the stored count.
    Anonymous callers get AuthenticationRequired; unknown or non-visible videos get NotFound.
    """
    user_id = identity.require_user_id()
    try:
        try:
            return _toggle_like_once(db, video_id, user_id)
        except IntegrityError:
            # Lost an insert race on (video_id, user_id); the like now exists, so flip it off
            db.rollback()
            logger.info("Like insert race on video %s for user %s; retrying toggle", video_id, user_id)
            return _toggle_like_once(db, video_id, user_id)
    except (VideoServiceError, SQLAlchemyError):
        # Release the row lock before the error leaves the service
        db.rollback()
        raise


def is_liked(db: Session, identity: Identity, video_id: str) -> bool:
    if not identity.is_authenticated:
        return False
    return (
        db.query(VideoLike.video_id)
        .filter(VideoLike.video_id == video_id, VideoLike.user_id == identity.user_id)
        .first()
        is not None
    )
