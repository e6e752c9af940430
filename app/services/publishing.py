"""
Publishing pipeline: upload (asset write, then record insert), edit-in-place, delete (asset, then record).
The two stores are not committed atomically; each partial failure is reported as its own error
(OrphanedAssetError, DeletePartialFailure) and never retried behind the caller's back.
"""
import logging
import uuid
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import (
    AssetWriteFailed,
    DeletePartialFailure,
    InvalidMediaKind,
    InvalidRequest,
    NotAuthorized,
    NotFound,
    OrphanedAssetError,
    UploadTooLarge,
)
from app.identity import Identity
from app.models.video import (
    DEFAULT_TITLE,
    MAX_FILENAME_LENGTH,
    MAX_THUMBNAIL_URL_LENGTH,
    MAX_TITLE_LENGTH,
    Video,
    VideoVisibility,
)
from app.models.video_like import VideoLike
from app.storage.asset_store import AssetNotFound, AssetStore, AssetStoreError

logger = logging.getLogger(__name__)

# extension -> canonical content type
VIDEO_EXTENSIONS = {
    ".mp4": "video/mp4",
    ".m4v": "video/x-m4v",
    ".webm": "video/webm",
    ".ogg": "video/ogg",
    ".ogv": "video/ogg",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",
    ".avi": "video/x-msvideo",
}
VIDEO_CONTENT_TYPES = set(VIDEO_EXTENSIONS.values()) | {"video/mpeg"}
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}
CHUNK_SIZE = 1024 * 1024  # 1 MB

# Share of the progress bar spent on the asset write; the rest is the record insert
WRITE_PROGRESS_SHARE = 90

ProgressCallback = Callable[[int], None]


def resolve_media_kind(content_type: str | None, filename: str | None) -> tuple[str, str]:
    """
    Return (content_type, extension) for a supported video upload; raise InvalidMediaKind otherwise.
    A declared non-video type is rejected even when the filename looks like a video.
    """
    ct = (content_type or "").split(";")[0].strip().lower()
    ext = Path(filename or "").suffix.lower()
    if ct in VIDEO_CONTENT_TYPES:
        if ext not in VIDEO_EXTENSIONS:
            ext = next((e for e, t in VIDEO_EXTENSIONS.items() if t == ct), ".mp4")
        return ct, ext
    if ct in GENERIC_CONTENT_TYPES and ext in VIDEO_EXTENSIONS:
        return VIDEO_EXTENSIONS[ext], ext
    raise InvalidMediaKind()


def generate_asset_path(owner_id: str, extension: str) -> str:
    """Collision-free asset path scoped under the owner: {owner_id}/{uuid4}{ext}."""
    return f"{owner_id}/{uuid.uuid4()}{extension}"


class _Progress:
    """Forwards non-decreasing percentages to an optional callback."""

    def __init__(self, callback: ProgressCallback | None):
        self._callback = callback
        self._last = -1

    def report(self, percent: int) -> None:
        percent = max(0, min(100, int(percent)))
        if self._callback is None or percent <= self._last:
            return
        self._last = percent
        self._callback(percent)


def _read_chunks(
    file: BinaryIO,
    progress: _Progress,
    total_size: int | None,
    max_bytes: int | None,
) -> Iterator[bytes]:
    read = 0
    while chunk := file.read(CHUNK_SIZE):
        read += len(chunk)
        if max_bytes is not None and read > max_bytes:
            raise UploadTooLarge(f"Video file exceeds the {max_bytes} byte limit.")
        if total_size:
            progress.report(read * WRITE_PROGRESS_SHARE // total_size)
        yield chunk


def _clean_text(value: str | None) -> str | None:
    return (value or "").strip() or None


def _check_length(field: str, value: str | None, limit: int) -> None:
    if value is not None and len(value) > limit:
        raise InvalidRequest(f"{field} must be at most {limit} characters.")


def _shorten_filename(filename: str | None) -> str | None:
    if not filename or len(filename) <= MAX_FILENAME_LENGTH:
        return filename or None
    suffix = Path(filename).suffix[:16]
    return filename[: MAX_FILENAME_LENGTH - len(suffix)] + suffix


def upload_video(
    db: Session,
    store: AssetStore,
    identity: Identity,
    file: BinaryIO,
    *,
    filename: str | None,
    content_type: str | None,
    title: str | None = None,
    description: str | None = None,
    visibility: VideoVisibility = VideoVisibility.PRIVATE,
    thumbnail_url: str | None = None,
    total_size: int | None = None,
    max_bytes: int | None = None,
    on_progress: ProgressCallback | None = None,
) -> Video:
    """
    Store the file, then insert its Video record (views=0, likes_count=0).
    Raises AuthenticationRequired / InvalidMediaKind / InvalidRequest before any write,
    AssetWriteFailed or UploadTooLarge if step 1 fails (nothing recorded), OrphanedAssetError if step 2 fails.
    """
    owner_id = identity.require_user_id()
    ct, ext = resolve_media_kind(content_type, filename)
    title = _clean_text(title) or DEFAULT_TITLE
    thumbnail_url = _clean_text(thumbnail_url)
    _check_length("title", title, MAX_TITLE_LENGTH)
    _check_length("thumbnail_url", thumbnail_url, MAX_THUMBNAIL_URL_LENGTH)
    progress = _Progress(on_progress)
    progress.report(0)

    asset_path = generate_asset_path(owner_id, ext)
    try:
        size = store.put(asset_path, _read_chunks(file, progress, total_size, max_bytes))
    except AssetStoreError as e:
        logger.error("Asset write failed for %s: %s", asset_path, e)
        raise AssetWriteFailed() from e
    progress.report(WRITE_PROGRESS_SHARE)

    video = Video(
        owner_id=owner_id,
        title=title,
        description=_clean_text(description),
        asset_path=asset_path,
        original_filename=_shorten_filename(filename),
        content_type=ct,
        file_size=size,
        thumbnail_url=thumbnail_url,
        visibility=VideoVisibility(visibility).value,
        views=0,
        likes_count=0,
    )
    try:
        db.add(video)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Video record insert failed; orphaned asset %s: %s", asset_path, e)
        raise OrphanedAssetError(asset_path) from e
    db.refresh(video)
    progress.report(100)
    logger.info("Video %s uploaded by %s (%s bytes)", video.id, owner_id, size)
    return video


def _get_owned_video(db: Session, identity: Identity, video_id: str) -> Video:
    requester_id = identity.require_user_id()
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise NotFound()
    if video.owner_id != requester_id:
        raise NotAuthorized()
    return video


def edit_video(
    db: Session,
    identity: Identity,
    video_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
    visibility: VideoVisibility | None = None,
) -> Video:
    """Owner-only metadata update. None leaves a field unchanged; an empty description clears it."""
    video = _get_owned_video(db, identity, video_id)
    if title is not None:
        title = title.strip()
        if not title:
            raise InvalidRequest("title must not be blank.")
        _check_length("title", title, MAX_TITLE_LENGTH)
        video.title = title
    if description is not None:
        video.description = _clean_text(description)
    if visibility is not None:
        video.visibility = VideoVisibility(visibility).value
    db.commit()
    db.refresh(video)
    return video


def delete_video(db: Session, store: AssetStore, identity: Identity, video_id: str) -> None:
    """
    Owner-only delete. The asset goes first; the record (and its likes) only once the asset is gone
    or confirmed absent. On asset failure the record is kept and DeletePartialFailure is raised;
    if the record delete then fails, DeletePartialFailure again (retrying finishes the job).
    """
    video = _get_owned_video(db, identity, video_id)
    asset_path = video.asset_path
    try:
        store.delete(asset_path)
    except AssetNotFound:
        logger.warning("Asset %s already absent; removing record for video %s", asset_path, video_id)
    except AssetStoreError as e:
        logger.error("Asset delete failed for video %s (%s): %s", video_id, asset_path, e)
        raise DeletePartialFailure(video_id, asset_path) from e

    try:
        db.query(VideoLike).filter(VideoLike.video_id == video.id).delete(synchronize_session=False)
        db.delete(video)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Record delete failed for video %s after its asset was removed", video_id)
        raise DeletePartialFailure(
            video_id,
            asset_path,
            "Video file was removed but its record could not be deleted; try again.",
        ) from e
    logger.info("Video %s deleted", video_id)
