"""
Video library API: catalog listing, upload, owner edit/delete, view counting, likes, streaming.
Identity is optional on read endpoints (anonymous = explore/profile only); the core services
raise the domain errors, which app.main renders.
"""
import re
from pathlib import Path
from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from fastapi.responses import RedirectResponse, StreamingResponse
from sqlalchemy.orm import Session
from app.auth import get_identity
from app.config import get_settings
from app.database import get_db
from app.exceptions import NotFound
from app.identity import Identity
from app.models.video import Video, VideoVisibility
from app.schemas.video import LikeToggleResponse, VideoResponse, VideoUpdate
from app.services import catalog, engagement, publishing
from app.services.catalog import CatalogScope, SortKey
from app.services.publishing import CHUNK_SIZE
from app.storage.asset_store import AssetStore, get_asset_store

router = APIRouter(prefix="/api/videos", tags=["videos"])


def _video_response(video: Video, store: AssetStore, liked: bool | None = None) -> VideoResponse:
    return VideoResponse(
        id=video.id,
        owner_id=video.owner_id,
        title=video.title,
        description=video.description,
        asset_path=video.asset_path,
        video_url=store.public_url(video.asset_path),
        thumbnail_url=video.thumbnail_url,
        content_type=video.content_type,
        file_size=video.file_size,
        visibility=video.visibility,
        views=video.views,
        likes_count=video.likes_count,
        created_at=video.created_at.isoformat(),
        updated_at=video.updated_at.isoformat(),
        liked=liked,
    )


def _stream_file_range(path: Path, request: Request, content_type: str):
    """Handle Range request for video streaming. Returns Response with 206 or 200."""
    file_size = path.stat().st_size
    range_header = request.headers.get("range")
    if not range_header:
        def full_stream():
            with open(path, "rb") as f:
                while chunk := f.read(CHUNK_SIZE):
                    yield chunk

        return StreamingResponse(
            full_stream(),
            status_code=200,
            media_type=content_type or "video/mp4",
            headers={
                "Accept-Ranges": "bytes",
                "Content-Length": str(file_size),
                "Content-Disposition": "inline",
            },
        )

    # Parse Range: bytes=start-end
    m = re.match(r"bytes=(\d*)-(\d*)", range_header.strip())
    if not m:
        return Response(status_code=416, headers={"Content-Range": f"bytes */{file_size}"})
    start_s, end_s = m.groups()
    if not start_s and end_s:
        # Suffix range: last N bytes
        start = max(file_size - int(end_s), 0)
        end = file_size - 1
    else:
        start = int(start_s) if start_s else 0
        end = int(end_s) if end_s else file_size - 1
    if start > end or start >= file_size:
        return Response(status_code=416, headers={"Content-Range": f"bytes */{file_size}"})
    end = min(end, file_size - 1)
    length = end - start + 1

    def range_stream():
        with open(path, "rb") as f:
            f.seek(start)
            remaining = length
            while remaining > 0:
                read_size = min(CHUNK_SIZE, remaining)
                data = f.read(read_size)
                if not data:
                    break
                remaining -= len(data)
                yield data

    return StreamingResponse(
        range_stream(),
        status_code=206,
        media_type=content_type or "video/mp4",
        headers={
            "Accept-Ranges": "bytes",
            "Content-Range": f"bytes {start}-{end}/{file_size}",
            "Content-Length": str(length),
            "Content-Disposition": "inline",
        },
    )


@router.get("", response_model=list[VideoResponse])
def list_videos(
    scope: CatalogScope = CatalogScope.EXPLORE,
    owner_id: str | None = None,
    q: str | None = None,
    sort: SortKey = SortKey.RECENT,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
):
    """Explore (public), personal (caller's own, any visibility) or profile (owner_id's public videos)."""
    items = catalog.list_videos(db, identity, scope, owner_id=owner_id, search=q, sort=sort)
    return [_video_response(v, store) for v in items]


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def upload_video(
    file: UploadFile = File(...),
    title: str | None = Form(None),
    description: str | None = Form(None),
    visibility: VideoVisibility = Form(VideoVisibility.PRIVATE),
    thumbnail_url: str | None = Form(None),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
):
    """Upload a video file plus its metadata. The caller becomes the owner."""
    video = publishing.upload_video(
        db,
        store,
        identity,
        file.file,
        filename=file.filename,
        content_type=file.content_type,
        title=title,
        description=description,
        visibility=visibility,
        thumbnail_url=thumbnail_url,
        total_size=file.size,
        max_bytes=get_settings().max_upload_bytes,
    )
    return _video_response(video, store)


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
):
    """Video detail with the caller's like status. Private videos are visible to their owner only."""
    video = catalog.get_video(db, identity, video_id)
    return _video_response(video, store, liked=engagement.is_liked(db, identity, video_id))


@router.patch("/{video_id}", response_model=VideoResponse)
def update_video(
    video_id: str,
    body: VideoUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
):
    """Owner only: edit title, description and visibility."""
    video = publishing.edit_video(
        db,
        identity,
        video_id,
        title=body.title,
        description=body.description,
        visibility=body.visibility,
    )
    return _video_response(video, store)


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_video(
    video_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
):
    """Owner only: delete the file, then the record."""
    publishing.delete_video(db, store, identity, video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{video_id}/views", status_code=status.HTTP_204_NO_CONTENT)
def record_view(video_id: str, db: Session = Depends(get_db)):
    """Count one playback. Always 204; counting failures never reach the player."""
    engagement.increment_view(db, video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{video_id}/like", response_model=LikeToggleResponse)
def toggle_like(
    video_id: str,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Like / unlike. Returns the new state and the stored likes_count."""
    result = engagement.toggle_like(db, identity, video_id)
    return LikeToggleResponse(liked=result.liked, likes_count=result.likes_count)


@router.get("/{video_id}/stream")
def stream_video(
    video_id: str,
    request: Request,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
):
    """
    Stream the video file. Supports Range requests for seeking. Content-Disposition: inline.
    Stores without local files redirect to the public URL.
    """
    video = catalog.get_video(db, identity, video_id)
    path = store.local_path(video.asset_path)
    if path is None:
        if store.exists(video.asset_path):
            return RedirectResponse(store.public_url(video.asset_path))
        raise NotFound("Video file not found.")
    return _stream_file_range(path, request, video.content_type or "video/mp4")
