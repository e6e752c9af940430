"""
Catalog listing: scope (explore / personal / profile) + title search + sort key.
Pure function of its inputs and current table state; callers re-query on any change.
"""
import enum

from sqlalchemy.orm import Session

from app.exceptions import InvalidRequest, NotFound
from app.identity import Identity
from app.models.video import Video, VideoVisibility


class CatalogScope(str, enum.Enum):
    EXPLORE = "explore"
    PERSONAL = "personal"
    PROFILE = "profile"


class SortKey(str, enum.Enum):
    RECENT = "recent"
    VIEWS = "views"
    LIKES = "likes"


SORT_COLUMNS = {
    SortKey.RECENT: Video.created_at,
    SortKey.VIEWS: Video.views,
    SortKey.LIKES: Video.likes_count,
}


def can_view(video: Video, viewer_id: str | None) -> bool:
    return video.is_public or (viewer_id is not None and video.owner_id == viewer_id)


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user text matches literally (escape char: backslash)."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_videos(
    db: Session,
    identity: Identity,
    scope: CatalogScope,
    *,
    owner_id: str | None = None,
    search: str | None = None,
    sort: SortKey = SortKey.RECENT,
) -> list[Video]:
    """
    explore: all public videos. personal: everything the caller owns (AuthenticationRequired if
    anonymous). profile: owner_id's public videos. Ties keep insertion order.
    """
    scope = CatalogScope(scope)
    q = db.query(Video)
    if scope == CatalogScope.EXPLORE:
        q = q.filter(Video.visibility == VideoVisibility.PUBLIC.value)
    elif scope == CatalogScope.PERSONAL:
        q = q.filter(Video.owner_id == identity.require_user_id())
    else:
        if not owner_id:
            raise InvalidRequest("owner_id is required for profile scope.")
        q = q.filter(Video.owner_id == owner_id, Video.visibility == VideoVisibility.PUBLIC.value)

    text = (search or "").strip()
    if text:
        q = q.filter(Video.title.ilike(f"%{escape_like(text)}%", escape="\\"))

    column = SORT_COLUMNS[SortKey(sort)]
    return q.order_by(column.desc(), Video.pk.asc()).all()


def get_video(db: Session, identity: Identity, video_id: str) -> Video:
    """Video by id; private videos of other owners are reported as NotFound."""
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video or not can_view(video, identity.user_id):
        raise NotFound()
    return video
