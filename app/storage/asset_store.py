"""
Asset store: binary video objects keyed by an opaque path ("{owner_id}/{uuid}.{ext}").
LocalAssetStore keeps them under settings.video_upload_dir; public URLs are
settings.asset_public_base_url + "/" + path (static mount or CDN in front of that folder).
"""
import logging
import os
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from app.config import get_settings

logger = logging.getLogger(__name__)


class AssetStoreError(Exception):
    """Asset store operation failed (I/O, permissions, invalid path)."""


class AssetNotFound(AssetStoreError):
    pass


class AssetStore:
    """Contract used by the publishing pipeline."""

    def put(self, path: str, chunks: Iterable[bytes]) -> int:
        """Write all chunks at path. Returns bytes written. Nothing is left behind on failure."""
        raise NotImplementedError

    def delete(self, path: str) -> None:
        """Remove object at path. Raises AssetNotFound if it does not exist."""
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def public_url(self, path: str) -> str:
        raise NotImplementedError

    def local_path(self, path: str) -> Path | None:
        """Filesystem path of the object when the store is local and the object exists, else None."""
        return None


def video_upload_dir() -> Path:
    settings = get_settings()
    if settings.video_upload_dir:
        return Path(settings.video_upload_dir)
    return Path(__file__).resolve().parent.parent.parent / "uploads" / "videos"


class LocalAssetStore(AssetStore):
    def __init__(self, root: Path | str, public_base_url: str = "/media/videos"):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def resolve(self, path: str) -> Path:
        """Absolute file path for an asset path. Raises AssetStoreError if path escapes the root."""
        base = self.root.resolve()
        try:
            full = (base / path).resolve()
            full.relative_to(base)  # raises ValueError if path escaped
        except (ValueError, OSError) as e:
            raise AssetStoreError(f"Invalid asset path: {path!r}") from e
        if full == base:
            raise AssetStoreError(f"Invalid asset path: {path!r}")
        return full

    def put(self, path: str, chunks: Iterable[bytes]) -> int:
        target = self.resolve(path)
        # Write to a temp name and rename, so a reader never sees a half-written object
        tmp = target.with_name(f".{target.name}.{uuid.uuid4().hex}.part")
        written = 0
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("wb") as f:
                for chunk in chunks:
                    f.write(chunk)
                    written += len(chunk)
            os.replace(tmp, target)
        except OSError as e:
            raise AssetStoreError(f"Could not write asset {path}: {e}") from e
        finally:
            if tmp.exists():
                tmp.unlink()
        return written

    def delete(self, path: str) -> None:
        target = self.resolve(path)
        try:
            target.unlink()
        except FileNotFoundError as e:
            raise AssetNotFound(f"Asset not found: {path}") from e
        except OSError as e:
            raise AssetStoreError(f"Could not delete asset {path}: {e}") from e

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).is_file()
        except AssetStoreError:
            return False

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"

    def local_path(self, path: str) -> Path | None:
        try:
            full = self.resolve(path)
        except AssetStoreError:
            return None
        return full if full.is_file() else None


@lru_cache
def get_asset_store() -> AssetStore:
    """FastAPI dependency: process-wide asset store built from settings."""
    settings = get_settings()
    root = video_upload_dir()
    root.mkdir(parents=True, exist_ok=True)
    logger.info("Asset store root: %s", root)
    return LocalAssetStore(root, settings.asset_public_base_url)
