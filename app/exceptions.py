"""
Error taxonomy for the publishing / engagement core.
Services raise these; app.main renders them as {"detail", "error_code"} JSON with status_code.
"""


class VideoServiceError(Exception):
    status_code = 400
    error_code = "video_error"
    default_detail = "Video operation failed."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidMediaKind(VideoServiceError):
    status_code = 415
    error_code = "invalid_media_kind"
    default_detail = "File must be a video. Allowed: mp4, webm, ogg, mov, mkv, avi, m4v."


class InvalidRequest(VideoServiceError, ValueError):
    """Bad field values or query parameters; raised before any write."""
    status_code = 422
    error_code = "invalid_request"
    default_detail = "Invalid request."


class UploadTooLarge(VideoServiceError):
    status_code = 413
    error_code = "upload_too_large"
    default_detail = "Video file is too large."


class AuthenticationRequired(VideoServiceError):
    status_code = 401
    error_code = "authentication_required"
    default_detail = "You need to be signed in to do this."


class NotAuthorized(VideoServiceError):
    status_code = 403
    error_code = "not_authorized"
    default_detail = "Only the owner can modify this video."


class NotFound(VideoServiceError):
    status_code = 404
    error_code = "not_found"
    default_detail = "Video not found."


class AssetWriteFailed(VideoServiceError):
    """Step 1 of upload failed; nothing was recorded."""
    status_code = 502
    error_code = "asset_write_failed"
    default_detail = "Could not store the video file."


class OrphanedAssetError(VideoServiceError):
    """Asset was written but the metadata record was not. Left for the reconciliation sweep."""
    status_code = 500
    error_code = "orphaned_asset"
    default_detail = "Video file stored but its record could not be saved."

    def __init__(self, asset_path: str, detail: str | None = None):
        self.asset_path = asset_path
        super().__init__(detail)


class DeletePartialFailure(VideoServiceError):
    """Asset deletion failed; the record is kept so delete can be retried."""
    status_code = 502
    error_code = "delete_partial_failure"
    default_detail = "Could not delete the video file. The video was kept; try again."

    def __init__(self, video_id: str, asset_path: str, detail: str | None = None):
        self.video_id = video_id
        self.asset_path = asset_path
        super().__init__(detail)
