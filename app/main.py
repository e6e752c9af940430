import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from app.config import get_settings
from app.exceptions import DeletePartialFailure, OrphanedAssetError, VideoServiceError
from app.routers import auth, videos
from app.storage.asset_store import video_upload_dir

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Video Library API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(VideoServiceError)
async def video_service_error_handler(_request: Request, exc: VideoServiceError):
    content = {"detail": exc.detail, "error_code": exc.error_code}
    if isinstance(exc, OrphanedAssetError):
        content["asset_path"] = exc.asset_path
    elif isinstance(exc, DeletePartialFailure):
        content["video_id"] = exc.video_id
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "error_code": "invalid_request"},
    )


app.include_router(auth.router)
app.include_router(videos.router)

# Public asset URLs (asset_public_base_url) served straight from the upload folder
if settings.asset_public_base_url.startswith("/"):
    app.mount(
        settings.asset_public_base_url,
        StaticFiles(directory=video_upload_dir(), check_dir=False),
        name="media",
    )


@app.get("/")
def root():
    return {"message": "Video Library API", "docs": "/docs"}
