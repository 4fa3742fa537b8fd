import logging
import os
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mediatree.core.config import settings
from mediatree.core.errors import MediaTreeError
from mediatree.core.security import auth_required, require_access
from mediatree.services import media

# Import API routers
from mediatree.api.v1 import auth as auth_router
from mediatree.api.v1 import files as files_router
from mediatree.api.v1 import library as library_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize the FastAPI application
app = FastAPI(title=settings.APP_NAME, description=settings.APP_DESCRIPTION)

# Configure CORS (Cross-Origin Resource Sharing)
# This allows the browser client (served from another origin) to call the API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Ensure the media root exists so a fresh install starts with an empty listing.
os.makedirs(settings.MEDIA_ROOT_PATH, exist_ok=True)
logger.info("Serving media from: %s", settings.MEDIA_ROOT_PATH.resolve())


# Error rendering: every failure is {"error": message}, status from the taxonomy.

@app.exception_handler(MediaTreeError)
async def media_tree_error_handler(request: Request, exc: MediaTreeError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": detail})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Basic Routes

@app.get("/")
async def root():
    """
    Root endpoint to check if the API is running.
    """
    return {"message": f"Welcome to {settings.APP_NAME}!"}


@app.get("/api/v1/config")
async def client_config():
    """
    Public settings the client needs before logging in.
    """
    return {
        "name": settings.APP_NAME,
        "description": settings.APP_DESCRIPTION,
        "authRequired": auth_required(),
    }


@app.get("/api/v1/server-status", dependencies=[Depends(require_access)])
async def server_status():
    return {"status": "running", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/videos/{path:path}", dependencies=[Depends(require_access)])
def stream_video(path: str):
    """
    Read-only video bytes. Goes through the same resolver as browse and search;
    Starlette's FileResponse handles Range requests for seeking.
    """
    full_path = media.resolve_video(settings.MEDIA_ROOT_PATH, path)
    return FileResponse(full_path, media_type=media.mime_type_for(path))


# Include API Routers

app.include_router(
    auth_router.router,
    prefix="/api/v1/auth",
    tags=["Auth"],
)

# Register the File Browser routes
app.include_router(
    files_router.router,
    prefix="/api/v1/files",  # All endpoints in this router will be prefixed with /api/v1/files
    tags=["Files"],          # Grouping label for the /docs Swagger UI
    dependencies=[Depends(require_access)],
)

# Register the Playlists / Favorites routes
app.include_router(
    library_router.router,
    prefix="/api/v1/library",
    tags=["Library"],
    dependencies=[Depends(require_access)],
)
