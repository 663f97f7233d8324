import logging
from contextlib import asynccontextmanager

from auth import AdminAuthorizer
from config import Settings
from database import init_db
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from object_store import CloudinaryObjectStore, ObjectStoreClient
from orchestrator import DeletionOrchestrator, UploadOrchestrator
from routers import history, playlists, songs
from starlette.exceptions import HTTPException as StarletteHTTPException
from store import HistoryStore, PlaylistStore, SongStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid request')}" if field else "Invalid request"
    return JSONResponse({"message": message}, status_code=400)


async def unhandled_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse({"message": "Internal server error"}, status_code=500)


def create_app(settings: Settings | None = None, object_store: ObjectStoreClient | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    if object_store is None:
        object_store = CloudinaryObjectStore(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up %s API", settings.app_name)
        init_db(settings.db_path)
        if not (settings.admin_password or settings.jwt_secret):
            logger.warning("Neither ADMIN_PASSWORD nor JWT_SECRET is set; deletions will be refused")
        yield
        logger.info("Shutting down %s API", settings.app_name)

    app = FastAPI(title=settings.app_name + " API", lifespan=lifespan)

    song_store = SongStore(settings.db_path)
    app.state.settings = settings
    app.state.songs = song_store
    app.state.playlists = PlaylistStore(settings.db_path)
    app.state.history = HistoryStore(settings.db_path)
    app.state.uploader = UploadOrchestrator(
        object_store,
        song_store,
        audio_folder=settings.audio_folder,
        image_folder=settings.image_folder,
    )
    app.state.deleter = DeletionOrchestrator(
        object_store,
        song_store,
        AdminAuthorizer(settings.admin_password, settings.jwt_secret),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        allow_credentials=True,
    )

    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(Exception, unhandled_error)

    app.include_router(songs.router)
    app.include_router(playlists.router)
    app.include_router(history.router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
