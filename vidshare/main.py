import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vidshare.config import settings
from vidshare.errors import AppError, Unauthorized
from vidshare.middleware import LoggingMiddleware
from vidshare.routers import comments, dashboard, likes, playlists, subscriptions, tweets, users, videos

log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

logging.getLogger("uvicorn.access").setLevel(logging.WARNING)  # LoggingMiddleware already logs requests
logging.getLogger("uvicorn").setLevel(logging.INFO)

if settings.log_sql:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
else:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

app = FastAPI(title="Vidshare API", version="0.1.0", root_path=settings.root_path)

app.add_middleware(LoggingMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"detail": "; ".join(messages) or "Invalid input"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}",
        exc_info=True,
        extra={"path": request.url.path, "method": request.method}
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(videos.router, prefix="/api/v1/videos", tags=["videos"])
app.include_router(comments.router, prefix="/api/v1/comments", tags=["comments"])
app.include_router(likes.router, prefix="/api/v1/likes", tags=["likes"])
app.include_router(subscriptions.router, prefix="/api/v1/subscriptions", tags=["subscriptions"])
app.include_router(tweets.router, prefix="/api/v1/tweets", tags=["tweets"])
app.include_router(playlists.router, prefix="/api/v1/playlist", tags=["playlists"])
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["dashboard"])


@app.on_event("startup")
async def startup_event():
    logger.info("🚀 Starting Vidshare API server...")
    logger.info(f"🔗 Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    if settings.root_path:
        logger.info(f"🌐 Root path: {settings.root_path}")
    logger.info("✅ Server started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑 Shutting down server...")


@app.get("/health")
def health():
    return {"status": "ok"}
