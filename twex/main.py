from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from twex.config import Settings, get_settings
from twex.db.session import build_engine, build_session_factory, init_db
from twex.api import auth, feed, posts, likes, bookmarks, follow, users, notifications, search, profile
from twex.utils.exceptions import TwexError
from twex.utils.rate_limit import limiter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the database engine for the lifetime of the process"""
    settings: Settings = app.state.settings
    logger.info("Starting up...")
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)

    engine = build_engine(settings)
    await init_db(engine)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    yield

    logger.info("Shutting down...")
    await engine.dispose()

async def twex_error_handler(request: Request, exc: TwexError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Twex: a Twitter-style social feed API",
        docs_url=f"{settings.API_PREFIX}/docs",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Rate limiter
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(TwexError, twex_error_handler)

    # Session cookies need credentialed CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Uploaded images; the directory is created on startup
    app.mount(
        settings.UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    prefix = settings.API_PREFIX
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Authentication"])
    app.include_router(feed.router, prefix=prefix, tags=["Feed"])
    app.include_router(posts.router, prefix=prefix, tags=["Posts"])
    app.include_router(likes.router, prefix=prefix, tags=["Likes"])
    app.include_router(bookmarks.router, prefix=prefix, tags=["Bookmarks"])
    app.include_router(follow.router, prefix=prefix, tags=["Follow"])
    app.include_router(users.router, prefix=prefix, tags=["Users"])
    app.include_router(notifications.router, prefix=prefix, tags=["Notifications"])
    app.include_router(search.router, prefix=prefix, tags=["Search"])
    app.include_router(profile.router, prefix=prefix, tags=["Profile"])

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Welcome to the Twex API",
            "version": settings.VERSION,
            "docs": f"{prefix}/docs",
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat()
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "twex.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
