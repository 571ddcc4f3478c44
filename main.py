"""
Holiday Cards web service

FastAPI application served by uvicorn
"""
# Standard library imports
import logging
from contextlib import asynccontextmanager

# Third-party imports
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local imports
from config import settings
from redis_client import close_redis_pool
from storage.database import init_db, cleanup_db
from routers import basic, cards, occasions, cleanup

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan
    """
    try:
        await init_db()
        logger.info("Application started")
        yield
    except Exception as e:
        logger.error(f"Application failed to start: {str(e)}")
        raise
    finally:
        try:
            await cleanup_db()
            await close_redis_pool()
            logger.info("Application shut down")
        except Exception as e:
            logger.error(f"Error during shutdown: {str(e)}")

app = FastAPI(
    title=settings.APP_NAME,
    description="Holiday card creation and sharing service",
    version=settings.APP_VERSION,
    docs_url=settings.DOCS_URL,
    redoc_url=settings.REDOC_URL,
    openapi_url=settings.OPENAPI_URL,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
    expose_headers=[
        "Retry-After",
        "X-RateLimit-IP-Limit", "X-RateLimit-IP-Remaining", "X-RateLimit-IP-Reset",
        "X-RateLimit-Device-Limit", "X-RateLimit-Device-Remaining", "X-RateLimit-Device-Reset",
    ],
)

app.include_router(basic.router)
app.include_router(occasions.router)
app.include_router(cards.router)
app.include_router(cleanup.router)


def main():
    """
    Entry point
    """
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL,
        workers=settings.WORKERS
    )


if __name__ == "__main__":
    main()
