"""
FastAPI main application for the rental search engine.
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging

from rental_search import __version__
from rental_search.caching import ListingCache
from rental_search.config import AppSettings, get_search_settings
from rental_search.db import Database
from rental_search.error_handling import register_exception_handlers
from rental_search.routers import listings
from rental_search.services.geocoding import GeocodingClient
from rental_search.services.search import ListingStore, SearchService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    if getattr(app.state, "search_service", None) is not None:
        # Service injected by the caller (tests, embedding)
        yield
        return

    settings: AppSettings = app.state.settings

    # Startup
    logger.info("Starting rental search API...")
    database = Database(settings.database, settings.cache)
    await database.connect()
    logger.info("Database initialized")

    app.state.search_service = SearchService(
        store=ListingStore(database.get_pg_pool()),
        geocoder=GeocodingClient(settings.geocoding),
        settings=settings,
        cache=ListingCache(
            ttl_seconds=settings.cache.listing_ttl_seconds,
            redis_client=database.redis_client
        ),
    )

    yield

    # Shutdown
    logger.info("Shutting down rental search API...")
    await app.state.search_service.close()
    app.state.search_service = None
    await database.close()


def create_app(
    settings: Optional[AppSettings] = None,
    search_service: Optional[SearchService] = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Configuration (default: read from the environment)
        search_service: Pre-built service; skips database start-up when given

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Rental Search API",
        description="Tiered property search with rate limiting and ephemeral caching",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings or (
        search_service.settings if search_service else get_search_settings()
    )
    app.state.search_service = search_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": __version__
        }

    app.include_router(listings.router, prefix="/api", tags=["listings"])
    return app


app = create_app()
