"""
Little Loaf Cottage Functions

Backend for the bakery storefront: charges tokenized cards through Square
and relays transactional email through SendGrid.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import Settings, get_settings
from .routes import payments_router, email_router

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings: Settings = app.state.settings
    logger.info("Cottage functions starting up...")
    logger.info(f"Square environment: {settings.square_environment}")
    logger.info(f"Square configured: {settings.square_configured}")
    logger.info(f"Email configured: {settings.email_configured}")
    if settings.debug_payments or settings.debug_send_email:
        logger.warning("Debug responses enabled - provider detail is returned to callers")
    yield
    logger.info("Cottage functions shutting down...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application; settings are resolved once here"""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Payment and email functions for the Little Loaf Cottage storefront",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware; preflight requests are answered here
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=False,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(payments_router)
    app.include_router(email_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "cottage-functions",
            "square_configured": settings.square_configured,
            "email_configured": settings.email_configured,
        }

    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cottage_payments.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
