import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from quickwallet.configuration.config import dispose_engine, settings
from quickwallet.modules.container import Container
from quickwallet.modules.conversations.controller import router as telegram_router
from quickwallet.modules.payments.controller import router as payments_router

# Metadata configuration for OpenAPI/Swagger
description = """
## QuickWallet Agent

Telegram wallet bot for airtime and data purchases, funded through Paystack.

### Endpoints

* **Telegram**: Bot API webhook receiving user messages
* **Payments**: Paystack webhook and payment callback that credit wallets
* **Health**: Health endpoints to verify that the service is working.
"""

tags_metadata = [
    {
        "name": "telegram",
        "description": "Telegram Bot API webhook. Every text message is handled by the dialog agent.",
    },
    {
        "name": "payments",
        "description": "Paystack events and redirects. Settles pending funding transactions.",
    },
    {
        "name": "health",
        "description": "Health endpoints to verify that the service is working.",
    },
]

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not hasattr(app.state, "container"):
        app.state.container = Container()
    logger.info("Service container ready")

    docs_path = app.docs_url or "/docs"
    swagger_url = f"http://{settings.HOST}:{settings.PORT}{docs_path}"
    logger.info("Swagger UI available at %s", swagger_url)
    yield

    await app.state.container.close()
    await dispose_engine()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=description,
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    license_info={
        "name": "MIT",
    },
    lifespan=lifespan,
)

# Register routers of modules
app.include_router(telegram_router, prefix="/api/v1")
app.include_router(payments_router, prefix="/api/v1")


@app.get("/", tags=["health"])
def root():
    """Health endpoint to verify that the service is working."""
    return {"message": f"{settings.APP_NAME} is running", "version": settings.APP_VERSION}


@app.get("/health", tags=["health"])
def health_check():
    """Health endpoint to verify that the service is working."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "quickwallet.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info" if not settings.DEBUG else "debug",
    )
