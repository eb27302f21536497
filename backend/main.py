"""
Land registration certificate service - FastAPI application
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import settings
from domain.exceptions import DomainError
from infrastructure.persistence.database import init_db
from api.errors import status_code_for, error_detail
from api.routers import auth, certificates, health

# Logging
os.makedirs(os.path.dirname(settings.LOG_FILE) or ".", exist_ok=True)
logger.add(
    settings.LOG_FILE,
    rotation="10 MB",
    retention="30 days",
    level=settings.LOG_LEVEL
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    logger.info("Service starting...")
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Service stopping...")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Issues land registration certificates and verifies them by number or QR scan",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Artifact-SHA256"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code_for(exc), content={"detail": error_detail(exc)})


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(certificates.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
