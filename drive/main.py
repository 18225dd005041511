from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from drive.bootstrap import startup
from drive.core.config import get_settings
from drive.core.errors import register_exception_handlers
from drive.core.logging import configure_logging
from drive.core.middleware import UploadSizeLimitMiddleware
from drive.routers import auth, files, health

settings = get_settings()
configure_logging(settings)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    startup(settings)
    logger.info("drive_started", upload_dir=str(settings.upload_dir))
    yield
    logger.info("drive_stopped")


app = FastAPI(title="Drive", lifespan=lifespan)

app.add_middleware(UploadSizeLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)
register_exception_handlers(app)

# include our routers
app.include_router(auth.router)
app.include_router(files.router)
app.include_router(health.router)

# Stored bytes are also public read-only under this prefix, without auth
app.mount(
    settings.public_uploads_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


def run() -> None:
    uvicorn.run("drive.main:app", host=settings.host, port=settings.port)
