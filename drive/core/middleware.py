# drive/core/middleware.py
import structlog
from starlette.datastructures import Headers
from starlette.responses import JSONResponse

from drive.core.config import get_settings
from drive.core.errors import FileTooLarge

logger = structlog.get_logger()

# room for multipart boundaries and part headers on top of the file bytes
MULTIPART_OVERHEAD = 64 * 1024


class UploadSizeLimitMiddleware:
    # Rejects oversized uploads from Content-Length before the body is read.
    # Bodies without a length still hit the per-chunk cap in save_stream.
    def __init__(self, app, path: str = "/api/upload", overhead: int = MULTIPART_OVERHEAD):
        self.app = app
        self.path = path
        self.overhead = overhead

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["path"] != self.path:
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None

        limit = get_settings().max_upload_size + self.overhead
        if size is not None and size > limit:
            logger.info("upload_rejected_too_large", size=size, limit=limit)
            response = JSONResponse(status_code=FileTooLarge.status_code, content=FileTooLarge().to_dict())
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
