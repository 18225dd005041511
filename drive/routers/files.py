from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, UploadFile, File as FastAPIFile, status
from fastapi.responses import FileResponse, JSONResponse, Response
from sqlalchemy.orm import Session

from drive.core.auth import require_auth, require_file_access
from drive.core.config import get_settings
from drive.core.errors import FileMissingOnDisk, FileNotFound, NoFileUploaded
from drive.core.security import TokenClaims
from drive.core.storage import ensure_user_dir, remove_file, save_stream
from drive.models.database import get_db
from drive.models.file import FileMeta
from drive.schemas import FileSummary, UploadResponse

router = APIRouter(tags=["files"])
logger = structlog.get_logger()

DEFAULT_MIME_TYPE = "application/octet-stream"
CACHE_CONTROL = "public, max-age=31536000"


class InlineFileResponse(FileResponse):
    # FileResponse sends its 200 start message before opening the file, so the
    # start is held back until the first body message. A failure before that
    # still becomes a 500; after it the connection can only be dropped.
    async def __call__(self, scope, receive, send):
        pending_start = None
        started = False

        async def deferred_send(message):
            nonlocal pending_start, started
            if message["type"] == "http.response.start":
                pending_start = message
                return
            if not started:
                started = True
                if pending_start is not None:
                    await send(pending_start)
            await send(message)

        try:
            await super().__call__(scope, receive, deferred_send)
        except (OSError, RuntimeError) as exc:
            logger.error("file_stream_failed", path=str(self.path), error=str(exc))
            if started:
                raise
            error = JSONResponse(status_code=500, content={"message": "Error streaming file"})
            await error(scope, receive, send)


# --- helper: owner-scoped lookup; someone else's file looks exactly like a missing one ---
def get_owned_file(db: Session, file_id: str, owner_id: str) -> FileMeta:
    file = (
        db.query(FileMeta)
        .filter(FileMeta.id == file_id, FileMeta.owner_id == owner_id)
        .first()
    )
    if not file:
        raise FileNotFound()
    return file


# --- upload a new file ---
@router.post("/api/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: UploadFile | None = FastAPIFile(None),
    user: TokenClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    if file is None or not file.filename:
        raise NoFileUploaded()

    settings = get_settings()
    directory = ensure_user_dir(settings.upload_dir, user.user_id)
    stored = save_stream(file.file, directory, file.filename, settings.max_upload_size)

    # Save metadata only once the bytes are on disk
    meta = FileMeta(
        owner_id=user.user_id,
        stored_name=stored.stored_name,
        original_name=file.filename,
        mime_type=file.content_type or DEFAULT_MIME_TYPE,
        size=stored.size,
        path=str(stored.path),
    )
    db.add(meta)
    try:
        db.commit()
    except Exception:
        db.rollback()
        remove_file(stored.path)
        raise
    db.refresh(meta)

    logger.info("file_uploaded", user_id=user.user_id, file_id=meta.id, size=meta.size)
    return {
        "message": "File uploaded successfully",
        "file": {
            "id": meta.id,
            "name": meta.original_name,
            "size": meta.size,
            "type": meta.mime_type,
        },
    }


# --- list the caller's files, newest first ---
@router.get("/api/files", response_model=list[FileSummary])
def list_files(user: TokenClaims = Depends(require_auth), db: Session = Depends(get_db)):
    return (
        db.query(FileMeta)
        .filter(FileMeta.owner_id == user.user_id)
        .order_by(FileMeta.created_at.desc())
        .all()
    )


# --- stream a file (header or ?token=) ---
@router.get("/api/files/{file_id}")
def get_file(
    file_id: str,
    user: TokenClaims = Depends(require_file_access),
    db: Session = Depends(get_db),
):
    file = get_owned_file(db, file_id, user.user_id)

    path = Path(file.path)
    if not path.is_file():
        logger.error("stored_file_missing", file_id=file.id, path=file.path)
        raise FileMissingOnDisk()

    return InlineFileResponse(
        path,
        media_type=file.mime_type or DEFAULT_MIME_TYPE,
        filename=file.original_name,
        content_disposition_type="inline",
        headers={"Cache-Control": CACHE_CONTROL, "Accept-Ranges": "bytes"},
    )


# --- delete a file ---
@router.delete("/api/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_file(
    file_id: str,
    user: TokenClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    file = get_owned_file(db, file_id, user.user_id)

    # Bytes first, then the record. Already-missing bytes only warn.
    remove_file(Path(file.path))
    db.delete(file)
    db.commit()

    logger.info("file_deleted", user_id=user.user_id, file_id=file_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
