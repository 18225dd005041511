# drive/core/storage.py
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import structlog
from werkzeug.utils import secure_filename

from drive.core.errors import FileTooLarge

logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredFile:
    stored_name: str
    path: Path
    size: int


def user_dir(root: Path, user_id: str) -> Path:
    return Path(root) / str(user_id)


def ensure_user_dir(root: Path, user_id: str) -> Path:
    # exist_ok: concurrent uploads may race on the first mkdir
    directory = user_dir(root, user_id)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def make_stored_name(original_name: str) -> str:
    # <millis>-<9 random digits>-<readable suffix>
    suffix = secure_filename(original_name or "") or "upload"
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999):09d}"
    return f"{unique}-{suffix}"


def save_stream(source: BinaryIO, directory: Path, original_name: str, max_size: int) -> StoredFile:
    # temp file first, renamed into place once flushed; the final path never holds a partial upload
    stored_name = make_stored_name(original_name)
    final_path = directory / stored_name
    temp_path = directory / f".{stored_name}.part"

    size = 0
    try:
        with open(temp_path, "wb") as out:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_size:
                    raise FileTooLarge()
                out.write(chunk)
            out.flush()
            os.fsync(out.fileno())
        os.replace(temp_path, final_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    return StoredFile(stored_name=stored_name, path=final_path, size=size)


def remove_file(path: Path) -> bool:
    # False if it was already gone
    try:
        Path(path).unlink()
    except FileNotFoundError:
        logger.warning("stored_file_already_missing", path=str(path))
        return False
    return True
