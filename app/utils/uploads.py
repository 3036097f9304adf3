import logging
import re
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

from app.config import UPLOADS_DIR, MAX_UPLOAD_SIZE, ALLOWED_MEDIA_TYPES, ALLOWED_EXTENSIONS
from app.errors import UploadError

logger = logging.getLogger(__name__)

MISSING_DOCUMENTS = "Both Aadhar card and College ID images are required"
FILE_TOO_LARGE = f"File size must be {MAX_UPLOAD_SIZE // 1000}KB or less"
WRONG_FILE_TYPE = "Only images (jpeg, jpg, png) and PDFs are allowed"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def single_upload(files: Optional[List[UploadFile]], slot: str) -> UploadFile:
    """Return the one file sent under ``slot``."""
    files = [f for f in files or [] if f.filename]
    if not files:
        raise UploadError(MISSING_DOCUMENTS)
    if len(files) > 1:
        raise UploadError(f"Only one file is allowed for {slot}")
    return files[0]


def upload_size(file: UploadFile) -> int:
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    return size


def validate_upload(file: UploadFile) -> None:
    """Check size, declared media type and extension of a document upload."""
    if upload_size(file) > MAX_UPLOAD_SIZE:
        raise UploadError(FILE_TOO_LARGE)

    media_type = (file.content_type or "").split(";")[0].strip().lower()
    extension = Path(file.filename or "").suffix.lower()
    if media_type not in ALLOWED_MEDIA_TYPES or extension not in ALLOWED_EXTENSIONS:
        raise UploadError(WRONG_FILE_TYPE)


def stored_name(filename: str) -> str:
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
    safe = _UNSAFE_CHARS.sub("_", Path(filename).name).strip("._") or "document"
    return f"{timestamp}-{uuid.uuid4().hex[:8]}-{safe}"


def save_upload(file: UploadFile, directory: Path = UPLOADS_DIR) -> Path:
    """Write an upload to ``directory`` under a unique name and return its path."""
    filepath = directory / stored_name(file.filename)
    file.file.seek(0)
    with filepath.open("wb") as buffer:
        shutil.copyfileobj(file.file, buffer)
    return filepath


def remove_files(*paths: Optional[Path]) -> None:
    for path in paths:
        if path is None:
            continue
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove stored upload %s: %s", path, exc)
