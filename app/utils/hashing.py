import hashlib
import logging
from pathlib import Path
from typing import Union

from app.errors import HashingError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def hash_file(filepath: Union[str, Path]) -> str:
    """
    SHA-256 hex digest of a stored document, read in chunks

    Raises:
        HashingError: if the file cannot be read
    """
    digest = hashlib.sha256()
    try:
        with open(filepath, "rb") as handle:
            for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as exc:
        logger.error("Failed to hash %s: %s", filepath, exc)
        raise HashingError() from exc
    return digest.hexdigest()
