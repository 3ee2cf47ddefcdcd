# zerowaste/core/storage_utils.py
import logging
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from zerowaste.core.config import get_settings
from zerowaste.core.supabase_client import supabase_admin

logger = logging.getLogger(__name__)

# Every stored file is referenced as "uploads/<filename>" on its document.
UPLOAD_PREFIX = "uploads"


class Storage(Protocol):
    def upload(self, filename: str, file_bytes: bytes, content_type: str) -> str: ...

    def delete(self, path: str) -> None: ...


class LocalStorage:
    """
    Stores files on local disk under UPLOAD_DIR.

    The directory is mounted by the app at /uploads, so a stored path
    "uploads/<name>" is served at "{BASE_URL}/uploads/<name>".
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _file_for(self, path: str) -> Path:
        name = path.split("/", 1)[1] if path.startswith(f"{UPLOAD_PREFIX}/") else path
        return self.root / Path(name).name

    def upload(self, filename: str, file_bytes: bytes, content_type: str) -> str:
        self._file_for(filename).write_bytes(file_bytes)
        return f"{UPLOAD_PREFIX}/{filename}"

    def delete(self, path: str) -> None:
        self._file_for(path).unlink()


class SupabaseStorage:
    """
    Stores files in a Supabase Storage bucket.

    Object path inside the bucket == relative path on the document, so
    BASE_URL should point at the bucket's public URL.
    """

    def __init__(self, bucket: str):
        self.bucket = bucket

    def upload(self, filename: str, file_bytes: bytes, content_type: str) -> str:
        path = f"{UPLOAD_PREFIX}/{filename}"
        supabase_admin().storage.from_(self.bucket).upload(
            path,
            file_bytes,
            {"upsert": "true", "content-type": content_type},
        )
        return path

    def delete(self, path: str) -> None:
        # Supabase Python client expects a list of paths.
        supabase_admin().storage.from_(self.bucket).remove([path])


@lru_cache
def get_storage() -> Storage:
    """
    Storage backend selected by STORAGE_BACKEND (local | supabase).
    """
    settings = get_settings()
    if settings.STORAGE_BACKEND == "supabase":
        return SupabaseStorage(settings.SUPABASE_BUCKET)
    return LocalStorage(settings.UPLOAD_DIR)


def delete_quietly(storage: Storage, path: str) -> None:
    """
    Best-effort delete: failures are logged and never abort the caller.
    """
    try:
        storage.delete(path)
    except Exception:
        logger.warning("Failed to delete stored file %s", path, exc_info=True)


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"


def build_public_url(base_url: str, path: str | None) -> str | None:
    """
    Render a stored relative path as an absolute URL.

    Example:
        ("http://localhost:5000", "uploads/a.png")
        -> "http://localhost:5000/uploads/a.png"
    """
    if not path:
        return None
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def extract_relative_path(base_url: str, value: str) -> str:
    """
    Inverse of build_public_url: accept either a stored path or a full URL
    rendered from it and return the stored path.
    """
    prefix = base_url.rstrip("/") + "/"
    if value.startswith(prefix):
        return value[len(prefix):]
    return value.lstrip("/")
