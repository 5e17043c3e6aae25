# backend/portal/utils/files.py
from pathlib import Path
from uuid import uuid4

from .logging import storage_logger


def unique_filename(original_filename: str | None) -> str:
    """Random file name that keeps the original extension"""
    extension = Path(original_filename or "").suffix.lower()
    return f"{uuid4().hex}{extension}"


async def save_bytes(content: bytes, directory: Path, original_filename: str | None) -> Path:
    """Write content under a unique name in directory and return the path"""
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / unique_filename(original_filename)

    with file_path.open("wb") as buffer:
        buffer.write(content)

    return file_path


async def delete_file(file_path: Path) -> bool:
    """Delete a file if it exists; errors are logged, not raised"""
    try:
        if file_path.exists():
            file_path.unlink()
            return True
    except OSError as e:
        storage_logger.warning(f"Error deleting file {file_path}", extra={"error": str(e)})
    return False


def get_relative_path(absolute_path: Path, base_path: Path) -> str:
    """Convert absolute path to a forward-slash relative key for database storage"""
    absolute_path = Path(absolute_path).absolute()
    base_path = Path(base_path).absolute()
    return absolute_path.relative_to(base_path).as_posix()


def resolve_storage_key(storage_key: str, base_path: Path) -> Path:
    """Map a stored key back onto disk, refusing keys that escape base_path"""
    base = Path(base_path).resolve()
    candidate = (base / storage_key).resolve()
    if base != candidate and base not in candidate.parents:
        raise ValueError(f"Storage key escapes storage root: {storage_key}")
    return candidate
