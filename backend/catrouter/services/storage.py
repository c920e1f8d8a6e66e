"""
CatRouter - Upload Disk Storage
===============================

What:  Writes an uploaded file to the destination directory and checks that
       the stored artifact exists afterwards.
How:   A frozen `DiskStorage` value describes where a file goes
       (destination directory + filename strategy). `store_upload()` streams
       the upload into a hidden `.part` sibling with aiofiles and renames it
       into place; `ensure_exists()` is the post-write existence check.
Who:   Used by UploadService for every POST to the cat router.

Concurrency:
    Uploads with the same original name resolve to the same target. Each
    request writes its own `.part` file and the final `replace()` is atomic,
    so the last rename wins and the target always holds exactly one payload.

Filename handling:
    `keep_original_name` stores the client-supplied name as-is, directory
    components included. `basename_only` strips them.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Dict

import aiofiles
import aiofiles.os
from starlette.datastructures import UploadFile

from catrouter.exceptions import FileStorageError, StoredFileMissingError

logger = logging.getLogger(__name__)

# Read size for streaming the spooled upload to disk
CHUNK_SIZE = 64 * 1024

# Path checked by the legacy existence check. It is a literal placeholder,
# not a template, so it never names a real upload.
LEGACY_EXISTENCE_PATH = "req.file.destination, req.file.originalname"

FilenameStrategy = Callable[[str], Path]


def keep_original_name(original_name: str) -> Path:
    """Stored filename is the client-supplied name, unsanitized."""
    return Path(original_name)


def basename_only(original_name: str) -> Path:
    """Stored filename is the last component of the client-supplied name."""
    name = PurePosixPath(original_name.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise FileStorageError(
            message=f"Cannot derive a filename from '{original_name}'",
            context={"original_name": original_name},
        )
    return Path(name)


FILENAME_STRATEGIES: Dict[str, FilenameStrategy] = {
    "original": keep_original_name,
    "basename": basename_only,
}


@dataclass(frozen=True)
class DiskStorage:
    """
    Where uploads are written.

    Attributes:
        destination_dir:   Directory uploads land in (the host temp directory)
        filename_strategy: Maps the original name to a path relative to destination_dir
    """

    destination_dir: Path
    filename_strategy: FilenameStrategy = keep_original_name

    def destination_for(self, original_name: str) -> Path:
        return Path(self.destination_dir) / self.filename_strategy(original_name)


@dataclass(frozen=True)
class StoredFile:
    """Record of one stored upload, built once per request."""

    original_name: str
    destination: Path
    filename: str
    path: Path
    size: int


async def _discard(path: Path) -> None:
    """Best-effort removal of a partial write."""
    try:
        if await aiofiles.os.path.exists(path):
            await aiofiles.os.remove(path)
    except OSError as e:
        logger.warning("Failed to remove partial upload %s: %s", path, str(e))


async def store_upload(storage: DiskStorage, upload: UploadFile) -> StoredFile:
    """
    Stream an uploaded file to its destination.

    Returns:
        StoredFile describing where the bytes landed.

    Raises:
        FileStorageError if the target cannot be derived, the directory
        cannot be created, or any write/rename fails.
    """
    original_name = upload.filename or ""
    destination = Path(storage.destination_dir)
    target = storage.destination_for(original_name)
    # "/" and similar names resolve to a path with no final component
    if not target.name:
        raise FileStorageError(
            message=f"Cannot store upload named '{original_name}'",
            context={"original_name": original_name, "path": str(target)},
        )
    partial = target.with_name(f".{target.name}.{uuid.uuid4().hex}.part")

    size = 0
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(partial, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                await out.write(chunk)
                size += len(chunk)
        await aiofiles.os.replace(partial, target)
    except OSError as e:
        logger.error("Failed to store upload at %s: %s", target, str(e))
        await _discard(partial)
        raise FileStorageError(
            message=f"Failed to store uploaded file: {e.strerror or str(e)}",
            context={"path": str(target), "os_error": str(e)},
        )

    return StoredFile(
        original_name=original_name,
        destination=destination,
        filename=str(target.relative_to(destination))
        if target.is_relative_to(destination)
        else target.name,
        path=target,
        size=size,
    )


# ── Existence Checks ──────────────────────────────────────────────────────
# Each check maps a stored upload to the path that must exist afterwards.

ExistenceCheck = Callable[[StoredFile], Path]


def stored_path_target(stored: StoredFile) -> Path:
    """The path the upload was written to."""
    return stored.path


def legacy_literal_target(stored: StoredFile) -> Path:
    """The literal placeholder path, resolved against the working directory."""
    return Path(LEGACY_EXISTENCE_PATH).resolve()


EXISTENCE_CHECKS: Dict[str, ExistenceCheck] = {
    "stored_path": stored_path_target,
    "legacy_literal": legacy_literal_target,
}


async def ensure_exists(path: Path) -> None:
    """
    Existence check for a stored artifact.

    Raises:
        StoredFileMissingError if nothing exists at `path`.
    """
    if not await aiofiles.os.path.exists(path):
        raise StoredFileMissingError(str(path))
