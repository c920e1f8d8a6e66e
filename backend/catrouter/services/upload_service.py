"""
CatRouter - Upload Ingestion Service
====================================

What:  The work behind POST on the cat router: store the single uploaded
       file, run the existence check, and produce an UploadResult.
How:   Storage and the check are injected through `UploadConfig`; every
       storage or existence failure is caught here and reported as an
       unsuccessful result, never raised to the HTTP layer.
Who:   Owned by a CatRouter built with an upload configuration.

Outcome mapping:
    stored + check passed  → "stored",         UploadResult(success=True,  error=None)
    write failed           → "storage_failed", UploadResult(success=False, error=<message>)
    check failed           → "missing",        UploadResult(success=False, error=<message>)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from starlette.datastructures import UploadFile

from catrouter.config import Settings
from catrouter.exceptions import FileStorageError, StoredFileMissingError
from catrouter.schemas.cat import UploadResult
from catrouter.services.storage import (
    EXISTENCE_CHECKS,
    FILENAME_STRATEGIES,
    DiskStorage,
    ExistenceCheck,
    StoredFile,
    ensure_exists,
    stored_path_target,
    store_upload,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadConfig:
    """
    Everything the richer CatRouter variant needs to accept uploads.

    Attributes:
        storage:         Destination directory and filename strategy
        field_name:      Multipart field carrying the file
        existence_check: Maps the stored file to the path that must exist
    """

    storage: DiskStorage
    field_name: str = "image"
    existence_check: ExistenceCheck = stored_path_target

    @classmethod
    def from_settings(cls, settings: Settings, destination_dir: Path) -> "UploadConfig":
        """Build the config from application settings and the host temp directory."""
        return cls(
            storage=DiskStorage(
                destination_dir=destination_dir,
                filename_strategy=FILENAME_STRATEGIES[settings.filename_strategy],
            ),
            field_name=settings.upload_field,
            existence_check=EXISTENCE_CHECKS[settings.existence_check],
        )


@dataclass(frozen=True)
class IngestOutcome:
    """
    What happened to one upload.

    Attributes:
        status: "stored", "storage_failed", or "missing" (existence check failed)
        result: Response body for the client
        stored: Record of the written file; None when storage failed
    """

    status: str
    result: UploadResult
    stored: Optional[StoredFile] = None


class UploadService:
    """Stores one upload per call and reports the outcome."""

    def __init__(self, config: UploadConfig):
        self.config = config

    async def ingest(self, upload: UploadFile) -> IngestOutcome:
        try:
            stored = await store_upload(self.config.storage, upload)
        except FileStorageError as e:
            logger.warning(
                "Upload of '%s' failed: %s | Context: %s",
                upload.filename,
                e.message,
                e.context,
            )
            return IngestOutcome(
                status="storage_failed",
                result=UploadResult(success=False, error=e.message),
            )

        try:
            await ensure_exists(self.config.existence_check(stored))
        except StoredFileMissingError as e:
            logger.warning(
                "Upload '%s' stored as %s but existence check failed: %s",
                stored.original_name,
                stored.filename,
                e.message,
            )
            return IngestOutcome(
                status="missing",
                result=UploadResult(success=False, error=e.message),
                stored=stored,
            )

        logger.info(
            "Upload '%s' stored as %s in %s (%d bytes)",
            stored.original_name,
            stored.filename,
            stored.destination,
            stored.size,
        )
        return IngestOutcome(
            status="stored",
            result=UploadResult(success=True, error=None),
            stored=stored,
        )
