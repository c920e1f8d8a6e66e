"""
CatRouter - Application Configuration
=====================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types and choices, and provides a singleton `settings` object.
Who:   Imported by the app factory, the upload services, and `__main__`.
When:  Loaded once at module import time; validated before the app starts.
"""

import tempfile
from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

ROUTER_PATH = "/api/tutorials-router/cats"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have working defaults, so the service starts with no
    environment at all. Attributes are grouped by concern.
    """

    # ── Route Module ──────────────────────────────────────────────────────
    # What: URL prefix the cat router is mounted under
    mount_path: str = Field(default=ROUTER_PATH)

    # What: Builds the richer variant (GET + POST upload) when True,
    # the GET-only variant when False
    enable_uploads: bool = Field(default=True)

    @field_validator("mount_path")
    @classmethod
    def validate_mount_path(cls, v: str) -> str:
        """Mount paths are absolute, non-root, and never end with a slash."""
        if not v.startswith("/") or not v.rstrip("/"):
            raise ValueError(
                f"Invalid mount_path '{v}'. Must start with '/' and name at least one segment"
            )
        return v.rstrip("/")

    # ── Uploads ───────────────────────────────────────────────────────────
    # What: Multipart form field that carries the uploaded file
    upload_field: str = Field(default="image", min_length=1)

    # What: Destination directory for uploads
    # Empty string means the host's temporary directory (tempfile.gettempdir())
    upload_dir: str = Field(default="")

    # What: How the stored filename is derived from the client-supplied name
    # original: name used as-is (unsanitized)
    # basename: directory components stripped
    filename_strategy: Literal["original", "basename"] = Field(default="original")

    # What: Which path the post-upload existence check targets
    # stored_path:    the path the file was actually written to
    # legacy_literal: the literal placeholder string; every upload reports failure
    existence_check: Literal["stored_path", "legacy_literal"] = Field(default="stored_path")

    @property
    def upload_dir_path(self) -> Path:
        """Resolved destination directory for uploads."""
        return Path(self.upload_dir or tempfile.gettempdir()).resolve()

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # UPLOAD_DIR and upload_dir both work
    }


# Singleton instance, imported throughout the application
settings = Settings()
