"""
CatRouter - Pydantic Response Schemas
=====================================

What:  Pydantic models defining the JSON bodies the API returns.
How:   Route handlers build these models; FastAPI serializes them and uses
       them for the OpenAPI document.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Cat Router
# ══════════════════════════════════════════════════════════════════════════


class CatListResponse(BaseModel):
    """
    What:  Body of GET on the cat router.
    Note:  There is no backing data source; `cats` is always empty.
    """
    cats: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Cat records (always empty)",
    )


class UploadResult(BaseModel):
    """
    What:  Body of POST on the cat router, one per request.

    Example:
        {"success": true, "error": null}
        {"success": false, "error": "ENOENT: no such file or directory, '...'"}
    """
    success: bool = Field(description="Whether the upload was stored and found on disk")
    error: Optional[str] = Field(
        default=None,
        description="Failure message (null on success)",
    )


# ══════════════════════════════════════════════════════════════════════════
# Errors & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """Standard error envelope returned by the global exception handlers."""
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None)
    request_id: str = Field(default="", description="Correlation ID (X-Request-ID)")


class HealthResponse(BaseModel):
    """
    What:  Body of GET /health.
    Status levels:
        - healthy:  cat router mounted and upload directory writable
        - degraded: router not mounted, or uploads enabled but directory not writable
    """
    status: str
    version: str
    modules: List[str] = Field(description="Currently mounted route module paths")
    upload_dir: Optional[str] = Field(default=None)
    upload_dir_writable: bool
    uptime_seconds: float
