"""
CatRouter - Custom Exception Hierarchy
======================================

What:  Application-specific exceptions for lifecycle, mounting, and upload errors.
How:   Each exception class carries a message and optional context dict.
       Upload rejections are turned into 400 responses by the global handlers
       registered in main.py; lifecycle and mount errors propagate to whoever
       drives the module (the app lifespan, or a test).
Who:   Raised by the route module, the host adapter, and the upload services.

Exception Hierarchy:
    CatRouterError (base)
    ├── LifecycleError           → raised to the caller of load()/unload()
    ├── MountError               → raised to the caller of use()/remove_middleware()
    ├── UploadRejectedError      → 400 Bad Request (client can fix)
    └── FileStorageError         → 400 body {"success": false} at the upload handler
        └── StoredFileMissingError
"""

from typing import Any, Dict, Optional


class CatRouterError(Exception):
    """
    Base exception for all CatRouter application errors.

    Attributes:
        message:  Human-readable error description (safe to return in API response)
        context:  Additional debug info (logged, not returned by the generic handlers)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class LifecycleError(CatRouterError):
    """
    Raised when a route module lifecycle call is made out of order.

    When:    unload() before load(), load() while already loaded, load(None).
    Recovery: None; the caller (module manager) decides what to do.
    """

    def __init__(
        self,
        message: str = "Invalid route module lifecycle transition",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MountError(CatRouterError):
    """
    Raised by the host when a router cannot be attached or detached.

    When:    The same router is mounted twice at a path, or removal is requested
             for a (path, router) pair that is not mounted.
    """

    def __init__(
        self,
        path: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["path"] = path
        super().__init__(message=message or f"Mount error at '{path}'", context=ctx)
        self.path = path


class UploadRejectedError(CatRouterError):
    """
    Raised by the upload middleware when the multipart form is not acceptable.

    When:    Missing file field, more than one file, a file under an unexpected
             field, or a plain value where a file was expected.
    HTTP:    400 Bad Request, raised before the route handler runs

    Example response:
        {
            "error": "upload_rejected",
            "message": "Missing file field 'image'",
            "details": {"field": "image"},
            "request_id": "a1b2c3d4"
        }
    """

    def __init__(
        self,
        message: str = "Upload rejected",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class FileStorageError(CatRouterError):
    """
    Raised when file system operations on an upload fail.

    When:    Destination not writable, disk full, rename failed, or the stored
             artifact cannot be found afterwards.
    HTTP:    Mapped to 400 {"success": false, "error": message} by the upload handler
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoredFileMissingError(FileStorageError):
    """Raised when the existence check does not find the stored upload."""

    def __init__(self, path: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["path"] = path
        super().__init__(message=f"ENOENT: no such file or directory, '{path}'", context=ctx)
        self.path = path
