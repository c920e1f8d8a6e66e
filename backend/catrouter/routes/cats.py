"""
CatRouter - Cat Route Module
============================

What:  A loadable route module that owns a sub-router and attaches it to a
       host under `/api/tutorials-router/cats`.
How:   CatRouter builds its APIRouter once in the constructor. load(host)
       records the host and calls host.use(); unload() calls
       host.remove_middleware() and forgets the host.
Who:   Built by the app factory; driven by the app lifespan.

Routes (relative to the mount path, each served at both "" and "/"):
    GET       → 200 {"cats": []}
    POST      → 200 {"success": true, "error": null}
             400 {"success": false, "error": "<message>"}
             (only when constructed with an UploadConfig)

Lifecycle:
    unloaded ──load(host)──▶ loaded ──unload()──▶ unloaded

    - The host reference is stored before mounting; if mounting raises the
      reference is cleared and the host's error propagates.
    - The host reference is cleared only after unmounting succeeds.
    - load() while loaded and unload() while unloaded raise LifecycleError.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from catrouter.config import ROUTER_PATH
from catrouter.exceptions import LifecycleError
from catrouter.middleware.upload import SingleFileUpload
from catrouter.schemas.cat import CatListResponse, ErrorResponse, UploadResult
from catrouter.services.upload_service import UploadConfig, UploadService

logger = logging.getLogger(__name__)


async def list_cats() -> CatListResponse:
    """Stub listing with no backing data source."""
    return CatListResponse(cats=[])


class CatRouter:
    """
    Route module with a load/unload lifecycle.

    Args:
        upload:     Upload configuration. None builds the GET-only variant.
        mount_path: URL prefix the router is attached under.
    """

    def __init__(
        self,
        upload: Optional[UploadConfig] = None,
        mount_path: str = ROUTER_PATH,
    ):
        self.mount_path = mount_path
        self._router = APIRouter(tags=["Cats"])
        # "/" is registered too so the trailing-slash form is served directly
        # instead of redirecting
        for path in ("", "/"):
            self._router.add_api_route(
                path,
                list_cats,
                methods=["GET"],
                response_model=CatListResponse,
                summary="List cats",
                include_in_schema=path == "",
            )

        self._upload_service: Optional[UploadService] = None
        if upload is not None:
            self._upload_service = UploadService(upload)
            upload_file = self._build_upload_endpoint(upload.field_name)
            for path in ("", "/"):
                self._router.add_api_route(
                    path,
                    upload_file,
                    methods=["POST"],
                    response_model=UploadResult,
                    responses={
                        200: {"description": "File stored and found on disk", "model": UploadResult},
                        400: {"description": "Upload rejected or storage failed", "model": ErrorResponse},
                    },
                    summary="Upload a single file",
                    include_in_schema=path == "",
                )

        self._host = None

    def _build_upload_endpoint(self, field_name: str):
        service = self._upload_service
        single = SingleFileUpload(field_name)

        async def upload_file(
            request: Request,
            upload: UploadFile = Depends(single),
        ) -> JSONResponse:
            logger.info("Received upload: filename=%s", upload.filename)
            try:
                outcome = await service.ingest(upload)
            finally:
                await upload.close()
            # Picked up by the access log middleware
            request.state.upload_outcome = outcome.status
            return JSONResponse(
                status_code=200 if outcome.result.success else 400,
                content=outcome.result.model_dump(),
            )

        return upload_file

    @property
    def router(self) -> APIRouter:
        return self._router

    @property
    def loaded(self) -> bool:
        return self._host is not None

    @property
    def accepts_uploads(self) -> bool:
        return self._upload_service is not None

    async def load(self, host) -> None:
        """
        Attach the router to `host` at the mount path.

        Raises:
            LifecycleError if `host` is None or the module is already loaded.
            Whatever host.use() raises, unchanged.
        """
        if host is None:
            raise LifecycleError(
                "Cannot load cat router without a host",
                context={"path": self.mount_path},
            )
        if self._host is not None:
            raise LifecycleError(
                "Cat router is already loaded",
                context={"path": self.mount_path},
            )

        self._host = host
        try:
            host.use(self.mount_path, self._router)
        except Exception:
            self._host = None
            raise

        logger.info("Cat router loaded at %s", self.mount_path)

    async def unload(self) -> None:
        """
        Detach the router from the host it was loaded into.

        Raises:
            LifecycleError if load() has not succeeded first.
            Whatever host.remove_middleware() raises, unchanged; the module
            then stays loaded.
        """
        if self._host is None:
            raise LifecycleError(
                "Cat router is not loaded",
                context={"path": self.mount_path},
            )

        self._host.remove_middleware(self.mount_path, self._router)
        self._host = None

        logger.info("Cat router unloaded from %s", self.mount_path)
