"""
CatRouter - Host Server Adapter
===============================

What:  The host dispatcher a route module plugs into.
How:   Wraps a FastAPI application. `use()` includes a router's routes under a
       path prefix and remembers exactly which route objects were added;
       `remove_middleware()` takes those same objects back out of the live
       route table. Starlette resolves routes per request, so both calls take
       effect immediately on a running app.
Who:   Created by the app factory and passed to CatRouter.load().

Host contract consumed by route modules:
    use(path, router)                 attach router under path
    remove_middleware(path, router)   detach it again
    temp_dir()                        destination directory for uploads
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from fastapi import APIRouter, FastAPI
from starlette.routing import BaseRoute

from catrouter.exceptions import MountError

logger = logging.getLogger(__name__)


@dataclass
class _Mount:
    path: str
    router: APIRouter
    routes: List[BaseRoute]


class HostServer:
    """Mounts and unmounts routers on a FastAPI app at runtime."""

    def __init__(self, app: FastAPI, temp_dir: Path):
        self.app = app
        self._temp_dir = Path(temp_dir)
        self._mounts: List[_Mount] = []

    def _find(self, path: str, router: APIRouter) -> int:
        for index, mount in enumerate(self._mounts):
            if mount.path == path and mount.router is router:
                return index
        return -1

    def use(self, path: str, router: APIRouter) -> None:
        """
        Attach `router` under `path`.

        Raises:
            MountError if this router is already mounted at `path`.
        """
        if self._find(path, router) >= 0:
            raise MountError(path, f"Router is already mounted at '{path}'")

        routes = self.app.router.routes
        start = len(routes)
        self.app.include_router(router, prefix=path)
        self._mounts.append(_Mount(path=path, router=router, routes=routes[start:]))
        # Regenerate the OpenAPI document on next request
        self.app.openapi_schema = None

        logger.info("Mounted %d route(s) at %s", len(routes) - start, path)

    def remove_middleware(self, path: str, router: APIRouter) -> None:
        """
        Detach the routes a matching use(path, router) added.

        Raises:
            MountError if `router` is not mounted at `path`.
        """
        index = self._find(path, router)
        if index < 0:
            raise MountError(path, f"No router mounted at '{path}'")

        mount = self._mounts.pop(index)
        added = {id(route) for route in mount.routes}
        self.app.router.routes[:] = [
            route for route in self.app.router.routes if id(route) not in added
        ]
        self.app.openapi_schema = None

        logger.info("Unmounted %d route(s) from %s", len(mount.routes), path)

    def temp_dir(self) -> Path:
        """Upload destination directory, created on first use."""
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        return self._temp_dir

    def mounts(self) -> List[str]:
        """Paths with at least one mounted router."""
        return sorted({mount.path for mount in self._mounts})
