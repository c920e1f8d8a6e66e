"""Serve the CatRouter app with uvicorn: `python -m catrouter`."""

import uvicorn

from catrouter.config import settings


def main() -> None:
    uvicorn.run(
        "catrouter.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
