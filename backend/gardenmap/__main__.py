"""
Run the garden map server.

Usage:
    python -m gardenmap

Host, port and log level come from Settings (BACKEND_HOST, BACKEND_PORT,
LOG_LEVEL, or a `.env` file in the working directory).
"""

import uvicorn

from gardenmap.config import settings


def main() -> None:
    uvicorn.run(
        "gardenmap.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
