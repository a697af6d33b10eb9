"""Serve the API: ``python -m conquest`` or the ``conquest`` script."""

import uvicorn

from conquest.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "conquest.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        proxy_headers=True,
        # structlog owns logging configuration
        log_config=None,
    )


if __name__ == "__main__":
    main()
