"""Console entry point: serve the app with uvicorn."""

import uvicorn

from flip7.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "flip7.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    main()
