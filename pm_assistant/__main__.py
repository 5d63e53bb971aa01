"""Run the PM Assistant HTTP service."""

import uvicorn

from pm_assistant.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "pm_assistant.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
