"""Run the API server: ``python -m notenest``."""

import uvicorn

from notenest.config import settings


def main() -> None:
    uvicorn.run(
        "notenest.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
