"""Run the API with uvicorn: ``python -m backoffice.api``."""

import uvicorn

from backoffice.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "backoffice.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        log_config=None,
    )


if __name__ == "__main__":
    main()
