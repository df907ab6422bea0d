"""Run the API with uvicorn: `python -m agencydir_api`."""

import uvicorn

from agencydir_shared.config import settings


def main() -> None:
    uvicorn.run(
        "agencydir_api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
