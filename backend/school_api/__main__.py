"""Run the API with uvicorn: python -m school_api"""

import uvicorn

from school_api.config import settings


def main() -> None:
    uvicorn.run(
        "school_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
        reload=settings.environment == "development",
    )


if __name__ == "__main__":
    main()
