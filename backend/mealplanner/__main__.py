"""Run the API with uvicorn: `python -m mealplanner` (honours HOST and PORT)."""

import uvicorn

from mealplanner.config import settings


def main() -> None:
    uvicorn.run(
        "mealplanner.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
