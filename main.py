from __future__ import annotations

import logging

import uvicorn

from insta_scheduler.config import ConfigError, load_settings
from insta_scheduler.main import create_app

logger = logging.getLogger("insta-scheduler")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("config_invalid %s", exc)
        raise SystemExit(1) from exc
    logging.getLogger().setLevel(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
