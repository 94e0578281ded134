from __future__ import annotations

from loguru import logger

from angelito.core.config import Settings, load_settings
from angelito.core.logging import setup_logging
from angelito.db import init_engine


def bootstrap() -> Settings:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_path)
    engine = init_engine(settings.database_url, create_schema=settings.create_schema)

    logger.info("Database - {url}", url=engine.url.render_as_string(hide_password=True))
    logger.info("Schema   - {mode}", mode="created" if settings.create_schema else "unmanaged")
    return settings


def main() -> None:
    logger.info("angelito starting...")
    bootstrap()
    logger.info("angelito ready")


if __name__ == "__main__":
    main()
