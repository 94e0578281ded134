import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    create_schema: bool
    log_level: str
    log_path: str


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL is required. Set it in the environment or .env file.")

    create_schema = os.getenv("DATABASE_CREATE_SCHEMA", "true").strip().lower() in _TRUE_VALUES

    return Settings(
        database_url=database_url,
        create_schema=create_schema,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_path=os.getenv("LOG_PATH", "logs/angelito.log"),
    )
