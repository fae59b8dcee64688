from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./mrp.db"  # Default to SQLite

    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    PART_SEARCH_DEFAULT_LIMIT: int = 100
    PART_SEARCH_MAX_LIMIT: int = 1000

    # The schema normally already exists in the ERP database
    CREATE_SCHEMA_ON_STARTUP: bool = False

    CORS_ORIGINS: List[str] = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


settings = Settings()
