from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Shop Orders Dashboard"
    VERSION: str = "1.0.0"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    # Shopify
    SHOP_DOMAIN: Optional[str] = None
    SHOP_TOKEN: Optional[str] = None
    SHOPIFY_API_VERSION: str = "2025-01"
    UPSTREAM_TIMEOUT_SECONDS: float = 30.0
    LINE_ITEMS_PER_ORDER: int = 10

    # Paging
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 250  # Shopify's hard limit for `first`
    LIST_ALL_MAX_PAGES: int = 100
    CSV_MAX_PAGES: int = 200

    # Batch jobs
    BATCH_DEFAULT_SIZE: int = 100
    BATCH_DEFAULT_MAX_BATCHES: int = 50
    JOB_SAMPLE_CAP: int = 1000
    JOB_RETENTION_SECONDS: int = 3600  # 0 keeps finished jobs forever
    COLLECTION_POLICY: str = "best_effort"  # best_effort or fail_fast
    PROGRESS_EVERY_PAGES: int = 5
    CALLBACK_TIMEOUT_SECONDS: float = 10.0

    # Task runner
    TASK_RUNNER_MODE: str = "thread"  # thread or inline
    TASK_WORKERS: int = 4

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False


settings = Settings()
