"""Application configuration using Pydantic BaseSettings."""

import logging

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CORS Configuration
    cors_origins: str = Field(default="http://localhost:3000", alias="CORS_ORIGINS")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # WordPress CMS
    wordpress_base_url: str = Field(default="", alias="WORDPRESS_BASE_URL")
    wordpress_api_path: str = Field(
        default="/wordpress/index.php/wp-json/wp/v2", alias="WORDPRESS_API_PATH"
    )
    cms_page_size: int = Field(default=8, alias="CMS_PAGE_SIZE")

    # OpenSea (Ethereum)
    opensea_base_url: str = Field(default="https://api.opensea.io/api/v2", alias="OPENSEA_BASE_URL")
    # Empty key means "load from the CMS api-keys endpoint at startup"
    opensea_api_key: str = Field(default="", alias="OPENSEA_API_KEY")
    opensea_events_limit: int = Field(default=4, alias="OPENSEA_EVENTS_LIMIT")

    # Objkt (Tezos)
    objkt_graphql_url: str = Field(
        default="https://data.objkt.com/v3/graphql", alias="OBJKT_GRAPHQL_URL"
    )
    objkt_events_limit: int = Field(default=2, alias="OBJKT_EVENTS_LIMIT")
    ipfs_gateway: str = Field(default="cloudflare-ipfs.com", alias="IPFS_GATEWAY")

    # Contact address shown next to galleries
    contact_email: str = Field(default="", alias="CONTACT_EMAIL")

    # Aggregation fan-out
    fetch_concurrency: int = Field(default=8, ge=1, alias="FETCH_CONCURRENCY")
    fetch_timeout_seconds: float = Field(default=15.0, gt=0, alias="FETCH_TIMEOUT_SECONDS")
    fetch_retries: int = Field(default=0, ge=0, alias="FETCH_RETRIES")
    fetch_retry_delay_seconds: float = Field(default=1.0, ge=0, alias="FETCH_RETRY_DELAY_SECONDS")

    # Filter tree
    filter_first_year: int = Field(default=2020, alias="FILTER_FIRST_YEAR")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def wordpress_api_url(self) -> str:
        """Base URL of the WordPress REST namespace (no trailing slash)."""
        return self.wordpress_base_url.rstrip("/") + "/" + self.wordpress_api_path.strip("/")

    @model_validator(mode="after")
    def validate_required_config(self) -> "Settings":
        """Validate required configuration on startup.

        Fails fast with a clear error message when the CMS location is missing.
        Validation is skipped in test/development environments.
        """
        if self.app_env in ("test", "testing", "development"):
            return self

        missing = []

        if not self.wordpress_base_url:
            missing.append("WORDPRESS_BASE_URL: Base URL of the WordPress installation")

        if missing:
            error_msg = "CRITICAL: Missing required environment variables:\n\n" + "\n".join(
                f"  - {m}" for m in missing
            )
            error_msg += "\n\nThe application cannot start without these variables."
            raise ValueError(error_msg)

        return self


def configure_logging(settings: Settings) -> None:
    """Configure structlog based on application environment.

    - Production: JSON output for log aggregation
    - Development: Console output for human readability
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.app_env == "production":
        # JSON output for production (log aggregation)
        processors = [
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
