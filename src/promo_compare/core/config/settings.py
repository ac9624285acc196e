"""Application configuration using Pydantic Settings with YAML support.

Configuration is grouped by domain:
- Service identity, server and API prefix
- PostgreSQL connection for the promotions table
- Keyword expansion limits
- Matching thresholds per strictness mode
- Result cache capacity and TTL
- Comparison request limits and the store allow-list
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from promo_compare.schemas.enums import MatchingMode, StoreName
from promo_compare.services.keywords.constants import (
    MAX_KEYWORD_LENGTH,
    MAX_KEYWORDS,
    MIN_KEYWORD_LENGTH,
)
from promo_compare.services.matching.constants import (
    FUZZY_FLOORS,
    GOOD_SIMILARITY,
    HIGH_CONFIDENCE_SIMILARITY,
    MAX_CANDIDATE_POOL,
    QUALIFYING_SIMILARITY,
)

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


def parse_list(v: str | list[str]) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Promo Compare Service"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 8000


class ApiSettings(BaseModel):
    """API configuration settings."""

    v1_prefix: str = "/api/v1/promo-compare"
    cors_origins: Annotated[list[str], BeforeValidator(parse_list)] = []


class DatabaseSettings(BaseModel):
    """PostgreSQL connection for the promotions table."""

    host: str = "localhost"
    port: int = 5432
    name: str = "promotions"
    user: str | None = None
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: float = 10.0  # seconds
    ssl: bool = False


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


class KeywordSettings(BaseModel):
    """Bounds on the keyword set generated per product."""

    max_keywords: int = Field(default=MAX_KEYWORDS, ge=1)
    min_length: int = Field(default=MIN_KEYWORD_LENGTH, ge=1)
    max_length: int = Field(default=MAX_KEYWORD_LENGTH, ge=2)


class MatchingSettings(BaseModel):
    """Match engine thresholds.

    The confidence thresholds and the flexible fuzzy floor double as the
    price aggregator's match quality buckets.
    """

    default_mode: MatchingMode = MatchingMode.FLEXIBLE
    qualifying_similarity: float = Field(default=QUALIFYING_SIMILARITY, ge=0, le=1)
    high_confidence_similarity: float = Field(
        default=HIGH_CONFIDENCE_SIMILARITY, ge=0, le=1
    )
    good_similarity: float = Field(default=GOOD_SIMILARITY, ge=0, le=1)
    max_candidates: int = Field(default=MAX_CANDIDATE_POOL, ge=1)
    fuzzy_floors: dict[MatchingMode, float] = Field(
        default_factory=lambda: dict(FUZZY_FLOORS)
    )

    @model_validator(mode="after")
    def _fill_missing_floors(self) -> MatchingSettings:
        for mode, floor in FUZZY_FLOORS.items():
            self.fuzzy_floors.setdefault(mode, floor)
        return self


class CacheSettings(BaseModel):
    """In-process result cache configuration."""

    enabled: bool = True
    max_entries: int = Field(default=1000, ge=1)
    default_ttl_seconds: float = Field(default=30 * 60, ge=0)
    cleanup_interval_seconds: float = Field(default=300, gt=0)
    key_prefix: str = "promo:v1"


class ComparisonSettings(BaseModel):
    """Limits applied to a basket comparison request."""

    stores: list[StoreName] = Field(default_factory=lambda: list(StoreName))
    max_items: int = Field(default=50, ge=1)
    min_item_length: int = Field(default=2, ge=1)
    max_item_length: int = Field(default=100, ge=1)
    max_search_keywords: int = Field(default=30, ge=1)
    search_limit: int = Field(default=200, ge=1)
    promotions_only: bool = True


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Priority (highest to lowest):
    1. Values passed to ``Settings()``
    2. Environment variables (nested with ``__``, e.g. ``CACHE__MAX_ENTRIES``)
    3. ``.env`` file (secrets)
    4. Environment-specific YAML (``config/environments/{APP_ENV}/``)
    5. Base YAML (``config/base/``)
    6. Defaults in code
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()
    keywords: KeywordSettings = KeywordSettings()
    matching: MatchingSettings = MatchingSettings()
    cache: CacheSettings = CacheSettings()
    comparison: ComparisonSettings = ComparisonSettings()

    # Secrets (from .env only - never in YAML)
    DATABASE_PASSWORD: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the YAML source below environment and dotenv values."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def database_dsn(self) -> str:
        """PostgreSQL DSN without the password (the pool receives it separately)."""
        user_part = f"{self.database.user}@" if self.database.user else ""
        return (
            f"postgresql://{user_part}{self.database.host}:"
            f"{self.database.port}/{self.database.name}"
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
