"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE_RULES = [
    "Hardcore mode must be enabled",
    "All achievements are eligible",
    "Progress tracked via retroachievements",
    "No hacks/save states/cheats allowed",
    "Any discrepancies, ties, or edge case situations will be judged case by case "
    "and settled upon in the multiplayer game of each combatant's choosing.",
]


class MongoConfig(BaseModel):
    """MongoDB connection parameters."""

    url: str = "mongodb://localhost:27017"
    database: str = "retroboard"
    server_selection_timeout_ms: int = 5000


class CacheConfig(BaseModel):
    """Response cache parameters."""

    ttl_seconds: float = 300.0  # 5 minutes


class LeaderboardConfig(BaseModel):
    """Leaderboard assembly parameters."""

    top_n: int = 10
    # Yearly ties share a rank unless the achievement count should break them
    yearly_tiebreak_on_achievements: bool = False
    default_game_title: str = "Current Challenge"
    default_game_icon: str = "/Images/093950.png"


class RetroAchievementsSettings(BaseModel):
    """RetroAchievements web API credentials and limits."""

    base_url: str = "https://retroachievements.org/API"
    site_url: str = "https://retroachievements.org"
    username: str = ""
    api_key: str = ""
    timeout_seconds: float = 30.0
    max_retries: int = 3


class EmbedConfig(BaseModel):
    """Embeddable page parameters."""

    refresh_seconds: int = 300
    challenge_rules: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CHALLENGE_RULES)
    )


class Settings(BaseSettings):
    """Main configuration class."""

    # Application
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    debug: bool = False
    data_dir: Path = Path("data")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # Logging / observability
    log_level: str = "INFO"
    logfire_token: str = ""

    # Nested configuration sections
    mongodb: MongoConfig = Field(default_factory=MongoConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    leaderboard: LeaderboardConfig = Field(default_factory=LeaderboardConfig)
    retroachievements: RetroAchievementsSettings = Field(
        default_factory=RetroAchievementsSettings
    )
    embed: EmbedConfig = Field(default_factory=EmbedConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("allowed_origins")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}. Using defaults.")
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in [
                "mongodb",
                "cache",
                "leaderboard",
                "retroachievements",
                "embed",
            ]:
                if section_name in yaml_config:
                    section = getattr(self, section_name)
                    yaml_section = yaml_config[section_name] or {}

                    section_dict = section.model_dump()
                    section_dict.update(yaml_section)

                    new_section = section.__class__(**section_dict)
                    setattr(self, section_name, new_section)

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
