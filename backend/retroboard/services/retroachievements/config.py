from pydantic import BaseModel


class RetroAchievementsConfig(BaseModel):
    """Configuration for the RetroAchievements web API client."""

    base_url: str = "https://retroachievements.org/API"
    timeout_seconds: float = 30.0
    max_connections: int = 20
    max_keepalive_connections: int = 5
    max_retries: int = 3
