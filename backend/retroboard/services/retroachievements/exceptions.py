class RetroAchievementsAPIError(Exception):
    """Base exception for RetroAchievements API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RetroAchievementsAuthError(RetroAchievementsAPIError):
    """Authentication failed."""

    pass


class RetroAchievementsRateLimitError(RetroAchievementsAPIError):
    """Rate limit exceeded."""

    pass


class RetroAchievementsNotFoundError(RetroAchievementsAPIError):
    """Resource not found."""

    pass
