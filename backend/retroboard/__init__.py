"""RetroBoard: community leaderboards and game nominations for RetroAchievements."""

__version__ = "0.1.0"
__author__ = "RetroBoard Team"

__all__ = ["__version__", "__author__"]
