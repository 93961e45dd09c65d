"""Application configuration."""

import os
from dataclasses import dataclass


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # API settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Spreadsheet web app that stores the roster and gamification sheets
    sheets_api_url: str = "https://script.google.com/macros/s/YOUR_DEPLOYMENT_ID/exec"
    request_timeout: float = 30.0
    max_retries: int = 3

    # Number of entries shown on dashboard leaderboards
    leaderboard_limit: int = 10

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            sheets_api_url=os.getenv(
                "SHEETS_API_URL",
                "https://script.google.com/macros/s/YOUR_DEPLOYMENT_ID/exec"
            ),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30.0")),
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            leaderboard_limit=int(os.getenv("LEADERBOARD_LIMIT", "10")),
        )
