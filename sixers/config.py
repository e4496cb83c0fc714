"""
Service configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Storage
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///sixers.db")
    SQL_ECHO: bool = os.getenv("SQL_ECHO", "0") == "1"

    # JWT settings (tokens are issued upstream, we only read the claims)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    TOURNAMENT_CLAIM: str = "custom:tournamentId"

    # Comma-separated extra origins
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
