"""
Brainwave Server Configuration

This file contains all server-side configurable settings.
Modify these values to tune the forum behaviour.
"""

from dataclasses import dataclass
import os


@dataclass
class ServerConfig:
    """Server networking configuration."""
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    CORS_ORIGINS: tuple = (
        "http://localhost:5173",  # Vite default port
        "http://localhost:3000",  # Alternative React port
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    )


@dataclass
class DatabaseConfig:
    """Database configuration."""
    DATABASE_URL: str = None
    ECHO_SQL: bool = False  # Log SQL queries

    def __post_init__(self):
        if self.DATABASE_URL is None:
            self.DATABASE_URL = os.getenv("BRAINWAVE_DATABASE_URL")


@dataclass
class SecurityConfig:
    """Password hashing and reset flow settings."""
    BCRYPT_ROUNDS: int = 12  # Work factor, 4-31
    RESET_CODE_MIN: int = 100000
    RESET_CODE_MAX: int = 999999


@dataclass
class ForumConfig:
    """User and content rules."""
    USERNAME_MIN_LENGTH: int = 3
    USERNAME_MAX_LENGTH: int = 20
    USERNAME_PATTERN: str = r'[a-zA-Z0-9_]{3,20}'
    TITLE_MAX_LENGTH: int = 200
    # Titles that would shadow fixed routes under /topics
    RESERVED_TITLES: tuple = ("count",)
    MESSAGE_MAX_LENGTH: int = 10000


@dataclass
class Settings:
    """Main settings container."""
    server: ServerConfig = None
    database: DatabaseConfig = None
    security: SecurityConfig = None
    forum: ForumConfig = None

    # Application info
    APP_NAME: str = "Brainwave"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = os.getenv("BRAINWAVE_LOG_LEVEL", "INFO")

    def __post_init__(self):
        self.server = self.server or ServerConfig()
        self.database = self.database or DatabaseConfig()
        self.security = self.security or SecurityConfig()
        self.forum = self.forum or ForumConfig()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
