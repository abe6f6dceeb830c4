# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides Pydantic Settings models for the migration engine:
# - MongoSettings: MongoDB membership ledger configuration
# - MigrationSettings: Migration runner behaviour switches
# =============================================================================

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "MongoSettings",
    "MigrationSettings",
]


# =============================================================================
# MongoDB Settings (Membership Ledger)
# =============================================================================

class MongoSettings(BaseSettings):
    """
    Configuration for MongoDB (membership ledger).

    Maps environment variables:
    - MONGO_HOST → host
    - MONGO_PORT → port
    - MONGO_USERNAME → username
    - MONGO_PASSWORD → password
    - MONGO_DATABASE → database
    - MONGO_AUTH_SOURCE → auth_source

    Attributes:
        host: MongoDB host (default: "localhost")
        port: MongoDB port (default: 27017)
        username: MongoDB username (optional for unauthenticated local servers)
        password: MongoDB password
        database: Database name (default: "membership")
        auth_source: Authentication source (default: "admin")
    """

    host: str = Field("localhost", validation_alias="MONGO_HOST", description="MongoDB host")
    port: int = Field(27017, validation_alias="MONGO_PORT", description="MongoDB port")
    username: Optional[str] = Field(None, validation_alias="MONGO_USERNAME", description="MongoDB username")
    password: Optional[str] = Field(None, validation_alias="MONGO_PASSWORD", description="MongoDB password")
    database: str = Field("membership", validation_alias="MONGO_DATABASE", description="Database name")
    auth_source: str = Field("admin", validation_alias="MONGO_AUTH_SOURCE", description="Authentication source")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
    )

    @property
    def connection_string(self) -> str:
        """
        Build MongoDB connection URI.

        Format: mongodb://[username]:[password]@[host]:[port]/[database]?authSource=[auth_source]

        Credentials and authSource are omitted when no username is configured.

        Returns:
            MongoDB connection URI string
        """
        if not self.username:
            return f"mongodb://{self.host}:{self.port}/{self.database}"
        return (
            f"mongodb://{self.username}:{self.password or ''}@"
            f"{self.host}:{self.port}/{self.database}?authSource={self.auth_source}"
        )


# =============================================================================
# Migration Settings
# =============================================================================

class MigrationSettings(BaseSettings):
    """
    Behaviour switches for the migration runner.

    Maps environment variables:
    - RUN_MIGRATIONS_ON_STARTUP → run_on_startup

    Attributes:
        run_on_startup: Apply pending migrations during application startup
            (default: True)
    """

    run_on_startup: bool = Field(
        True,
        validation_alias="RUN_MIGRATIONS_ON_STARTUP",
        description="Apply pending migrations on startup",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )
