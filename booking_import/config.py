from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Database - PostgreSQL for production, SQLite for development
    database_url: str = Field(
        default="sqlite:///./booking_import.db",
        alias="DATABASE_URL"
    )

    # ==============================================
    # Import decision policy
    # ==============================================
    # Extractions at or above this confidence are tagged "auto"
    auto_import_confidence: float = Field(default=0.8, alias="AUTO_IMPORT_CONFIDENCE")

    # When enabled, manual-approved suggestions are not committed until approved
    enforce_manual_approval: bool = Field(default=False, alias="ENFORCE_MANUAL_APPROVAL")

    # Platforms whose emails may carry no stay dates (comma-separated)
    notification_only_platforms: str = Field(
        default="booking_com",
        alias="NOTIFICATION_ONLY_PLATFORMS"
    )

    # Guest profile defaults
    default_guest_country: str = Field(default="India", alias="DEFAULT_GUEST_COUNTRY")

    # Written to the ledger's processed_by column
    processed_by: str = Field(default="system", alias="PROCESSED_BY")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    @field_validator('auto_import_confidence')
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if v < 0 or v > 1:
            raise ValueError("AUTO_IMPORT_CONFIDENCE must be between 0 and 1")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def notification_only_platform_list(self) -> List[str]:
        """Parse notification-only platforms"""
        if not self.notification_only_platforms:
            return []
        return [
            p.strip().lower()
            for p in self.notification_only_platforms.split(",")
            if p.strip()
        ]

    @property
    def sqlalchemy_url(self) -> str:
        # Hosted Postgres URLs often use postgres://, SQLAlchemy needs postgresql://
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql://", 1)
        return self.database_url

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Initialize settings on module load
settings = get_settings()
