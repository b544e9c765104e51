from typing import List

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="Listings Platform")
    app_description: str = Field(default="Listings and moderation backend")
    app_version: str = Field(default="1.0.0")
    app_url: str = Field(default="http://localhost:8000")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)

    # Database Configuration
    db_connection: str = Field(default="postgresql")
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="listings")
    db_username: str = Field(default="home")
    db_password: str = Field(default="123")
    db_connect_timeout: int = Field(default=5)
    db_statement_timeout_ms: int = Field(default=5000)
    db_pool_timeout: int = Field(default=10)

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:3000"])

    # JWT Configuration (verification only, tokens are issued elsewhere)
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: str = Field(default="Listings Platform")

    # Email (SMTP)
    mail_enabled: bool = Field(default=False)
    mail_host: str = Field(default="smtp.example.com")
    mail_port: int = Field(default=587)
    mail_username: str = Field(default="your@email.com")
    mail_password: str = Field(default="")
    mail_encryption: str = Field(default="tls")
    mail_from_address: str = Field(default="no-reply@example.com")
    mail_from_name: str = Field(default="Listings Platform")
    mail_timeout: int = Field(default=10)

    # File Uploads
    max_upload_size_mb: int = Field(default=5)
    upload_dir: str = Field(default="storage")
    allowed_file_types: List[str] = Field(
        default=["jpg", "jpeg", "png", "gif", "webp"]
    )

    # Logging
    log_level: str = Field(default="info")
    log_file: str = Field(default="logs/app.log")

    # Rate limiting
    rate_limit_storage_uri: str = Field(default="memory://")
    rate_limit_default: str = Field(default="100/minute")

    # Notifications outbox
    notification_dispatch_interval: int = Field(default=15)
    notification_batch_size: int = Field(default=50)
    notification_max_attempts: int = Field(default=5)

    # Moderation
    moderation_reconcile_interval: int = Field(default=300)
    moderation_cascade_overwrites_rejected: bool = Field(default=True)

    # Scheduler
    scheduler_enabled: bool = Field(default=True)

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("allowed_file_types", mode="before")
    def validate_file_types(cls, v):
        return cls._parse_csv(v, ["jpg", "jpeg", "png", "gif", "webp"])

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:3000"])

    @property
    def database_url(self) -> str:
        if self.db_connection == "sqlite":
            return f"sqlite:///{self.db_database}"
        return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}".format(
            user=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        print("✅ Settings loaded successfully!")
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
