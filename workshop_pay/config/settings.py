"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="workshop-pay", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=3000, description="First port to try")
    api_reload: bool = Field(default=False, description="Enable auto-reload")
    port_fallback_attempts: int = Field(
        default=8,
        ge=1,
        description="How many consecutive ports to try when the first is taken",
    )

    # Cassandra
    cassandra_hosts: list[str] = Field(
        default=[], description="Cassandra hosts (empty = store disabled)"
    )
    cassandra_port: int = Field(default=9042, description="Cassandra port")
    cassandra_keyspace: str = Field(
        default="workshop_pay", description="Cassandra keyspace"
    )
    cassandra_username: str | None = Field(default=None, description="Cassandra user")
    cassandra_password: str | None = Field(
        default=None, description="Cassandra password"
    )
    cassandra_protocol_version: int = Field(default=4, description="Protocol version")
    cassandra_connect_timeout: float = Field(
        default=10.0, description="Connect timeout"
    )

    # Razorpay
    razorpay_key_id: str = Field(default="", description="Razorpay API key id")
    razorpay_key_secret: str = Field(
        default="", description="Razorpay API key secret (KEEP SECRET!)"
    )
    razorpay_webhook_secret: str = Field(
        default="",
        description="Shared secret for webhook HMAC (empty disables verification)",
    )
    razorpay_api_base_url: str = Field(
        default="https://api.razorpay.com/v1", description="Razorpay REST base URL"
    )
    razorpay_timeout: float = Field(
        default=30.0, description="Timeout for Razorpay API calls (seconds)"
    )
    order_currency: str = Field(default="INR", description="Currency for orders")
    order_receipt_prefix: str = Field(
        default="wclan_", description="Prefix for generated order receipts"
    )

    # Access links handed out after payment
    whatsapp_link: str = Field(default="", description="WhatsApp group invite link")
    telegram_link: str = Field(
        default="", description="Telegram channel link (bundle only)"
    )
    bundle_download_url: str = Field(
        default="", description="Bundle download URL (bundle only)"
    )

    # Diagnostics
    expose_recent_attendees: bool = Field(
        default=False,
        description="Serve the unauthenticated /_recent-attendees listing",
    )
    recent_attendees_limit: int = Field(
        default=30, description="Max registrants returned by the recent listing"
    )

    # Static frontend
    static_dir: str = Field(
        default="public", description="Directory holding index.html and assets/"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=False, description="Include caller info"
    )
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Max size per log file (10MB default)"
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: list[str] = Field(
        default=["/health", "/health/live", "/health/ready"],
        description="Paths to exclude from request logging",
    )

    # CORS
    cors_origins: list[str] = Field(default=["*"], description="CORS origins")
    cors_allow_credentials: bool = Field(default=False, description="Allow credentials")
    cors_allow_methods: list[str] = Field(default=["*"], description="Allowed methods")
    cors_allow_headers: list[str] = Field(default=["*"], description="Allowed headers")
    cors_max_age: int = Field(default=600, description="CORS max age")

    # Email (Gmail API)
    email_enabled: bool = Field(
        default=False, description="Enable email sending via Gmail API"
    )
    email_credentials_path: str = Field(
        default="credentials/google-service-account.json",
        description="Path to Google service account JSON file",
    )
    email_sender_address: str = Field(
        default="no-reply@wclan.in",
        description="Sender email address (must be in Google Workspace domain)",
    )
    email_sender_name: str = Field(default="WCLAN", description="Sender display name")
    notification_queue_size: int = Field(
        default=1000, description="Pending confirmation emails before dropping"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def cassandra_configured(self) -> bool:
        """Check if a Cassandra cluster is configured."""
        return bool(self.cassandra_hosts)

    @property
    def razorpay_configured(self) -> bool:
        """Check if the Razorpay key pair is present."""
        return bool(self.razorpay_key_id and self.razorpay_key_secret)

    @property
    def webhook_verification_enabled(self) -> bool:
        """Check if webhook signatures are verified."""
        return bool(self.razorpay_webhook_secret)

    @property
    def email_configured(self) -> bool:
        """Check if Gmail API email is configured."""
        return bool(self.email_enabled and self.email_sender_address)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
