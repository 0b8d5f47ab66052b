"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from BILLING_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="BILLING_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Service
    service_name: str = "billing-gateway"
    log_level: str = "INFO"

    # Civil dates ("today", due dates) are evaluated in this IANA timezone
    timezone: str = "America/Sao_Paulo"

    # Load the demo clients/contracts/invoices at startup
    seed_demo_data: bool = False

    # External Services
    address_api_base: str = "https://viacep.com.br"
    report_api_url: str = "http://localhost:8003/revenue-report"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Documents and avatars
    document_url_prefix: str = "/documents"
    avatar_placeholder_base: str = "https://placehold.co/40x40/E2E8F0/475569"


settings = Settings()
