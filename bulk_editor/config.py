"""
Configuration management.
Simple .env based config for a single-shop deployment.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Security
    session_secret: str = "change-me-in-production-use-random-string"
    admin_password_hash: str = ""  # bcrypt hash

    # Database
    database_path: str = "./data/app.db"

    # Shopify
    shop: Optional[str] = None  # e.g. "mystore.myshopify.com"
    shopify_api_version: str = "2025-01"
    shopify_api_key: str = ""
    shopify_api_secret: str = ""
    shopify_scopes: str = "read_products,write_products,read_inventory,write_inventory,read_locations"

    # Tag indexing job
    index_interval_seconds: int = 60

    # Logging
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
