"""
Runtime Environment Validation

Validates required environment variables at application startup.
If validation fails outside debug mode the process exits with code 1.
"""

import os
import sys
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProductionSettings(BaseSettings):
    """Strict validation schema for production environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str

    # Firebase Authentication
    firebase_project_id: str
    google_application_credentials: Optional[str] = None

    # Storage Provider
    storage_provider: str = "gcs"
    gcs_bucket_name: Optional[str] = None
    gcs_project_id: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: Optional[str] = None
    s3_bucket_name: Optional[str] = None

    # Application
    app_name: str = "HOA Portal"
    debug: bool = False

    # CORS: comma-separated list of allowed origins
    allowed_origins: str

    # AI processing
    openai_api_key: Optional[str] = None


def _fatal(*lines: str) -> None:
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(1)


def validate_environment() -> Optional[ProductionSettings]:
    """
    Validate all required environment variables at startup.

    Returns:
        ProductionSettings: Validated settings object

    Raises:
        SystemExit: If validation fails (exit code 1)
    """
    try:
        settings = ProductionSettings()
    except ValidationError as e:
        lines = ["❌ FATAL: Environment validation failed", "", "Missing or invalid environment variables:"]
        for error in e.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            lines.append(f"   • {field}: {error['msg']}")
        lines.append("")
        lines.append("Please check your .env file or environment variables.")
        _fatal(*lines)
        return None

    if settings.debug:
        print(f"⚠️  Debug mode: skipping production checks for {settings.app_name}")
        return settings

    # 1. CORS: no wildcard in production
    origins = [o.strip() for o in settings.allowed_origins.split(",")]
    if "*" in origins:
        _fatal(
            "❌ FATAL: Wildcard CORS origin (*) detected in production mode.",
            "   Set ALLOWED_ORIGINS to specific domains (comma-separated).",
        )

    # 2. Storage provider configuration
    if settings.storage_provider == "gcs":
        if not settings.gcs_bucket_name or not settings.gcs_project_id:
            _fatal("❌ FATAL: GCS_BUCKET_NAME and GCS_PROJECT_ID required when STORAGE_PROVIDER=gcs")
    elif settings.storage_provider == "s3":
        if not settings.s3_bucket_name or not settings.aws_access_key_id or not settings.aws_secret_access_key:
            _fatal(
                "❌ FATAL: S3_BUCKET_NAME, AWS_ACCESS_KEY_ID, and AWS_SECRET_ACCESS_KEY "
                "required when STORAGE_PROVIDER=s3"
            )
    else:
        _fatal(f"❌ FATAL: Invalid STORAGE_PROVIDER '{settings.storage_provider}'. Must be 'gcs' or 's3'.")

    # 3. Firebase credentials path
    if settings.google_application_credentials and not os.path.exists(settings.google_application_credentials):
        _fatal(f"❌ FATAL: Firebase credentials file not found: {settings.google_application_credentials}")

    # 4. Database URL
    if not settings.database_url.startswith("postgresql"):
        _fatal(
            "❌ FATAL: DATABASE_URL must be a PostgreSQL connection string "
            "(postgresql:// or postgresql+asyncpg://)"
        )

    # 5. AI endpoints need a key; warn only, the endpoints answer 500 without one
    if not settings.openai_api_key:
        print("⚠️  OPENAI_API_KEY not set: AI processing endpoints will fail", file=sys.stderr)

    print("✅ Environment validation passed")
    print(f"   App: {settings.app_name}")
    print(f"   Storage: {settings.storage_provider}")
    print(f"   CORS Origins: {settings.allowed_origins}")
    return settings


if __name__ == "__main__":
    validate_environment()
    print("\n✅ All environment variables are valid!")
