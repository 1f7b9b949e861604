from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "bounty-platform-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Bounty Platform")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "120"))

    # Airtable
    airtable_api_url: str = os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0")
    airtable_personal_access_token: str = os.getenv("AIRTABLE_PERSONAL_ACCESS_TOKEN", "")
    airtable_base_id: str = os.getenv("AIRTABLE_BASE_ID", "app15IobIPfU3YDf0")
    airtable_bounties_table_id: str = os.getenv("AIRTABLE_BOUNTIES_TABLE_ID", "tblakfzUZvuvWKbdI")
    airtable_submissions_table_id: str = os.getenv("AIRTABLE_SUBMISSIONS_TABLE_ID", "Submissions")
    airtable_view: str = os.getenv("AIRTABLE_VIEW", "Grid view")
    airtable_max_records: int = int(os.getenv("AIRTABLE_MAX_RECORDS", "100"))
    # Serve sample bounties when Airtable is unreachable or misconfigured
    mock_fallback_enabled: bool = os.getenv("MOCK_FALLBACK_ENABLED", "1") == "1"

    # Cloudinary
    cloudinary_api_url: str = os.getenv("CLOUDINARY_API_URL", "https://api.cloudinary.com/v1_1")
    cloudinary_cloud_name: str = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    cloudinary_api_key: str = os.getenv("CLOUDINARY_API_KEY", "")
    cloudinary_api_secret: str = os.getenv("CLOUDINARY_API_SECRET", "")

    # Privy
    privy_api_url: str = os.getenv("PRIVY_API_URL", "https://auth.privy.io/api/v1")
    privy_app_id: str = os.getenv("PRIVY_APP_ID", "")
    privy_app_secret: str = os.getenv("PRIVY_APP_SECRET", "")

    # Shared secrets for protected routes (empty = unprotected)
    admin_api_key: str = os.getenv("ADMIN_API_KEY", "")
    webhook_secret: str = os.getenv("WEBHOOK_SECRET", "")

    # Upload limits
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "20"))
    max_total_upload_mb: int = int(os.getenv("MAX_TOTAL_UPLOAD_MB", "50"))
    max_attachment_fields: int = int(os.getenv("MAX_ATTACHMENT_FIELDS", "3"))

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def max_total_upload_bytes(self) -> int:
        return self.max_total_upload_mb * 1024 * 1024

settings = Settings()

def get_settings() -> Settings:
    return settings
