import tempfile
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    upload_dir: Path = Path(tempfile.gettempdir()) / "legalflow-uploads"
    max_upload_bytes: int = 50 * 1024 * 1024
    allowed_extensions: list[str] = Field(default_factory=lambda: ["pdf", "doc", "docx"])
    upload_cleanup_delay_seconds: float = 3600

    session_store: str = "memory"
    session_max_age_seconds: float = 3600

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "legalflow"
    db_username: str = "legalflow"
    db_password: str = "secret"

    pdf_engine: str = "pdfplumber"

    analysis_provider: str = "openai"
    analysis_api_key: str = ""
    analysis_model_name: str = "gpt-4o-mini"
    analysis_base_url: str = ""
    analysis_temperature: float = 0.0
    analysis_timeout_seconds: float = 60

    subscriber_queue_size: int = 256
