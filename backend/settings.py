import os
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from errors import ConfigurationError

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_KEY_NAME = "service-account-key.json"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str
    location: str
    host: str = "0.0.0.0"
    port: int = 3000
    base_dir: Path = Field(default_factory=Path.cwd)
    credentials_path: Optional[Path] = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    analysis_model: str = "gemini-2.5-flash"
    synthesis_model: str = "lyria-002"
    synthesis_timeout: float = 300.0
    cors_origins: List[str] = ["*"]

    @property
    def uploads_dir(self) -> Path:
        return self.base_dir / "uploads"

    @property
    def outputs_dir(self) -> Path:
        return self.base_dir / "outputs"

    @property
    def texts_dir(self) -> Path:
        return self.base_dir / "texts"

    @property
    def public_dir(self) -> Path:
        return self.base_dir / "public"

    @property
    def service_account_key(self) -> Path:
        return self.base_dir / SERVICE_ACCOUNT_KEY_NAME

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """Build settings from the environment, loading ``.env`` first."""
        load_dotenv(env_file)

        project_id = os.environ.get("PROJECT_ID")
        location = os.environ.get("LOCATION")
        missing = [name for name, value in (("PROJECT_ID", project_id), ("LOCATION", location)) if not value]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        base_dir = Path(os.environ.get("DATA_DIR") or Path.cwd()).resolve()
        credentials = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")

        try:
            return cls(
                project_id=project_id,
                location=location,
                host=os.environ.get("HOST", "0.0.0.0"),
                port=int(os.environ.get("PORT", "3000")),
                base_dir=base_dir,
                credentials_path=Path(credentials) if credentials else None,
                max_upload_bytes=int(os.environ.get("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
                analysis_model=os.environ.get("ANALYSIS_MODEL", "gemini-2.5-flash"),
                synthesis_model=os.environ.get("SYNTHESIS_MODEL", "lyria-002"),
                synthesis_timeout=float(os.environ.get("SYNTHESIS_TIMEOUT", "300")),
                cors_origins=os.environ.get("CORS_ORIGINS", "*").split(","),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def ensure_directories(settings: Settings) -> None:
    for directory in (settings.uploads_dir, settings.outputs_dir, settings.texts_dir):
        directory.mkdir(parents=True, exist_ok=True)


def configure_credentials(settings: Settings) -> Path:
    """Point Google client libraries at a service account key, failing fast if none exists."""
    if settings.credentials_path:
        if not settings.credentials_path.exists():
            raise ConfigurationError(f"Credentials file not found at: {settings.credentials_path}")
        return settings.credentials_path

    key_path = settings.service_account_key
    if not key_path.exists():
        raise ConfigurationError(f"Service account key file not found at: {key_path}")
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = str(key_path)
    logger.info(f"Using service account key at {key_path}")
    return key_path
