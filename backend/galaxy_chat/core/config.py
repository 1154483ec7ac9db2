from pathlib import Path

from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parent.parent.parent

_PLACEHOLDER_PREFIX = "your_"


class Settings(BaseSettings):
    app_name: str = "Galaxy Chat"
    debug: bool = False

    # Paths
    data_dir: Path = _BACKEND_DIR / "data"
    db_path: Path = _BACKEND_DIR / "galaxy_chat.db"
    models_config_path: Path = _BACKEND_DIR / "config" / "models.yaml"

    # LLM providers
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""

    # Cloudinary object storage
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""

    # Identity: the upstream identity provider forwards the user id in this header
    auth_user_header: str = "X-User-Id"

    # Context window assembly
    context_max_messages: int = 65
    context_recent_chat_limit: int = 10

    # Attachments
    pdf_max_pages: int = 10

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(_BACKEND_DIR / ".env"),
        "env_prefix": "GALAXY_",
    }

    @property
    def uploads_dir(self) -> Path:
        return self.data_dir / "uploads"

    @property
    def cloudinary_configured(self) -> bool:
        """True when all Cloudinary credentials are set to non-placeholder values."""
        values = (self.cloudinary_cloud_name, self.cloudinary_api_key, self.cloudinary_api_secret)
        return all(v and not v.startswith(_PLACEHOLDER_PREFIX) for v in values)


settings = Settings()
