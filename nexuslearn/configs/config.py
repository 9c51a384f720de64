"""
Configuration module for NexusLearn (configs).

Every setting comes from the environment (a ``.env`` file is loaded first).
Model settings are ``provider/model`` specs, e.g. ``google/gemini-2.5-flash``.
"""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from nexuslearn.storage import StorageProvider, create_storage_provider

load_dotenv()

DEFAULT_TEXT_MODEL = "google/gemini-2.5-flash"
DEFAULT_TTS_MODEL = "google/gemini-2.5-flash-preview-tts"


def _env_str(*names: str, default: str | None = None) -> str | None:
    """Return the first non-empty variable among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name) or default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    def __init__(self) -> None:
        # Process
        self.log_level = (_env_str("LOG_LEVEL") or "INFO").upper()
        self.log_file = _env_str("LOG_FILE")
        self.log_dir = _env_str("LOG_DIR") or "logs"
        self.port = _env_int("PORT", 8000)
        self.max_workers = max(1, _env_int("MAX_WORKERS", 2))
        self.cors_origins = _env_list("CORS_ORIGINS", "http://localhost:3000")

        # Redis holds job documents and the job queue
        self.redis_host = _env_str("REDIS_HOST", default="localhost")
        self.redis_port = _env_int("REDIS_PORT", 6379)
        self.redis_db = _env_int("REDIS_DB", 0)
        self.redis_password = _env_str("REDIS_PASSWORD")

        # Providers
        self.google_gemini_api_key = _env_str("GOOGLE_GEMINI_API_KEY", "GEMINI_API_KEY")
        self.google_gemini_endpoint = _env_str("GOOGLE_GEMINI_ENDPOINT")
        self.google_gemini_timeout = _env_float("GOOGLE_GEMINI_TIMEOUT", 60.0)
        self.google_gemini_retries = _env_int("GOOGLE_GEMINI_RETRIES", 3)
        self.google_gemini_backoff = _env_float("GOOGLE_GEMINI_BACKOFF", 0.5)
        self.openai_api_key = _env_str("OPENAI_API_KEY")
        self.openai_base_url = _env_str("OPENAI_BASE_URL", "OPENAI_API_BASE")
        self.openai_timeout = _env_float("OPENAI_TIMEOUT", 60.0)
        self.openai_retries = _env_int("OPENAI_RETRIES", 3)
        self.openai_backoff = _env_float("OPENAI_BACKOFF", 0.5)

        # Models and voices
        self.script_generate_model = (
            _env_str("SCRIPT_GENERATION_MODEL") or DEFAULT_TEXT_MODEL
        )
        self.flow_model = _env_str("FLOW_MODEL") or DEFAULT_TEXT_MODEL
        self.chat_model = _env_str("CHAT_MODEL") or DEFAULT_TEXT_MODEL
        self.tts_model = _env_str("TTS_MODEL") or DEFAULT_TTS_MODEL
        self.podcast_speaker_1_voice = (
            _env_str("PODCAST_SPEAKER_1_VOICE") or "Algenib"
        )
        self.podcast_speaker_2_voice = (
            _env_str("PODCAST_SPEAKER_2_VOICE") or "Achernar"
        )

        # Upload and prompt limits
        self.max_pdf_bytes = _env_int("MAX_PDF_BYTES", 20 * 1024 * 1024)
        self.pdf_text_limit = _env_int("PDF_TEXT_LIMIT", 30000)

        self.auth_jwt_secret = _env_str("AUTH_JWT_SECRET")

        self.storage_provider = (_env_str("STORAGE_PROVIDER") or "local").lower()
        output_dir = _env_str("OUTPUT_DIR")
        self.output_dir = (
            Path(output_dir).resolve()
            if output_dir
            else Path(__file__).resolve().parents[2] / "output"
        )

    def ensure_directories_exist(self) -> None:
        if self.storage_provider == "local":
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def storage_settings(self) -> dict[str, Any]:
        """Keyword arguments for the configured storage provider."""
        if self.storage_provider == "local":
            return {"base_path": str(self.output_dir), "base_url": "/"}
        if self.storage_provider == "s3":
            return {
                "bucket_name": _env_str("AWS_S3_BUCKET_NAME", default=""),
                "region_name": _env_str("AWS_REGION", default="us-east-1"),
                "aws_access_key_id": _env_str("AWS_ACCESS_KEY_ID"),
                "aws_secret_access_key": _env_str("AWS_SECRET_ACCESS_KEY"),
                "endpoint_url": _env_str("AWS_S3_ENDPOINT_URL"),
            }
        raise ValueError(f"Unsupported storage provider: {self.storage_provider}")


config = Config()
_storage_provider_instance: StorageProvider | None = None


def get_storage_provider() -> StorageProvider:
    """Return the process-wide storage provider, creating it on first use."""
    global _storage_provider_instance
    if _storage_provider_instance is None:
        _storage_provider_instance = create_storage_provider(
            config.storage_provider, **config.storage_settings()
        )
    return _storage_provider_instance


config.ensure_directories_exist()
