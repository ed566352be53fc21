from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeepgramConfig(BaseSettings):
    """Deepgram speech-to-text configuration."""

    api_key: SecretStr | None = None
    base_url: str = "https://api.deepgram.com/v1"
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="DEEPGRAM_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class GeminiConfig(BaseSettings):
    """Google Gemini text generation configuration."""

    api_key: SecretStr | None = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.0-flash"
    timeout_seconds: float = Field(default=15.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class PollyConfig(BaseSettings):
    """Amazon Polly configuration."""

    region: str = "us-east-1"
    voice_id: str = "Joanna"
    engine: str = "neural"
    language_code: str = "en-US"
    access_key_id: str | None = None
    secret_access_key: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_prefix="POLLY_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class ResultStoreConfig(BaseSettings):
    """Retention of completed analyses held in memory."""

    retention_seconds: float = Field(default=3600.0, gt=0)
    sweep_interval_seconds: float = Field(default=60.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="RESULT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "SpeechCoach"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/analysis_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # 50 MiB upload cap
    max_upload_bytes: int = Field(default=50 * 1024 * 1024, ge=1)

    # Deepgram
    deepgram: DeepgramConfig = Field(default_factory=DeepgramConfig)

    # Gemini
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)

    # Polly
    polly: PollyConfig = Field(default_factory=PollyConfig)

    # Result retention
    results: ResultStoreConfig = Field(default_factory=ResultStoreConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    def missing_credentials(self) -> list[str]:
        """Return the names of required provider secrets that are not set."""

        missing: list[str] = []
        if not _has_secret(self.deepgram.api_key):
            missing.append("DEEPGRAM_API_KEY")
        if not _has_secret(self.gemini.api_key):
            missing.append("GEMINI_API_KEY")
        return missing


def _has_secret(value: SecretStr | None) -> bool:
    return value is not None and bool(value.get_secret_value().strip())


# Global settings instance
settings = Settings()
