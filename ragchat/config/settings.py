"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, highest priority first:

  1. Environment variables, e.g. ``OPENAI_API_KEY=sk-abc123``
  2. A ``.env`` file in the working directory (local development)

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``; defaults apply
when neither source sets a value.  Credentials are never written back to
disk by ragchat; storing them is the operator's concern.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ragchat.utils.errors import ConfigurationError


class Settings(BaseSettings):
    """ragchat settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === OpenAI ===
    # Empty string = "not configured"; require_credentials() reports it.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, local gateway, ...)
    openai_embedding_model: str = "text-embedding-ada-002"
    openai_chat_model: str = "gpt-4o"

    # === Vector store ===
    sqlite_db_path: str = "data/ragchat.db"

    # === Retrieval ===
    match_threshold: float = Field(default=0.7, ge=-1.0, le=1.0)
    match_count: int = Field(default=5, ge=1)
    context_lookup_concurrency: int = Field(default=5, ge=1)

    # === Generation ===
    max_response_tokens: int = Field(default=1000, ge=1)

    # === Ingestion ===
    # Off: a document whose embed/insert step fails stays in the store with
    # zero sections (list + delete is the recovery path).  On: the pipeline
    # deletes the document row before re-raising.
    ingest_rollback_on_failure: bool = False

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def missing_credentials(self) -> list[str]:
        """Return env var names of required credentials that are empty."""
        missing: list[str] = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.sqlite_db_path:
            missing.append("SQLITE_DB_PATH")
        return missing

    def require_credentials(self) -> None:
        """Raise :class:`ConfigurationError` if any required setting is empty."""
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(
                message=(
                    "Missing required configuration: "
                    + ", ".join(missing)
                    + ". Set them in the environment or a .env file."
                )
            )
