"""
Application configuration with Docker secrets support.

Secrets are read using the _read_secret() pattern:
  1. Direct env var (e.g., OPENROUTER_API_KEY)
  2. File-based env var (e.g., OPENROUTER_API_KEY_FILE → reads file path)
  3. Raises ValueError if neither is set
"""

import os
import logging

logger = logging.getLogger(__name__)

# Values shipped in example .env files that should count as "not configured"
_PLACEHOLDER_SECRETS = {"your_github_token_here", "your_openrouter_api_key_here"}


def _read_secret(env_var: str, file_env_var: str | None = None) -> str:
    """Read a secret from env var or Docker secrets file.

    Args:
        env_var: Direct environment variable name (e.g., OPENROUTER_API_KEY)
        file_env_var: File path env var name (e.g., OPENROUTER_API_KEY_FILE).
                      If None, defaults to env_var + '_FILE'.

    Returns:
        The secret value.

    Raises:
        ValueError: If neither source provides a value.
    """
    if file_env_var is None:
        file_env_var = f"{env_var}_FILE"

    # Priority 1: Direct env var
    value = os.environ.get(env_var, "").strip()
    if value and value not in _PLACEHOLDER_SECRETS:
        return value

    # Priority 2: File-based (Docker secrets pattern)
    file_path = os.environ.get(file_env_var)
    if file_path:
        try:
            with open(file_path, "r") as f:
                value = f.read().strip()
            if value and value not in _PLACEHOLDER_SECRETS:
                return value
        except FileNotFoundError:
            logger.error(f"Secret file not found: {file_path} (from {file_env_var})")
        except PermissionError:
            logger.error(f"Permission denied reading: {file_path} (from {file_env_var})")

    raise ValueError(
        f"Secret not configured. Set {env_var} env var or {file_env_var} pointing to a file."
    )


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application settings loaded from environment and Docker secrets."""

    def __init__(self):
        self.app_env = os.environ.get("APP_ENV", "development")

        # Storage. No DATABASE_URL selects the in-memory document store.
        self.database_url = os.environ.get("DATABASE_URL", "").strip() or None
        self.upload_dir = os.environ.get("UPLOAD_DIR", "./uploads")
        self.temp_dir = os.environ.get("TEMP_DIR", "./temp")
        self.export_retention_hours = float(os.environ.get("EXPORT_RETENTION_HOURS", "24"))

        # Secrets (loaded lazily on first access via properties)
        self._openrouter_api_key: str | None = None
        self._github_token: str | None = None

        # OpenRouter
        self.openrouter_base_url = os.environ.get(
            "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"
        ).rstrip("/")
        self.default_model = os.environ.get("OPENROUTER_DEFAULT_MODEL", "openai/gpt-3.5-turbo")
        self.max_tokens = int(os.environ.get("OPENROUTER_MAX_TOKENS", "800"))
        self.generation_timeout = float(os.environ.get("OPENROUTER_TIMEOUT", "30"))

        # GitHub
        self.github_api_url = os.environ.get("GITHUB_API_URL", "https://api.github.com").rstrip("/")

        # HTTP surface
        self.frontend_url = os.environ.get("FRONTEND_URL", "")
        self.cors_origins = self._build_cors_origins()
        self.max_body_bytes = int(os.environ.get("MAX_BODY_BYTES", str(50 * 1024 * 1024)))

    def _build_cors_origins(self) -> list[str]:
        """Configured origins plus the frontend URL, without duplicates."""
        origins = _split_csv(
            os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
        )
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def openrouter_api_key(self) -> str:
        if self._openrouter_api_key is None:
            self._openrouter_api_key = _read_secret("OPENROUTER_API_KEY")
        return self._openrouter_api_key

    @property
    def has_openrouter_key(self) -> bool:
        try:
            self.openrouter_api_key
        except ValueError:
            return False
        return True

    @property
    def github_token(self) -> str | None:
        """Optional token; anonymous GitHub access works at a lower rate limit."""
        if self._github_token is None:
            try:
                self._github_token = _read_secret("GITHUB_TOKEN")
            except ValueError:
                return None
        return self._github_token


settings = Settings()
