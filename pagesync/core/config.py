from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagesync.client.pages import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from pagesync.sync.scanner import DEFAULT_HASH_WORKERS


class Settings(BaseSettings):
    """Run settings loaded from PAGESYNC_* environment variables.

    CI passes the store credentials through the environment; the CLI
    overrides individual fields from its flags. The API token is never
    logged.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGESYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Pages store credentials and target
    api_token: str = ""
    account_id: str = ""
    project_name: str = ""

    # Local build output to upload
    directory: str = "dist"

    # HTTP client
    api_base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout_seconds: float = DEFAULT_TIMEOUT

    # Thread pool size for fingerprinting during the scan
    hash_workers: int = DEFAULT_HASH_WORKERS

    # Console logs when True, JSON lines otherwise
    debug: bool = False

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("hash_workers")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        return max(v, 1)

    def missing_credentials(self) -> list[str]:
        """Names of the required fields that are still empty."""
        required = ("api_token", "account_id", "project_name")
        return [name for name in required if not getattr(self, name)]


def get_settings() -> Settings:
    return Settings()
