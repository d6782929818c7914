"""Probe CLI configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class ProbeSettings(BaseSettings):
    """Probe settings loaded from PROBE_* environment variables."""

    BASE_URL: str = "http://localhost:4000"
    USERNAME: str = ""
    PASSWORD: str = ""
    # Only needed for `decode --verify`
    JWT_SECRET: str = ""
    TIMEOUT: float = 10.0
    # Total attempts per request; only transport errors are retried
    RETRIES: int = 3
    RETRY_DELAY: float = 1.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.USERNAME and self.PASSWORD)

    class Config:
        """Pydantic config."""

        env_prefix = "PROBE_"
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_probe_settings() -> ProbeSettings:
    return ProbeSettings()
