from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MIRRORS = ["https://web-production-9dfcb.up.railway.app"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DHRUVA_", env_file=".env", extra="ignore")

    APP_NAME: str = Field(default="dhruva-grievance-service")
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # Backend discovery, highest priority first
    API_URL: str | None = Field(default=None)
    RAILWAY_URL: str | None = Field(default=None)
    FALLBACK_URLS: list[str] = Field(default_factory=lambda: list(DEFAULT_MIRRORS))
    LOCAL_URL: str = Field(default="http://localhost:8000")
    VERIFY_SSL: bool = Field(default=True)

    HEALTH_CACHED_TIMEOUT: float = Field(default=3.0)
    HEALTH_PROBE_TIMEOUT: float = Field(default=5.0)
    ANALYZE_TIMEOUT: float = Field(default=15.0)
    HEALTH_RECHECK_SECONDS: float = Field(default=30.0)

    PACING_SCALE: float = Field(default=1.0, ge=0.0)
    CASE_ID_PREFIX: str = Field(default="PGRS")
    CLARIFICATION_THRESHOLD: float = Field(default=0.70, ge=0.0, le=1.0)
    DEFAULT_LOCATION: str = Field(default="Guntur")

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() in {"prod", "production"}

    def candidate_urls(self) -> list[str]:
        """Backend base URLs in probe order.

        Explicit overrides come first. Outside production the local
        development backend is tried before the public mirrors; in
        production it is never tried.
        """
        ordered: list[str] = []
        for url in (self.API_URL, self.RAILWAY_URL):
            if url:
                ordered.append(url)
        if not self.is_production:
            ordered.append(self.LOCAL_URL)
        ordered.extend(self.FALLBACK_URLS)

        seen: set[str] = set()
        unique: list[str] = []
        for url in ordered:
            normalized = url.strip().rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                unique.append(normalized)
        return unique


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
