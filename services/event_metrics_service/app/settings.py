from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class EventMetricsSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENT_METRICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = "event-metrics-service"
    environment: str = "local"
    log_level: str = "INFO"

    # Counter naming and label fallbacks
    namespace: str = "keycloak"
    default_identity_provider: str = "keycloak"
    unknown_client: str = "unknown_client"
    unknown_error: str = "unknown_error"
    runtime_metrics_enabled: bool = True

    otel_endpoint: str | None = None

    def safe_dict(self) -> dict[str, object]:
        return self.model_dump()


@lru_cache
def event_metrics_settings() -> EventMetricsSettings:
    return EventMetricsSettings()
