from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    SUPFIT_DB_URL: str = "sqlite+aiosqlite:///./supfit.db"

    # --- Minimal admin auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Location resolution ---
    LOCATION_CACHE_TTL_DAYS: int = 30
    LOCATION_TIMEOUT_S: float = 10.0  # per device/geocoder attempt

    # Google Geocoding API; no key => address step is skipped
    GEOCODING_API_KEY: str | None = None
    GEOCODING_BASE_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"
    GEOCODING_DEFAULT_COUNTRY: str = "India"

    # --- Outbound HTTP resilience (geocoder) ---
    HTTP_TIMEOUT_S: float = 20.0
    HTTP_MAX_RETRIES: int = 2
    HTTP_BACKOFF_BASE_S: float = 0.5
    HTTP_RATE_LIMIT_RPS: float = 5.0
    HTTP_CIRCUIT_FAIL_THRESHOLD: int = 5
    HTTP_CIRCUIT_RESET_S: float = 60.0

    # --- Search defaults ---
    DEFAULT_RADIUS_KM: float = 5.0
    DEFAULT_RESULT_LIMIT: int = 10
    MAX_RESULT_LIMIT: int = 100
    MATCH_SNAPSHOT_LOG_ENABLED: bool = True

    # --- Audit ---
    AUDIT_ENABLED: bool = True

    # --- Scheduler tuning ---
    SCHED_LOCATION_PURGE_INTERVAL_MINUTES: int = 1440  # daily


settings = Settings()
