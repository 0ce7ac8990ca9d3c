from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LABOUR_LINK_BASE_URL: str = "https://api.labourlink.local:8081/api"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    SESSION_DATA_DIR: str = "./data/session"
    SESSION_NAMESPACE: str = "ProServiceHub.session"

    DEBOUNCE_SECONDS: float = 0.3
    LOCATION_NOISE_THRESHOLD_DEGREES: float = 0.0005
    REGION_CHANGE_EPSILON_DEGREES: float = 0.0001

    SUGGESTION_MIN_CHARS: int = 3
    SUGGESTION_LIMIT: int = 10
    SEARCH_PAGE_SIZE: int = 20

    DEFAULT_CENTER_LATITUDE: float = -33.9249
    DEFAULT_CENTER_LONGITUDE: float = 18.4241
    DEFAULT_RADIUS_KM: int = 25
    DEFAULT_MAP_SPAN_DEGREES: float = 0.35


settings = Settings()
