from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    api_base: str = "http://localhost:8080/services/apexrest/webtocase/v1"
    request_timeout_seconds: int = 120

    chunk_size_bytes: int = 750_000

    image_compressor: str = "pillow"
    image_target_size_mb: float = 0.7
    image_max_dimension: int = 2560
    image_initial_quality: float = 0.85

    poll_intervals_seconds: list[float] = [2, 3, 5]
    poll_max_wait_seconds: float = 60

    captcha_provider: str = "static"
    captcha_token: str = ""
    captcha_action: str = "submit"
    captcha_timeout_seconds: int = 120
