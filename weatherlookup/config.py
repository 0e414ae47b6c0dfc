"""Application configuration management using Pydantic's BaseSettings."""

from pydantic_settings import BaseSettings
from typing import Literal, Optional


class Settings(BaseSettings):
    """Defines all configuration settings for the service, loaded from .env file."""

    # API Keys (only the relay and direct mode use it)
    openweather_api_key: Optional[str] = None

    # App settings
    debug: bool = True
    log_level: str = "INFO"

    # OpenWeather settings
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    icon_base_url: str = "https://openweathermap.org/img/wn"

    # Addressing mode for fetchers running outside this service. Direct mode
    # exposes the key to whoever runs the client.
    use_proxy: bool = True
    relay_url: str = "http://localhost:8000/weather"

    # IP geolocation fallback
    ip_geolocation_url: str = "https://ipapi.co/json/"
    ip_geolocation_address_url: str = "https://ipapi.co/{ip}/json/"

    # Upper bound for every outbound HTTP call
    request_timeout_seconds: float = 10.0

    default_units: Literal["metric", "imperial"] = "metric"

    # Session housekeeping
    session_timeout_minutes: int = 30
    session_idle_timeout_minutes: int = 15

    class Config:
        """Pydantic model configuration."""

        env_file = ".env"


settings = Settings()
