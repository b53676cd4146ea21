"""Service configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the windrelay service."""
    model_config = SettingsConfigDict(env_prefix="WINDRELAY_", extra="ignore")

    log_level: str = "INFO"
    user_agent: str = "Mozilla/5.0 (compatible; WeatherStation/1.0)"

    # cache
    cache_redis_url: str | None = None
    cache_key_prefix: str = "windrelay:"
    cache_ttl_seconds: int = 300
    cache_bucket_seconds: int = 300
    stale_ttl_seconds: int = 3600
    serve_stale: bool = True

    # retry / transport
    retry_max_attempts: int = 3
    retry_initial_delay_seconds: float = 2.0
    retry_backoff_multiplier: float = 1.5
    request_timeout_seconds: float = 15.0

    # navis session + historical reconciliation
    session_propagation_delay_seconds: float = 0.1
    historical_window_seconds: int = 60
    historical_max_samples: int = 30
    temperature_outlier_threshold_c: float = 8.0

    # scheduled pre-warm
    scheduler_enabled: bool = True
    collect_interval_seconds: int = 300

    # upstream endpoints
    brambles_url: str = (
        "https://www.southamptonvts.co.uk/BackgroundSite/Ajax/LoadXmlFileWithTransform"
        "?xmlFilePath=D%3A%5Cftp%5Csouthampton%5CBramble.xml"
        "&xslFilePath=D%3A%5Cwwwroot%5CCMS_Southampton%5Ccontent%5Cfiles%5Cassets%5CSotonSnapshotmetBramble.xsl&w=51"
    )
    brambles_referer: str = "https://www.southamptonvts.co.uk/Live_Information/Tides_and_Weather/"
    navis_base_url: str = "https://www.navis-livedata.com"
    navis_viewer_id: str = "36371"
    navis_imei: str = "083af23b9b89_15_1"
    weatherfile_base_url: str = "https://weatherfile.com/V03/loc"
    weatherfile_location: str = "GBR00001"
    weatherfile_token: str = "PUBLIC"
    pioupiou_base_url: str = "http://api.pioupiou.fr/v1/live-with-meta"

    @field_validator("navis_base_url", "weatherfile_base_url", "pioupiou_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
