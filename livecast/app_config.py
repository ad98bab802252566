from pydantic import BaseModel

from livecast.shared.config import config


def _int_config(key: str, default: int) -> int:
    return int((config.get(key) or "").strip() or default)


class AppEnvironConfig(BaseModel):
    # Public demo switch: when enabled, provider calls use stubs and avoid network calls.
    DEMO_MODE: bool = config.get("DEMO_MODE", "true").strip().lower() == "true"  # type: ignore

    DEBUG: bool = config.get("DEBUG", "false").strip().lower() == "true"  # type: ignore
    API_BASE_URL: str = config.get("API_BASE_URL", "http://localhost:8000").strip()  # type: ignore

    # Live video provider (Livepeer-style REST API)
    PROVIDER_API_BASE_URL: str = config.get(
        "PROVIDER_API_BASE_URL", "https://livepeer.studio/api"
    ).strip()  # type: ignore
    PROVIDER_API_KEY: str | None = (config.get("PROVIDER_API_KEY") or "").strip() or None
    PROVIDER_RTMP_BASE_URL: str = config.get(
        "PROVIDER_RTMP_BASE_URL", "rtmp://rtmp.livepeer.com/live"
    ).strip()  # type: ignore
    PROVIDER_PLAYBACK_BASE_URL: str = config.get(
        "PROVIDER_PLAYBACK_BASE_URL", "https://livepeercdn.studio/hls"
    ).strip()  # type: ignore
    PROVIDER_REQUEST_TIMEOUT_SECONDS: int = _int_config("PROVIDER_REQUEST_TIMEOUT_SECONDS", 30)
    PROVIDER_WEBHOOK_SECRET: str | None = (
        config.get("PROVIDER_WEBHOOK_SECRET") or ""
    ).strip() or None

    # Recording policy
    RECORDING_MIN_DURATION_SECONDS: int = _int_config("RECORDING_MIN_DURATION_SECONDS", 60)
    RECORDING_MAX_DURATION_SECONDS: int = _int_config("RECORDING_MAX_DURATION_SECONDS", 43200)

    # Optimistic concurrency: re-read and re-evaluate this many times on a version conflict
    WEBHOOK_MAX_CONFLICT_RETRIES: int = _int_config("WEBHOOK_MAX_CONFLICT_RETRIES", 1)

    # Transient processing failures: the provider does not redeliver after a 200, so replay in-process
    WEBHOOK_MAX_PROCESSING_ATTEMPTS: int = _int_config("WEBHOOK_MAX_PROCESSING_ATTEMPTS", 3)
    WEBHOOK_RETRY_BASE_DELAY_MS: int = _int_config("WEBHOOK_RETRY_BASE_DELAY_MS", 100)

    # Background cleanup of expired boosts; 0 disables the task
    BOOST_EXPIRY_INTERVAL_SECONDS: int = _int_config("BOOST_EXPIRY_INTERVAL_SECONDS", 300)

    # Feed pagination
    FEED_DEFAULT_PAGE_SIZE: int = _int_config("FEED_DEFAULT_PAGE_SIZE", 20)
    FEED_MAX_PAGE_SIZE: int = _int_config("FEED_MAX_PAGE_SIZE", 100)

    # Record store backend: "mongo" or "memory"
    RECORD_STORE_BACKEND: str = config.get("RECORD_STORE_BACKEND", "mongo").strip().lower()  # type: ignore


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
