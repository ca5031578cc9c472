from pydantic import BaseModel

from crosscast.shared.config import config


class AppEnvironConfig(BaseModel):
    DEBUG: bool = config.get_bool("DEBUG", False)

    # Public demo switch: when enabled, external integrations use stubs and avoid network calls.
    DEMO_MODE: bool = config.get_bool("DEMO_MODE", True)

    # History configuration
    HISTORY_LIMIT: int = config.get_int("HISTORY_LIMIT", 5)
    # Whether clear() keeps pinned entries; by default everything is cleared
    HISTORY_CLEAR_KEEPS_PINNED: bool = config.get_bool("HISTORY_CLEAR_KEEPS_PINNED", False)

    # Live-edge sync configuration
    SYNC_INTERVAL_SECONDS: float = config.get_float("SYNC_INTERVAL_SECONDS", 60.0)
    SYNC_SEEK_SETTLE_SECONDS: float = config.get_float("SYNC_SEEK_SETTLE_SECONDS", 0.5)
    SYNC_CATCHUP_SECONDS: float = config.get_float("SYNC_CATCHUP_SECONDS", 5.0)
    SYNC_STATUS_GRACE_SECONDS: float = config.get_float("SYNC_STATUS_GRACE_SECONDS", 3.0)
    SYNC_CATCHUP_RATE: float = config.get_float("SYNC_CATCHUP_RATE", 2.0)

    # Host page readiness polling
    READY_POLL_INTERVAL_SECONDS: float = config.get_float("READY_POLL_INTERVAL_SECONDS", 1.5)
    READY_MAX_ATTEMPTS: int = config.get_int("READY_MAX_ATTEMPTS", 15)

    # Search matching
    SEARCH_MAX_DISTANCE: int = config.get_int("SEARCH_MAX_DISTANCE", 3)

    # Remote platform HTTP access
    YOUTUBE_BASE_URL: str = (config.get("YOUTUBE_BASE_URL") or "https://www.youtube.com").strip()
    HTTP_TIMEOUT_SECONDS: float = config.get_float("HTTP_TIMEOUT_SECONDS", 10.0)

    # Persistence
    REDIS_URL: str = config.get_redis_url().strip()
    REDIS_KEY_PREFIX: str = (config.get("REDIS_KEY_PREFIX") or "crosscast").strip()


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
