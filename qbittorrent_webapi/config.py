import os
import dotenv


dotenv.load_dotenv()


# Defaults
VERBOSE = False
LOG_PATH = ""
LOG_LEVEL = "INFO"
LOG_ROTATION = "1 week"
LOG_RETENTION = "1 month"

QBITTORRENT_URL = "http://localhost:8080"
QBITTORRENT_USERNAME = ""
QBITTORRENT_PASSWORD = ""
QBITTORRENT_TIMEOUT = 10.0
QBITTORRENT_VERIFY_SSL = True

# Return zero values instead of raising when a response body can't be decoded
IGNORE_DECODE_ERRORS = False


def _as_bool(value) -> bool:
    return str(value).lower() in ("1", "true", "yes", "on")


class Config:
    VERBOSE = _as_bool(os.getenv("VERBOSE", VERBOSE))

    LOG_PATH = os.getenv("LOG_PATH", LOG_PATH)
    LOG_LEVEL = os.getenv("LOG_LEVEL", LOG_LEVEL)
    LOG_ROTATION = os.getenv("LOG_ROTATION", LOG_ROTATION)
    LOG_RETENTION = os.getenv("LOG_RETENTION", LOG_RETENTION)

    # qBittorrent Web UI connection
    QBITTORRENT_URL = os.getenv("QBITTORRENT_URL", QBITTORRENT_URL)
    QBITTORRENT_USERNAME = os.getenv("QBITTORRENT_USERNAME", QBITTORRENT_USERNAME)
    QBITTORRENT_PASSWORD = os.getenv("QBITTORRENT_PASSWORD", QBITTORRENT_PASSWORD)
    QBITTORRENT_TIMEOUT = float(os.getenv("QBITTORRENT_TIMEOUT", QBITTORRENT_TIMEOUT))
    QBITTORRENT_VERIFY_SSL = _as_bool(os.getenv("QBITTORRENT_VERIFY_SSL", QBITTORRENT_VERIFY_SSL))

    IGNORE_DECODE_ERRORS = _as_bool(os.getenv("IGNORE_DECODE_ERRORS", IGNORE_DECODE_ERRORS))
