"""
qbittorrent-webapi - Drive a qBittorrent instance through its Web API.

Provides an authenticated session, one method per Web API endpoint and
typed records for the endpoints with a stable schema.
"""

from .client import QBittorrentClient
from .config import Config
from .exceptions import (
    AuthenticationError,
    AuthenticationRejectedError,
    MissingSessionCookieError,
    QBittorrentError,
    RequestBuildError,
    ResponseDecodeError,
    TransportError,
)
from .models import BasicTorrent, JSONMap, TorrentFile, TorrentProperties, Tracker, WebSeed
from .session import Session, connect
from .targets import ALL, Target, serialize_list

__version__ = "0.1.0"
__all__ = [
    "QBittorrentClient",
    "Config",
    "Session",
    "connect",
    "ALL",
    "Target",
    "serialize_list",
    "BasicTorrent",
    "TorrentProperties",
    "Tracker",
    "WebSeed",
    "TorrentFile",
    "JSONMap",
    "QBittorrentError",
    "RequestBuildError",
    "TransportError",
    "AuthenticationError",
    "AuthenticationRejectedError",
    "MissingSessionCookieError",
    "ResponseDecodeError",
]
