"""
Python client for the qBittorrent Web API (v2).

Provides programmatic access to:
- Authentication (cookie-based session)
- Application info and preferences
- Logs, sync data and global transfer limits
- Torrent listing, properties, trackers, web seeds and files
- Bulk torrent operations (pause, resume, delete, recheck, limits, ...)
- Categories and tags

Bulk commands take a single ``targets`` argument: one info hash, a list of
hashes, or ALL. All three forms hit the same endpoint with the same verb;
only the ``hashes`` parameter differs.

Mutating commands return the raw requests.Response so callers can inspect
the status themselves. Reads return text, a JSONMap, or pydantic records.

Usage:
    from qbittorrent_webapi import ALL, QBittorrentClient

    client = QBittorrentClient("http://localhost:8080")
    client.login("admin", "adminadmin")
    torrents = client.get_torrent_list({"filter": "downloading"})
    client.pause([t.hash for t in torrents])
    client.resume(ALL)
"""

import json
import os
from contextlib import ExitStack
from typing import Dict, Iterable, List, Optional, Union

import requests

from .config import Config
from .exceptions import RequestBuildError
from .logger import logger
from .models import (
    BasicTorrent,
    JSONMap,
    TorrentFile,
    TorrentProperties,
    Tracker,
    WebSeed,
    decode_list,
    decode_map,
    decode_model,
    decode_model_list,
)
from .session import Session
from .targets import Target, serialize_list


Targets = Union[Target, str, Iterable[str]]


def _join(values: Union[str, Iterable[str]], separator: str) -> str:
    if isinstance(values, str):
        return values
    return separator.join(str(value) for value in values)


class QBittorrentClient:
    def __init__(
        self,
        base_url: str = Config.QBITTORRENT_URL,
        session: Optional[Session] = None,
        timeout: Optional[float] = Config.QBITTORRENT_TIMEOUT,
        verify: bool = Config.QBITTORRENT_VERIFY_SSL,
        ignore_decode_errors: bool = Config.IGNORE_DECODE_ERRORS,
    ):
        self.session = session if session is not None else Session(base_url, timeout=timeout, verify=verify)
        self.ignore_decode_errors = ignore_decode_errors

    @classmethod
    def from_config(cls) -> "QBittorrentClient":
        """Build a client from Config, logging in when credentials are configured."""
        client = cls()
        if Config.QBITTORRENT_USERNAME:
            client.login(Config.QBITTORRENT_USERNAME, Config.QBITTORRENT_PASSWORD)
        return client

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.session.close()

    @property
    def url(self) -> str:
        return self.session.url

    @property
    def authenticated(self) -> bool:
        return self.session.authenticated

    def _targets(self, targets: Targets, **fields: str) -> Dict[str, str]:
        params = Target.coerce(targets).to_params("hashes")
        params.update(fields)
        return params

    def _get_text(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> str:
        return self.session.get(endpoint, params).text

    # -------------------------------------------------------------------------
    # Auth Methods
    # -------------------------------------------------------------------------

    def login(self, username: str, password: str) -> bool:
        """Log in; every later request carries the session cookie."""
        return self.session.login(username, password)

    def logout(self, clear_session: bool = False) -> requests.Response:
        """Log out on the server. Pass clear_session=True to also drop the local cookie."""
        return self.session.logout(clear_session=clear_session)

    # -------------------------------------------------------------------------
    # Application Methods
    # -------------------------------------------------------------------------

    def get_application_version(self) -> str:
        """Get the qBittorrent version, e.g. "v4.6.2"."""
        return self._get_text("app/version")

    def get_version(self) -> str:
        """Get the Web API version, e.g. "2.9.3"."""
        return self._get_text("app/webapiVersion")

    def get_build_info(self) -> str:
        return self._get_text("app/buildInfo")

    def shutdown(self) -> requests.Response:
        return self.session.post("app/shutdown")

    def get_preferences(self) -> JSONMap:
        """
        Get the application preferences.

        The set of keys depends on the server version, so the result is a
        JSONMap rather than a fixed record.
        """
        response = self.session.get("app/preferences")
        return decode_map(response.text, self.ignore_decode_errors)

    def set_preferences(self, token: str, value: str) -> requests.Response:
        """
        Set a single preference.

        Args:
            token: Name of the preference
            value: Setting value, passed through as a string
        """
        return self.session.post("app/setPreferences", {"token": token, "value": value})

    def set_preferences_json(self, preferences: Dict[str, object]) -> requests.Response:
        """Set several preferences at once through the ``json`` form field."""
        return self.session.post("app/setPreferences", {"json": json.dumps(preferences)})

    def get_default_save_path(self) -> str:
        return self._get_text("app/defaultSavePath")

    # -------------------------------------------------------------------------
    # Log Methods
    # -------------------------------------------------------------------------

    def get_main_log(
        self,
        normal: str = "true",
        info: str = "true",
        warning: str = "true",
        critical: str = "true",
        last_known_id: str = "-1",
    ) -> str:
        """Get the main log as raw JSON text, filtered by message type."""
        return self._get_text("log/main", {
            "normal": normal,
            "info": info,
            "warning": warning,
            "critical": critical,
            "last_known_id": last_known_id,
        })

    def get_peer_log(self, last_known_id: str = "-1") -> str:
        return self._get_text("log/peers", {"last_known_id": last_known_id})

    # -------------------------------------------------------------------------
    # Sync Methods
    # -------------------------------------------------------------------------

    def get_main_data(self, rid: str = "0") -> str:
        """
        Get the main data as raw JSON text.

        Args:
            rid: Response ID. 0 returns a full update, a previous rid returns
                only the changes since then
        """
        return self._get_text("sync/maindata", {"rid": rid})

    def get_torrent_peers(self, info_hash: str, rid: str = "0") -> str:
        return self._get_text("sync/torrentPeers", {"hash": info_hash, "rid": rid})

    # -------------------------------------------------------------------------
    # Transfer Methods
    # -------------------------------------------------------------------------

    def get_transfer_info(self) -> str:
        return self._get_text("transfer/info")

    def get_speed_limits_mode(self) -> str:
        """Return "1" when alternative speed limits are enabled, "0" otherwise."""
        return self._get_text("transfer/speedLimitsMode")

    def toggle_speed_limits_mode(self) -> requests.Response:
        return self.session.post("transfer/toggleSpeedLimitsMode")

    def get_download_limit(self) -> str:
        """Get the global download limit in bytes/second (0 means unlimited)."""
        return self._get_text("transfer/downloadLimit")

    def set_download_limit(self, limit: str) -> requests.Response:
        return self.session.post("transfer/setDownloadLimit", {"limit": limit})

    def get_upload_limit(self) -> str:
        """Get the global upload limit in bytes/second (0 means unlimited)."""
        return self._get_text("transfer/uploadLimit")

    def set_upload_limit(self, limit: str) -> requests.Response:
        return self.session.post("transfer/setUploadLimit", {"limit": limit})

    def ban_peers(self, peers: Iterable[str]) -> requests.Response:
        """
        Ban peers permanently.

        Args:
            peers: "host:port" strings
        """
        return self.session.post("transfer/banPeers", serialize_list("peers", peers))

    # -------------------------------------------------------------------------
    # Torrent Read Methods
    # -------------------------------------------------------------------------

    def get_torrent_list(self, filters: Optional[Dict[str, Union[str, Iterable[str]]]] = None) -> List[BasicTorrent]:
        """
        List torrents, optionally filtered.

        Args:
            filters: Any of filter, category, tag, sort, reverse, limit,
                offset and hashes. hashes may be a list, it is pipe-joined.

        Returns:
            List of BasicTorrent; an empty list when nothing matches
        """
        params = {}
        for key, value in (filters or {}).items():
            if key == "hashes":
                params.update(Target.coerce(value).to_params("hashes"))
            else:
                params[key] = value
        response = self.session.get("torrents/info", params)
        return decode_model_list(BasicTorrent, response.text, self.ignore_decode_errors)

    def get_torrent(self, info_hash: str) -> TorrentProperties:
        """Get the generic properties of a torrent."""
        response = self.session.get("torrents/properties", {"hash": info_hash})
        return decode_model(TorrentProperties, response.text, self.ignore_decode_errors)

    def get_trackers(self, info_hash: str) -> List[Tracker]:
        response = self.session.get("torrents/trackers", {"hash": info_hash})
        return decode_model_list(Tracker, response.text, self.ignore_decode_errors)

    def get_webseeds(self, info_hash: str) -> List[WebSeed]:
        response = self.session.get("torrents/webseeds", {"hash": info_hash})
        return decode_model_list(WebSeed, response.text, self.ignore_decode_errors)

    def get_torrent_files(self, info_hash: str) -> List[TorrentFile]:
        response = self.session.get("torrents/files", {"hash": info_hash})
        return decode_model_list(TorrentFile, response.text, self.ignore_decode_errors)

    def get_torrent_piece_states(self, info_hash: str) -> List[int]:
        """
        Get the state of every piece.

        0 means not downloaded yet, 1 downloading, 2 already downloaded.
        """
        response = self.session.get("torrents/pieceStates", {"hash": info_hash})
        return decode_list(int, response.text, self.ignore_decode_errors)

    def get_torrent_piece_hashes(self, info_hash: str) -> List[str]:
        """Get the SHA-1 hash of every piece as hex strings."""
        response = self.session.get("torrents/pieceHashes", {"hash": info_hash})
        return decode_list(str, response.text, self.ignore_decode_errors)

    # -------------------------------------------------------------------------
    # Torrent State Methods
    # -------------------------------------------------------------------------

    def pause(self, targets: Targets) -> requests.Response:
        return self.session.get("torrents/pause", self._targets(targets))

    def resume(self, targets: Targets) -> requests.Response:
        return self.session.get("torrents/resume", self._targets(targets))

    def delete(self, targets: Targets, delete_files: str = "false") -> requests.Response:
        """
        Remove torrents from the client.

        Args:
            targets: Hash, list of hashes, or ALL
            delete_files: "true" to delete downloaded data as well
        """
        return self.session.get("torrents/delete", self._targets(targets, deleteFiles=str(delete_files).lower()))

    def recheck(self, targets: Targets) -> requests.Response:
        return self.session.get("torrents/recheck", self._targets(targets))

    def reannounce(self, targets: Targets) -> requests.Response:
        return self.session.get("torrents/reannounce", self._targets(targets))

    def add_torrent(
        self,
        urls: Optional[Union[str, Iterable[str]]] = None,
        torrent_files: Optional[Iterable[str]] = None,
        **options: str,
    ) -> requests.Response:
        """
        Add torrents from URLs/magnet links and/or local .torrent files.

        Args:
            urls: One URL or magnet link, or several
            torrent_files: Paths to .torrent files to upload
            **options: Extra form fields passed as is, e.g. savepath,
                category, tags, paused="true", skip_checking="true"

        Raises:
            RequestBuildError: Neither urls nor torrent_files were given
        """
        params = dict(options)
        if urls:
            params["urls"] = _join(urls, "\n")
        paths = list(torrent_files or [])
        if "urls" not in params and not paths:
            raise RequestBuildError("add_torrent needs at least one URL or torrent file")

        if not paths:
            return self.session.post("torrents/add", params)

        with ExitStack() as stack:
            files = [
                ("torrents", (os.path.basename(path), stack.enter_context(open(path, "rb")), "application/x-bittorrent"))
                for path in paths
            ]
            logger.debug(f"Uploading {len(files)} torrent file(s)")
            return self.session.post("torrents/add", params, files=files)

    def set_torrent_name(self, info_hash: str, name: str) -> requests.Response:
        return self.session.post("torrents/rename", {"hash": info_hash, "name": name})

    def set_torrent_location(self, targets: Targets, location: str) -> requests.Response:
        return self.session.post("torrents/setLocation", self._targets(targets, location=location))

    def set_automatic_torrent_management(self, targets: Targets, enable: str = "true") -> requests.Response:
        """Let torrents follow their category's save path."""
        return self.session.post("torrents/setAutoManagement", self._targets(targets, enable=enable))

    def toggle_sequential_download(self, targets: Targets) -> requests.Response:
        return self.session.post("torrents/toggleSequentialDownload", self._targets(targets))

    def toggle_first_last_piece_priority(self, targets: Targets) -> requests.Response:
        return self.session.post("torrents/toggleFirstLastPiecePrio", self._targets(targets))

    def set_force_start(self, targets: Targets, value: str) -> requests.Response:
        return self.session.post("torrents/setForceStart", self._targets(targets, value=value))

    def set_super_seeding(self, targets: Targets, value: str) -> requests.Response:
        return self.session.post("torrents/setSuperSeeding", self._targets(targets, value=value))

    # -------------------------------------------------------------------------
    # Torrent Priority Methods
    # -------------------------------------------------------------------------

    def increase_priority(self, targets: Targets) -> requests.Response:
        return self.session.post("torrents/increasePrio", self._targets(targets))

    def decrease_priority(self, targets: Targets) -> requests.Response:
        return self.session.post("torrents/decreasePrio", self._targets(targets))

    def top_priority(self, targets: Targets) -> requests.Response:
        return self.session.post("torrents/topPrio", self._targets(targets))

    def bottom_priority(self, targets: Targets) -> requests.Response:
        return self.session.post("torrents/bottomPrio", self._targets(targets))

    def set_file_priority(self, info_hash: str, ids: Iterable[Union[int, str]], priority: str) -> requests.Response:
        """
        Set the download priority of files within a torrent.

        Args:
            info_hash: Torrent hash
            ids: File indexes as reported by get_torrent_files
            priority: "0" do not download, "1" normal, "6" high, "7" maximal
        """
        params = {"hash": info_hash, "id": _join(ids, "|"), "priority": priority}
        return self.session.post("torrents/filePrio", params)

    # -------------------------------------------------------------------------
    # Torrent Limit Methods
    # -------------------------------------------------------------------------

    def get_torrent_download_limit(self, targets: Targets) -> str:
        """Get per-torrent download limits as raw JSON text keyed by hash."""
        return self.session.post("torrents/downloadLimit", self._targets(targets)).text

    def set_torrent_download_limit(self, targets: Targets, limit: str) -> requests.Response:
        return self.session.post("torrents/setDownloadLimit", self._targets(targets, limit=limit))

    def get_torrent_upload_limit(self, targets: Targets) -> str:
        """Get per-torrent upload limits as raw JSON text keyed by hash."""
        return self.session.post("torrents/uploadLimit", self._targets(targets)).text

    def set_torrent_upload_limit(self, targets: Targets, limit: str) -> requests.Response:
        return self.session.post("torrents/setUploadLimit", self._targets(targets, limit=limit))

    def set_torrent_share_limit(self, targets: Targets, ratio_limit: str, seeding_time_limit: str) -> requests.Response:
        """
        Set share limits.

        Args:
            targets: Hash, list of hashes, or ALL
            ratio_limit: Maximum ratio; "-2" uses the global limit, "-1" means none
            seeding_time_limit: Maximum seeding minutes; "-2" global, "-1" none
        """
        params = self._targets(targets, ratioLimit=ratio_limit, seedingTimeLimit=seeding_time_limit)
        return self.session.post("torrents/setShareLimits", params)

    # -------------------------------------------------------------------------
    # Tracker & Peer Methods
    # -------------------------------------------------------------------------

    def add_trackers(self, info_hash: str, urls: Union[str, Iterable[str]]) -> requests.Response:
        """Add tracker URLs to a torrent; several URLs are sent one per line."""
        return self.session.post("torrents/addTrackers", {"hash": info_hash, "urls": _join(urls, "\n")})

    def edit_tracker(self, info_hash: str, orig_url: str, new_url: str) -> requests.Response:
        params = {"hash": info_hash, "origUrl": orig_url, "newUrl": new_url}
        return self.session.post("torrents/editTracker", params)

    def remove_trackers(self, info_hash: str, urls: Union[str, Iterable[str]]) -> requests.Response:
        return self.session.post("torrents/removeTrackers", {"hash": info_hash, "urls": _join(urls, "|")})

    def add_peers(self, targets: Targets, peers: Iterable[str]) -> requests.Response:
        """
        Add peers to torrents.

        Args:
            targets: Hash, list of hashes, or ALL
            peers: "host:port" strings
        """
        params = self._targets(targets)
        params.update(serialize_list("peers", peers))
        return self.session.post("torrents/addPeers", params)

    # -------------------------------------------------------------------------
    # File Methods
    # -------------------------------------------------------------------------

    def rename_file(self, info_hash: str, old_path: str, new_path: str) -> requests.Response:
        params = {"hash": info_hash, "oldPath": old_path, "newPath": new_path}
        return self.session.post("torrents/renameFile", params)

    def rename_folder(self, info_hash: str, old_path: str, new_path: str) -> requests.Response:
        params = {"hash": info_hash, "oldPath": old_path, "newPath": new_path}
        return self.session.post("torrents/renameFolder", params)

    # -------------------------------------------------------------------------
    # Category Methods
    # -------------------------------------------------------------------------

    def get_categories(self) -> JSONMap:
        """
        Get all categories.

        Returns:
            JSONMap of category name to a JSONMap with at least "name" and
            "savePath"
        """
        response = self.session.get("torrents/categories")
        return decode_map(response.text, self.ignore_decode_errors)

    def set_torrent_category(self, targets: Targets, category: str) -> requests.Response:
        """Set the category of torrents; an empty category removes it."""
        return self.session.post("torrents/setCategory", self._targets(targets, category=category))

    def create_category(self, category: str, save_path: str = "") -> requests.Response:
        return self.session.post("torrents/createCategory", {"category": category, "savePath": save_path})

    def edit_category(self, category: str, save_path: str) -> requests.Response:
        return self.session.post("torrents/editCategory", {"category": category, "savePath": save_path})

    def remove_categories(self, categories: Union[str, Iterable[str]]) -> requests.Response:
        """Remove one category, or several (sent one per line)."""
        return self.session.post("torrents/removeCategories", {"categories": _join(categories, "\n")})

    # -------------------------------------------------------------------------
    # Tag Methods
    # -------------------------------------------------------------------------

    def get_tags(self) -> List[str]:
        response = self.session.get("torrents/tags")
        return decode_list(str, response.text, self.ignore_decode_errors)

    def add_tags(self, targets: Targets, tags: Union[str, Iterable[str]]) -> requests.Response:
        """Add tags to torrents; several tags are comma-joined."""
        return self.session.post("torrents/addTags", self._targets(targets, tags=_join(tags, ",")))

    def remove_tags(self, targets: Targets, tags: Union[str, Iterable[str]]) -> requests.Response:
        return self.session.post("torrents/removeTags", self._targets(targets, tags=_join(tags, ",")))

    def create_tags(self, tags: Union[str, Iterable[str]]) -> requests.Response:
        return self.session.post("torrents/createTags", {"tags": _join(tags, ",")})

    def delete_tags(self, tags: Union[str, Iterable[str]]) -> requests.Response:
        return self.session.post("torrents/deleteTags", {"tags": _join(tags, ",")})
