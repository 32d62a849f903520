"""
Response models and decoders for the qBittorrent Web API.

Endpoints with a stable schema decode into pydantic models: BasicTorrent,
TorrentProperties, Tracker, WebSeed and TorrentFile. Unknown fields are
ignored and missing fields take zero values, so older and newer servers
decode into the same records.

Endpoints whose shape depends on the server version (preferences,
categories) decode into JSONMap, an ordered dict with typed accessors.

A body that is not JSON, or that does not fit the model, raises
ResponseDecodeError unless the caller asks for decode errors to be ignored,
in which case the zero value is returned and a warning is logged.
"""

import json
from typing import Any, List, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .exceptions import ResponseDecodeError
from .logger import logger


T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class Record(BaseModel):
    model_config = ConfigDict(extra="ignore")


class BasicTorrent(Record):
    """One entry of torrents/info."""
    hash: str = ""
    name: str = ""
    size: int = 0
    total_size: int = 0
    progress: float = 0.0
    dlspeed: int = 0
    upspeed: int = 0
    priority: int = 0
    num_seeds: int = 0
    num_complete: int = 0
    num_leechs: int = 0
    num_incomplete: int = 0
    ratio: float = 0.0
    eta: int = 0
    state: str = ""
    seq_dl: bool = False
    f_l_piece_prio: bool = False
    category: str = ""
    tags: str = ""
    super_seeding: bool = False
    force_start: bool = False
    auto_tmm: bool = False
    added_on: int = 0
    completion_on: int = 0
    last_activity: int = 0
    seen_complete: int = 0
    tracker: str = ""
    dl_limit: int = 0
    up_limit: int = 0
    downloaded: int = 0
    uploaded: int = 0
    downloaded_session: int = 0
    uploaded_session: int = 0
    amount_left: int = 0
    completed: int = 0
    availability: float = 0.0
    max_ratio: float = 0.0
    max_seeding_time: int = 0
    ratio_limit: float = 0.0
    seeding_time_limit: int = 0
    seeding_time: int = 0
    time_active: int = 0
    save_path: str = ""
    content_path: str = ""
    magnet_uri: str = ""

    @property
    def tag_list(self) -> List[str]:
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]


class TorrentProperties(Record):
    """Generic properties of a single torrent (torrents/properties)."""
    save_path: str = ""
    creation_date: int = 0
    piece_size: int = 0
    comment: str = ""
    created_by: str = ""
    total_wasted: int = 0
    total_uploaded: int = 0
    total_uploaded_session: int = 0
    total_downloaded: int = 0
    total_downloaded_session: int = 0
    total_size: int = 0
    up_limit: int = 0
    dl_limit: int = 0
    time_elapsed: int = 0
    seeding_time: int = 0
    nb_connections: int = 0
    nb_connections_limit: int = 0
    share_ratio: float = 0.0
    addition_date: int = 0
    completion_date: int = 0
    last_seen: int = 0
    dl_speed: int = 0
    dl_speed_avg: int = 0
    up_speed: int = 0
    up_speed_avg: int = 0
    eta: int = 0
    peers: int = 0
    peers_total: int = 0
    seeds: int = 0
    seeds_total: int = 0
    pieces_have: int = 0
    pieces_num: int = 0
    reannounce: int = 0


class Tracker(Record):
    url: str = ""
    status: int = 0
    # Older servers report an empty string for the DHT/PeX/LSD pseudo-trackers
    tier: Union[int, str] = 0
    num_peers: int = 0
    num_seeds: int = 0
    num_leeches: int = 0
    num_downloaded: int = 0
    msg: str = ""


class WebSeed(Record):
    url: str = ""


class TorrentFile(Record):
    """One file of a torrent (torrents/files)."""
    index: int = 0
    name: str = ""
    size: int = 0
    progress: float = 0.0
    priority: int = 0
    is_seed: bool = False
    piece_range: List[int] = []
    availability: float = 0.0


class JSONMap(dict):
    """
    Ordered string-keyed map for responses without a fixed schema.

    The accessors never raise: a missing key or a value of the wrong type
    yields the default.
    """

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key)
        return value if isinstance(value, str) else default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return int(value)

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return float(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        return value if isinstance(value, bool) else default

    def get_list(self, key: str) -> List[Any]:
        value = self.get(key)
        return value if isinstance(value, list) else []

    def get_map(self, key: str) -> "JSONMap":
        value = self.get(key)
        return value if isinstance(value, JSONMap) else JSONMap()


def _object_hook(pairs: List[tuple]) -> JSONMap:
    return JSONMap(pairs)


def _fail(message: str, body: str, ignore_errors: bool, zero: T) -> T:
    if not ignore_errors:
        raise ResponseDecodeError(message, body=body)
    logger.warning(f"Ignoring undecodable response: {message}")
    return zero


def decode_model(model: Type[M], body: str, ignore_errors: bool = False) -> M:
    """Decode a JSON object into model, or its zero value when ignoring errors."""
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        return _fail(f"Expected a {model.__name__} object: {e}", body, ignore_errors, model())


def decode_model_list(model: Type[M], body: str, ignore_errors: bool = False) -> List[M]:
    """Decode a JSON array of objects into a list of model."""
    try:
        return TypeAdapter(List[model]).validate_json(body)
    except ValidationError as e:
        return _fail(f"Expected a list of {model.__name__}: {e}", body, ignore_errors, [])


def decode_list(item_type: Type[T], body: str, ignore_errors: bool = False) -> List[T]:
    """Decode a JSON array of scalars, e.g. piece states or tag names."""
    try:
        return TypeAdapter(List[item_type]).validate_json(body)
    except ValidationError as e:
        return _fail(f"Expected a list of {item_type.__name__}: {e}", body, ignore_errors, [])


def decode_map(body: str, ignore_errors: bool = False) -> JSONMap:
    """Decode a JSON object into a JSONMap; nested objects become JSONMaps too."""
    try:
        data = json.loads(body, object_pairs_hook=_object_hook)
    except ValueError as e:
        return _fail(f"Invalid JSON: {e}", body, ignore_errors, JSONMap())
    if not isinstance(data, JSONMap):
        return _fail(f"Expected a JSON object, got {type(data).__name__}", body, ignore_errors, JSONMap())
    return data
