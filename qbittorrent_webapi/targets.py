"""
Target addressing for bulk torrent commands.

Most torrent endpoints accept a ``hashes`` parameter that holds one info
hash, several hashes joined with ``|``, or the literal ``all``. Target
wraps those three forms so every command builds the parameter the same way.
"""

from typing import Dict, Iterable, List, Union

ALL = "all"
DELIMITER = "|"


def serialize_list(key: str, items: Iterable[str]) -> Dict[str, str]:
    """
    Join items with the pipe delimiter into a one-entry parameter map.

    Items keep their order and duplicates. Delimiters inside an item are not
    escaped. An empty input gives an empty value, not a missing key.
    """
    return {key: DELIMITER.join(items)}


class Target:
    """One identifier, an explicit list of identifiers, or every torrent."""

    ONE = "one"
    MANY = "many"
    EVERY = "all"

    def __init__(self, kind: str, items: List[str]):
        if kind not in (self.ONE, self.MANY, self.EVERY):
            raise ValueError(f"Unknown target kind: {kind}")
        self.kind = kind
        self.items = items

    @classmethod
    def one(cls, item: str) -> "Target":
        return cls(cls.ONE, [item])

    @classmethod
    def many(cls, items: Iterable[str]) -> "Target":
        return cls(cls.MANY, list(items))

    @classmethod
    def all(cls) -> "Target":
        return cls(cls.EVERY, [])

    @classmethod
    def coerce(cls, value: Union["Target", str, Iterable[str]]) -> "Target":
        """
        Build a Target from whatever a command was called with.

        Args:
            value: A Target, a single hash, the string "all", or an
                iterable of hashes

        Raises:
            TypeError: If value is None or an iterable of non-strings
        """
        if isinstance(value, Target):
            return value
        if value is None:
            raise TypeError("A target is required; pass a hash, a list of hashes or 'all'")
        if isinstance(value, str):
            return cls.all() if value == ALL else cls.one(value)

        items = list(value)
        for item in items:
            if not isinstance(item, str):
                raise TypeError(f"Target identifiers must be strings, got {type(item).__name__}")
        return cls.many(items)

    def to_params(self, key: str = "hashes") -> Dict[str, str]:
        if self.kind == self.EVERY:
            return {key: ALL}
        if self.kind == self.ONE:
            return {key: self.items[0]}
        return serialize_list(key, self.items)

    def __eq__(self, other):
        if not isinstance(other, Target):
            return NotImplemented
        return self.kind == other.kind and self.items == other.items

    def __repr__(self):
        if self.kind == self.EVERY:
            return "Target.all()"
        if self.kind == self.ONE:
            return f"Target.one({self.items[0]!r})"
        return f"Target.many({self.items!r})"
