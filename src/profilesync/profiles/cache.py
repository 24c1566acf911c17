import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

# key under which the sign-in flow stores the user id
USER_ID_KEY = "userId"


class IdentityCache(ABC):
    """persistent key-value cache surviving process restarts."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """return the stored value, or None if absent."""
        pass


class JsonIdentityCache(IdentityCache):
    """handles identity cache persistence to JSON."""

    def __init__(self, cache_file: Path):
        self.cache_file = cache_file

    def _load(self) -> Dict[str, str]:
        if not self.cache_file.exists():
            return {}

        # unreadable or corrupted files propagate, callers decide how to treat them
        with open(self.cache_file, "r") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"identity cache {self.cache_file} is not a JSON object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    async def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value or None

    def set(self, key: str, value: str) -> None:
        """store a value. used by the sign-in flow, never by the sync core."""
        try:
            data = self._load()
        except (json.JSONDecodeError, ValueError):
            # corrupted file, start fresh
            data = {}

        data[key] = value

        # ensure parent directory exists
        self.cache_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.cache_file, "w") as f:
            json.dump(data, f, indent=2)

    def clear(self, key: str) -> None:
        try:
            data = self._load()
        except (json.JSONDecodeError, ValueError):
            data = {}

        if key in data:
            del data[key]
            with open(self.cache_file, "w") as f:
                json.dump(data, f, indent=2)
