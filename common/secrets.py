import json
import os
from pathlib import Path
from typing import Any, Optional


class SecretsManager:
    """Read secrets from the JSON document at ``SECRETS_PATH``.

    Used as the fallback for credentials that are not exported in the
    environment. The document is parsed once and cached; a missing file is
    treated as an empty document.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(
            path or os.getenv("SECRETS_PATH", "/var/run/secrets/telematics.json")
        )
        self._cache: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if self._cache is None:
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except FileNotFoundError:
                data = {}
            if not isinstance(data, dict):
                raise ValueError(f"{self._path} must contain a JSON object")
            self._cache = data
        return self._cache

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return secret value for *key* or *default* if missing."""

        return self._load().get(key, default)

    def reload(self) -> None:
        """Drop the cache so the next lookup re-reads the file."""

        self._cache = None

    def set_override(self, data: dict[str, Any]) -> None:
        """Replace the cached document (test helper)."""

        self._cache = dict(data)


# Global default manager
secrets = SecretsManager()


def get_secret(key: str, default: Optional[Any] = None) -> Any:
    """Convenience wrapper around :class:`SecretsManager`."""

    return secrets.get(key, default)
