"""Endpoint store abstraction + JSON file implementation."""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime

from endpoint_proxy.endpoints.models import EndpointConfig
from endpoint_proxy.logging.audit import audit
from endpoint_proxy.security.secrets import KeyCipher

UPDATABLE_FIELDS = frozenset({
    "name",
    "description",
    "api_type",
    "target_url",
    "api_key",
    "allowed_origins",
    "status",
    "last_tested",
})


class ProxyIdConflict(ValueError):
    """Another endpoint already holds this proxy id."""

    def __init__(self, proxy_id: str):
        super().__init__(f"Proxy id {proxy_id} is already in use")
        self.proxy_id = proxy_id


class EndpointStore(ABC):
    """Abstract base for endpoint configuration persistence.

    Implementations hand out EndpointConfig objects with the API key in
    plaintext; sealing/unsealing happens at the persistence boundary.
    """

    def __init__(self, cipher: KeyCipher | None = None):
        self._cipher = cipher or KeyCipher()

    @abstractmethod
    async def list_all(self) -> list[EndpointConfig]:
        """All endpoints, newest first."""
        ...

    @abstractmethod
    async def get(self, endpoint_id: str) -> EndpointConfig | None:
        ...

    @abstractmethod
    async def get_by_proxy_id(self, proxy_id: str) -> EndpointConfig | None:
        ...

    @abstractmethod
    async def create(self, config: EndpointConfig) -> EndpointConfig:
        ...

    @abstractmethod
    async def update(self, endpoint_id: str, changes: dict) -> EndpointConfig | None:
        """Apply a partial update. Returns None if the endpoint doesn't exist."""
        ...

    @abstractmethod
    async def delete(self, endpoint_id: str) -> bool:
        ...

    async def update_status(self, endpoint_id: str, status: str, last_tested: datetime) -> bool:
        updated = await self.update(endpoint_id, {"status": status, "last_tested": last_tested})
        return updated is not None

    def _seal(self, config: EndpointConfig) -> dict:
        record = config.to_record()
        record["api_key"] = self._cipher.seal(record["api_key"])
        return record

    def _unseal(self, record: dict) -> EndpointConfig:
        """Load a record. A key that cannot be decrypted loads as empty."""
        config = EndpointConfig.from_record(record)
        try:
            config.api_key = self._cipher.unseal(config.api_key)
        except ValueError as e:
            audit("API key unavailable", logging.WARNING, endpoint_id=config.id, reason=str(e))
            config.api_key = ""
        return config

    def _encode_changes(self, changes: dict) -> dict:
        """Partial update in record form. Untouched fields keep their stored value."""
        encoded = {}
        for key, value in changes.items():
            if key == "api_key":
                value = self._cipher.seal(value)
            elif key == "last_tested":
                value = value.isoformat() if value else None
            elif key == "allowed_origins":
                value = list(value)
            encoded[key] = value
        return encoded

    @staticmethod
    def _check_fields(changes: dict) -> None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")


class JSONEndpointStore(EndpointStore):
    """File-backed endpoint store. Reloads on mtime change, writes atomically."""

    def __init__(self, path: str, cipher: KeyCipher | None = None):
        super().__init__(cipher)
        self._path = path
        self._records: dict[str, dict] = {}
        self._last_mtime: float = 0.0
        self._lock = asyncio.Lock()
        self._load()

    def _load(self) -> None:
        """Load endpoint records from the JSON file."""
        try:
            mtime = os.path.getmtime(self._path)
        except OSError:
            self._records = {}
            return

        if mtime == self._last_mtime:
            return

        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)

        self._records = {entry["id"]: entry for entry in data.get("endpoints", [])}
        self._last_mtime = mtime

    def _flush(self) -> None:
        tmp_path = f"{self._path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"endpoints": list(self._records.values())}, f, indent=2)
        os.replace(tmp_path, self._path)
        self._last_mtime = os.path.getmtime(self._path)

    async def list_all(self) -> list[EndpointConfig]:
        self._load()
        configs = [self._unseal(r) for r in self._records.values()]
        return sorted(configs, key=lambda c: c.created_at, reverse=True)

    async def get(self, endpoint_id: str) -> EndpointConfig | None:
        self._load()
        record = self._records.get(endpoint_id)
        return self._unseal(record) if record is not None else None

    async def get_by_proxy_id(self, proxy_id: str) -> EndpointConfig | None:
        self._load()
        for record in self._records.values():
            if record.get("proxy_id") == proxy_id:
                return self._unseal(record)
        return None

    async def create(self, config: EndpointConfig) -> EndpointConfig:
        async with self._lock:
            self._load()
            if config.id in self._records:
                raise ValueError(f"Endpoint {config.id} already exists")
            if any(r.get("proxy_id") == config.proxy_id for r in self._records.values()):
                raise ProxyIdConflict(config.proxy_id)
            self._records[config.id] = self._seal(config)
            self._flush()
        return config

    async def update(self, endpoint_id: str, changes: dict) -> EndpointConfig | None:
        self._check_fields(changes)
        async with self._lock:
            self._load()
            record = self._records.get(endpoint_id)
            if record is None:
                return None
            merged = {**record, **self._encode_changes(changes)}
            self._records[endpoint_id] = merged
            self._flush()
        return self._unseal(merged)

    async def delete(self, endpoint_id: str) -> bool:
        async with self._lock:
            self._load()
            if self._records.pop(endpoint_id, None) is None:
                return False
            self._flush()
        return True
