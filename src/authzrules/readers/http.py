from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import httpx

from ..core.ports import DataReader

logger = logging.getLogger("authzrules.readers.http")


@dataclass(frozen=True)
class HttpReaderConfig:
    base_url: str  # e.g. "http://localhost:8080/openidm"
    api_token: Optional[str] = None  # sent as Bearer <token>
    timeout_seconds: float = 2.0


class HttpDataReader(DataReader):
    """DataReader over a REST API.

    - ``read(id)``   -> ``GET {base_url}/{id}``; 404 means "not found" (None).
    - ``query(id, params)`` -> ``GET {base_url}/{id}?params``; the response is
      either a list or an object with a ``result`` list.

    Every call carries the configured timeout. Timeouts and non-2xx answers
    raise ``httpx`` errors, which the evaluator turns into a denied rule.
    """

    def __init__(self, config: HttpReaderConfig, *, client: Optional[httpx.Client] = None) -> None:
        self.cfg = config
        self._client = client or httpx.Client(timeout=config.timeout_seconds)

    def _headers(self) -> dict[str, str]:
        h = {"accept": "application/json"}
        if self.cfg.api_token:
            h["authorization"] = f"Bearer {self.cfg.api_token}"
        return h

    def _url(self, resource_id: str) -> str:
        return f"{self.cfg.base_url.rstrip('/')}/{resource_id.lstrip('/')}"

    def read(self, resource_id: str) -> Optional[Mapping[str, Any]]:
        resp = self._client.get(
            self._url(resource_id), headers=self._headers(), timeout=self.cfg.timeout_seconds
        )
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def query(self, resource_id: str, params: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        resp = self._client.get(
            self._url(resource_id),
            params={k: str(v) for k, v in params.items()},
            headers=self._headers(),
            timeout=self.cfg.timeout_seconds,
        )
        resp.raise_for_status()
        data = resp.json()
        if isinstance(data, dict):
            data = data.get("result", [])
        if not isinstance(data, list):
            raise ValueError(f"unexpected query response from {resource_id!r}: {type(data).__name__}")
        return data

    def close(self) -> None:
        self._client.close()


__all__ = ["HttpReaderConfig", "HttpDataReader"]
