from __future__ import annotations

"""
Descriptor transport.

Usage:
    client = DescriptorClient.from_config(cfg.descriptor)
    text = client.fetch(GeoCoordinate(48.137, 11.575))   # raises TransportError / EmptyResponseError

Request:
    GET <base_url>?version=1&lat=<6 decimals>&lon=<6 decimals>&channel=<channel>&device=<id>
Response:
    UTF-8 text, newline-delimited (see descriptor.parser).
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import requests

from common.config import DescriptorConfig
from common.errors import EmptyResponseError, TransportError
from common.types import GeoCoordinate


log = logging.getLogger(__name__)


class DescriptorClient:
    def __init__(
        self,
        base_url: str,
        *,
        channel: str,
        device_id: str,
        timeout: float = 10.0,
        version: int = 1,
        session: Optional[requests.Session] = None,
    ):
        """
        Params:
            base_url: descriptor endpoint
            channel: fixed channel identifier sent with every request
            device_id: device identifier sent with every request
            timeout: requests timeout in seconds
            session: optional requests.Session for connection reuse
        """
        if not base_url:
            raise ValueError("Descriptor base_url is required")
        self.base_url = base_url
        self.channel = channel
        self.device_id = device_id
        self.timeout = float(timeout)
        self.version = int(version)
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: DescriptorConfig, session: Optional[requests.Session] = None) -> "DescriptorClient":
        return cls(
            cfg.base_url,
            channel=cfg.channel,
            device_id=cfg.device_id,
            timeout=cfg.timeout_s,
            version=cfg.version,
            session=session,
        )

    # ----------------------------
    # Public API
    # ----------------------------
    def build_params(self, coord: GeoCoordinate) -> Dict[str, str]:
        return {
            "version": str(self.version),
            "lat": f"{coord.latitude:.6f}",
            "lon": f"{coord.longitude:.6f}",
            "channel": self.channel,
            "device": self.device_id,
        }

    def build_url(self, coord: GeoCoordinate) -> str:
        """Fully-qualified request URL (no request performed). Keeps any query already on base_url."""
        return requests.Request("GET", self.base_url, params=self.build_params(coord)).prepare().url

    def fetch(self, coord: GeoCoordinate) -> str:
        """Fetch the descriptor text for `coord`."""
        params = self.build_params(coord)
        try:
            url = self.build_url(coord)
            log.info("Fetching descriptor", extra={"url": url})
            r = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"WebRequest to url '{self.base_url}' failed: {e}") from e

        if r.status_code != 200:
            raise TransportError(f"HTTP {r.status_code} from '{url}': {r.text[:200]}")

        text = (r.content or b"").decode("utf-8", errors="replace")
        if not text.strip():
            raise EmptyResponseError(f"WebRequest to url '{url}' received empty text.")
        log.info("Descriptor received", extra={"url": r.url, "bytes": len(r.content)})
        return text

    def __call__(self, coord: GeoCoordinate) -> str:
        return self.fetch(coord)


class FileDescriptorSource:
    """Serve descriptor text from a local file (offline simulation runs)."""

    def __init__(self, path: str):
        self.path = Path(path)

    def fetch(self, coord: GeoCoordinate) -> str:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise TransportError(f"Cannot read descriptor file '{self.path}': {e}") from e
        if not text.strip():
            raise EmptyResponseError(f"Descriptor file '{self.path}' is empty.")
        return text

    def __call__(self, coord: GeoCoordinate) -> str:
        return self.fetch(coord)
