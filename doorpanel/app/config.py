# doorpanel/app/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from doorpanel import __version__

DEFAULT_ENDPOINT = "127.0.0.1:1436"
CLIENT_NAME = "GT8-100D/2S-M"


@dataclass(frozen=True)
class DoorPanelConfig:
    endpoint: str = DEFAULT_ENDPOINT
    layout_path: Optional[str] = None
    client_name: str = CLIENT_NAME
    client_version: str = __version__

    @property
    def url(self) -> str:
        """pyserial URL for the endpoint; plain host:port means a TCP socket."""
        if "://" in self.endpoint:
            return self.endpoint
        return f"socket://{self.endpoint}"
