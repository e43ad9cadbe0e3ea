# doorpanel/core/errors.py
from __future__ import annotations


class DoorPanelError(Exception):
    """
    Base class for all expected operational errors in the door panel client.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, logs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (no simulator access yet)
# ---------------------------------------------------------------------------

class LayoutConfigError(DoorPanelError):
    """
    Panel layout file is missing or inconsistent.

    Examples:
      - layout file not found
      - a keyboard assignment is not an integer
      - a switch name is mapped twice
    """
    code = "layout_config_error"


# ---------------------------------------------------------------------------
# Connection lifecycle errors
# ---------------------------------------------------------------------------

class SimulatorConnectError(DoorPanelError):
    """
    Connection to the simulator could not be opened.

    Examples:
      - nothing listening on host:port
      - malformed endpoint URL
    """
    code = "simulator_connect_error"


class HandshakeError(DoorPanelError):
    """
    Simulator is reachable but refused or garbled the HELLO / NEEDED_DATA exchange.
    """
    code = "handshake_error"


class SimulatorDisconnectedError(DoorPanelError):
    """
    Simulator was connected but the link broke while the panel was running.

    Examples:
      - simulator closed / timetable ended
      - framing lost on the receive side
      - write failed while sending an input batch
    """
    code = "simulator_disconnected"
