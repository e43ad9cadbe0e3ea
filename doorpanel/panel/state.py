# doorpanel/panel/state.py
from __future__ import annotations

import enum
from dataclasses import dataclass


class SideSelection(enum.IntFlag):
    """Simulator side-selector position as reported in the door status (bit0 left, bit1 right)."""
    NONE = 0
    LEFT = 1
    RIGHT = 2
    BOTH = LEFT | RIGHT

    @classmethod
    def from_raw(cls, raw: int) -> "SideSelection":
        return cls(int(raw) & cls.BOTH)


class PanelSide(enum.IntEnum):
    """Cursor of the panel's own tri-state side selector."""
    LEFT = 1
    RIGHT = 2
    BOTH = 3


# Release toggle switch notches
NOTCH_RELEASE = 0
NOTCH_NEUTRAL = 1

# Auto/all-close toggle switch notches
NOTCH_ALL_CLOSED = 0


@dataclass(frozen=True)
class PanelState:
    """
    Everything the panel remembers between two simulator messages.
    """
    # Mirrored from the simulator. Not what the cab's side buttons show: the
    # simulator also uses its selector to grant and withdraw the release.
    side_selector_hardware: SideSelection = SideSelection.NONE
    # max(left, right) door level, 0 = all closed
    door_status: int = 0
    release_switch_notch: int = NOTCH_NEUTRAL

    side_selector_panel: PanelSide = PanelSide.RIGHT
    # Side preselect touched since the doors last closed?
    manual_override_active: bool = False
