# doorpanel/panel/layout.py
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from doorpanel.core.errors import LayoutConfigError
from doorpanel.utils.hashing import sha256_file

from .state import PanelSide

DEFAULT_LAYOUT_PATH = Path(__file__).resolve().parents[1] / "metadata" / "panel.yml"


class SwitchRole(enum.Enum):
    """Named cab switches the panel reacts to. Any other name is ignored."""
    DOOR_RELEASE = "door_release"
    AUTO_ALL_CLOSE = "auto_all_close"
    PRESELECT_LEFT = "preselect_left"
    PRESELECT_RIGHT = "preselect_right"
    PRESELECT_BOTH = "preselect_both"


PRESELECT_SIDES: Dict[SwitchRole, PanelSide] = {
    SwitchRole.PRESELECT_LEFT: PanelSide.LEFT,
    SwitchRole.PRESELECT_RIGHT: PanelSide.RIGHT,
    SwitchRole.PRESELECT_BOTH: PanelSide.BOTH,
}


@dataclass(frozen=True)
class DoorCommands:
    """Keyboard commands of the doors assignment. Up = down + 1."""
    toggle_down: int
    left_down: int
    right_down: int
    close_down: int

    @property
    def close_up(self) -> int:
        return self.close_down + 1

    @property
    def internal_downs(self) -> Tuple[int, int, int]:
        return (self.left_down, self.right_down, self.close_down)


@dataclass(frozen=True)
class Lamps:
    doors_open: Tuple[int, ...]
    green_loop: int
    pram: int
    side_left: int
    side_right: int
    side_both: int


@dataclass(frozen=True)
class PanelLayout:
    internal_channel: int
    external_channel: int
    release_switch: int
    auto_close_switch: int
    lamps: Lamps
    commands: DoorCommands
    switch_names: Mapping[str, SwitchRole]
    departure_speed_ms: float
    source: Optional[str] = field(default=None, compare=False)
    fingerprint: Optional[str] = field(default=None, compare=False)

    def switch_role(self, name: str) -> Optional[SwitchRole]:
        return self.switch_names.get(name)


class LayoutLoader:
    """Load a panel layout YAML file into a PanelLayout."""

    def __init__(self, path: Union[str, Path, None] = None, logger: Optional[logging.Logger] = None):
        self.path = Path(path) if path is not None else DEFAULT_LAYOUT_PATH
        self._log = logger or logging.getLogger(__name__)
        self.doc: Dict[str, Any] = {}

    def load(self) -> PanelLayout:
        if not self.path.exists():
            raise LayoutConfigError(
                f"Panel layout file not found: {self.path}",
                hint="Pass --layout with a valid file or omit it to use the built-in layout.",
                details={"path": str(self.path)},
            )

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                self.doc = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise LayoutConfigError(
                f"Panel layout file is not valid YAML: {self.path}",
                hint=str(e),
                details={"path": str(self.path)},
            ) from None

        if not isinstance(self.doc, dict):
            raise LayoutConfigError(f"{self.path.name} must be a mapping", details={"path": str(self.path)})

        channels = self._section("channels")
        lamps = self._section("lamps")
        switches = self._section("switches")
        commands = self._section("door_commands")

        switch_names: Dict[str, SwitchRole] = {}
        for role in SwitchRole:
            entry = self._mapping(switches.get(role.value), f"switches.{role.value}")
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                raise LayoutConfigError(
                    f"Switch '{role.value}' needs a non-empty 'name'.",
                    details={"path": str(self.path), "switch": role.value},
                )
            if name in switch_names:
                raise LayoutConfigError(
                    f"Switch name '{name}' is used for both '{switch_names[name].value}' and '{role.value}'.",
                    details={"path": str(self.path), "name": name},
                )
            switch_names[name] = role

        doors_open = lamps.get("doors_open")
        if not isinstance(doors_open, list) or not doors_open:
            raise LayoutConfigError(
                "lamps.doors_open must be a non-empty list of assignments.",
                details={"path": str(self.path)},
            )

        speed_kmh = self.doc.get("departure_speed_kmh", 5.0)
        if isinstance(speed_kmh, bool) or not isinstance(speed_kmh, (int, float)) or speed_kmh < 0:
            raise LayoutConfigError(
                f"departure_speed_kmh must be a non-negative number, got {speed_kmh!r}.",
                details={"path": str(self.path)},
            )

        layout = PanelLayout(
            internal_channel=self._int(channels, "internal_doors", "channels"),
            external_channel=self._int(channels, "external_doors", "channels"),
            release_switch=self._int(self._mapping(switches.get("door_release"), "switches.door_release"),
                                     "assignment", "switches.door_release"),
            auto_close_switch=self._int(self._mapping(switches.get("auto_all_close"), "switches.auto_all_close"),
                                        "assignment", "switches.auto_all_close"),
            lamps=Lamps(
                doors_open=tuple(self._as_int(v, "lamps.doors_open") for v in doors_open),
                green_loop=self._int(lamps, "green_loop", "lamps"),
                pram=self._int(lamps, "pram", "lamps"),
                side_left=self._int(lamps, "side_left", "lamps"),
                side_right=self._int(lamps, "side_right", "lamps"),
                side_both=self._int(lamps, "side_both", "lamps"),
            ),
            commands=DoorCommands(
                toggle_down=self._int(commands, "toggle_down", "door_commands"),
                left_down=self._int(commands, "left_down", "door_commands"),
                right_down=self._int(commands, "right_down", "door_commands"),
                close_down=self._int(commands, "close_down", "door_commands"),
            ),
            switch_names=switch_names,
            departure_speed_ms=float(speed_kmh) / 3.6,
            source=str(self.path),
            fingerprint=sha256_file(self.path),
        )

        self._log.info("LAYOUT_LOADED path=%s sha256=%s", layout.source, layout.fingerprint)
        return layout

    # ---------------- Helpers ----------------
    def _section(self, key: str) -> Dict[str, Any]:
        return self._mapping(self.doc.get(key), key)

    def _mapping(self, value: Any, where: str) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise LayoutConfigError(
                f"'{where}' must be a mapping in {self.path.name}.",
                details={"path": str(self.path), "key": where},
            )
        return value

    def _int(self, section: Mapping[str, Any], key: str, where: str) -> int:
        if key not in section:
            raise LayoutConfigError(
                f"Missing '{where}.{key}' in {self.path.name}.",
                details={"path": str(self.path), "key": f"{where}.{key}"},
            )
        return self._as_int(section[key], f"{where}.{key}")

    def _as_int(self, value: Any, where: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFF:
            raise LayoutConfigError(
                f"'{where}' must be an integer in 0..65535, got {value!r}.",
                details={"path": str(self.path), "key": where},
            )
        return value


def load_layout(path: Union[str, Path, None] = None) -> PanelLayout:
    return LayoutLoader(path).load()
