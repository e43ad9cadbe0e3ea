# doorpanel/panel/__init__.py

from .layout import PanelLayout, SwitchRole, load_layout
from .state import PanelSide, PanelState, SideSelection
from .transition import transition
from .translator import Translator

__all__ = [
    "PanelLayout", "SwitchRole", "load_layout",
    "PanelSide", "PanelState", "SideSelection",
    "transition", "Translator",
]
