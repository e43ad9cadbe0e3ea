# doorpanel/panel/transition.py
"""
Door panel state machine.

Zusi vs. GT8 door handling, and how the panel bridges them:

  - Before stopping: Zusi wants the side buttons set; the GT8 preselects a side
    (normally right). The release switch on "open"/"release" pushes the
    preselected side into Zusi's TAV side selector.
  - Passenger exchange done: Zusi closes the doors when the side selector goes
    back to neutral; on the GT8 the release switch returns to its middle notch,
    which therefore drives the simulator's selector to neutral.
  - After departure the preselection falls back to its default (right).
  - "All doors closed" on the auto switch presses Zusi's forced-close key.
  - Door lamps and the green loop lamp are driven directly: they are steady on
    while a door is open instead of blinking while closing.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from doorpanel.protocol.commands import key_input, switch_input
from doorpanel.protocol.core import Node
from doorpanel.protocol.core import defs

from .layout import PRESELECT_SIDES, PanelLayout, SwitchRole
from .state import (
    NOTCH_ALL_CLOSED,
    NOTCH_NEUTRAL,
    NOTCH_RELEASE,
    PanelSide,
    PanelState,
    SideSelection,
)

_log = logging.getLogger(__name__)

# Right -> Left -> Both -> Right
ROTATE_LEFT: Dict[PanelSide, PanelSide] = {
    PanelSide.RIGHT: PanelSide.LEFT,
    PanelSide.LEFT: PanelSide.BOTH,
    PanelSide.BOTH: PanelSide.RIGHT,
}

# Left -> Right -> Both -> Left
ROTATE_RIGHT: Dict[PanelSide, PanelSide] = {
    PanelSide.LEFT: PanelSide.RIGHT,
    PanelSide.RIGHT: PanelSide.BOTH,
    PanelSide.BOTH: PanelSide.LEFT,
}

DEPARTURE_DEFAULT_SIDE = PanelSide.RIGHT


def rotate(table: Dict[PanelSide, PanelSide], side: PanelSide) -> PanelSide:
    return table.get(side, side)


def transition(
    prev: Optional[PanelState],
    message: Node,
    layout: PanelLayout,
) -> Tuple[PanelState, List[Node]]:
    """
    Apply one simulator message.

    ``prev`` is the state after the previous message, or None before the first
    one. Returns the new state and the inputs to send back, in order.
    """
    curr = prev if prev is not None else PanelState()
    inputs: List[Node] = []

    if message.id == defs.CLIENT_APPLICATION:
        for child in message.children:
            if child.id == defs.DATA_FTD:
                curr = _apply_cab_data(curr, child, layout)
            elif child.id == defs.DATA_OPERATION:
                curr = _apply_operations(curr, child, layout, inputs)

    curr = _react(prev, curr, layout, inputs)
    return curr, inputs


# ---------------- Inputs ----------------

def _apply_cab_data(state: PanelState, data: Node, layout: PanelLayout) -> PanelState:
    for door in data.children_with_id(defs.FTD_DOOR_STATUS):
        left = door.value(defs.DOOR_LEFT, "uint8")
        right = door.value(defs.DOOR_RIGHT, "uint8")
        if left is not None and right is not None:
            state = replace(state, door_status=max(left, right))

        selector = door.value(defs.DOOR_SIDE_SELECTOR, "uint8")
        if selector is not None:
            state = replace(state, side_selector_hardware=SideSelection.from_raw(selector))

    speed = data.value(defs.FTD_SPEED, "float")
    if speed is not None and speed > layout.departure_speed_ms and not state.manual_override_active:
        # Departed: preselection back to default, once per door cycle.
        state = replace(
            state,
            manual_override_active=True,
            side_selector_panel=DEPARTURE_DEFAULT_SIDE,
        )
    return state


def _apply_operations(state: PanelState, data: Node, layout: PanelLayout, inputs: List[Node]) -> PanelState:
    for event in data.children:
        if event.id == defs.OP_KEYPRESS:
            state = _on_keypress(state, event, layout, inputs)
        elif event.id == defs.OP_SWITCH:
            state = _on_switch(state, event, layout, inputs)
    return state


def _on_keypress(state: PanelState, event: Node, layout: PanelLayout, inputs: List[Node]) -> PanelState:
    assignment = event.value(defs.KEY_ASSIGNMENT, "uint16")
    command = event.value(defs.KEY_COMMAND, "uint16")
    if assignment is None or command is None:
        return state

    cmds = layout.commands

    if assignment == layout.internal_channel:
        # Only we press keys here. Release once Zusi confirmed the press.
        if command in cmds.internal_downs:
            inputs.append(key_input(layout.internal_channel, command + 1))

    elif assignment == layout.external_channel:
        # Keyboard door commands, translated to the panel's switches.
        if command == cmds.toggle_down:
            target = NOTCH_NEUTRAL if state.release_switch_notch == NOTCH_RELEASE else NOTCH_RELEASE
            inputs.append(switch_input(layout.release_switch, target))
        elif command == cmds.left_down:
            state = replace(state, side_selector_panel=rotate(ROTATE_LEFT, state.side_selector_panel))
        elif command == cmds.right_down:
            state = replace(state, side_selector_panel=rotate(ROTATE_RIGHT, state.side_selector_panel))
        elif command == cmds.close_down:
            inputs.append(switch_input(layout.auto_close_switch, NOTCH_ALL_CLOSED))
        elif command == cmds.close_up:
            inputs.append(switch_input(layout.auto_close_switch, NOTCH_NEUTRAL))

    return state


def _on_switch(state: PanelState, event: Node, layout: PanelLayout, inputs: List[Node]) -> PanelState:
    name = event.value(defs.SWITCH_NAME, "text")
    notch = event.value(defs.SWITCH_NOTCH, "int16")
    if name is None or notch is None:
        return state

    role = layout.switch_role(name)
    if role is None:
        return state

    if role is SwitchRole.DOOR_RELEASE:
        state = replace(state, release_switch_notch=notch)
    elif role is SwitchRole.AUTO_ALL_CLOSE:
        if notch == NOTCH_ALL_CLOSED:
            inputs.append(key_input(layout.internal_channel, layout.commands.close_down))
    elif role in PRESELECT_SIDES:
        state = replace(state, manual_override_active=True)
        if notch == 1:
            state = replace(state, side_selector_panel=PRESELECT_SIDES[role])
    return state


# ---------------- Reactions ----------------

def _react(prev: Optional[PanelState], curr: PanelState, layout: PanelLayout, inputs: List[Node]) -> PanelState:
    doors_changed = prev is None or prev.door_status != curr.door_status
    side_changed = prev is None or prev.side_selector_panel != curr.side_selector_panel
    release_changed = prev is None or prev.release_switch_notch != curr.release_switch_notch

    if doors_changed:
        lamps = layout.lamps
        open_lamp = 0 if curr.door_status == 0 else 1
        for assignment in lamps.doors_open:
            inputs.append(switch_input(assignment, open_lamp))
        inputs.append(switch_input(lamps.pram, open_lamp))
        inputs.append(switch_input(lamps.green_loop, 1 - open_lamp))
        if curr.door_status == 0:
            curr = replace(curr, manual_override_active=False)

    if side_changed:
        lamps = layout.lamps
        inputs.append(switch_input(lamps.side_left, int(curr.side_selector_panel == PanelSide.LEFT)))
        inputs.append(switch_input(lamps.side_right, int(curr.side_selector_panel == PanelSide.RIGHT)))
        inputs.append(switch_input(lamps.side_both, int(curr.side_selector_panel == PanelSide.BOTH)))

    if side_changed or release_changed:
        # The TAV side selector has no absolute position input; toggle each side.
        if curr.release_switch_notch == NOTCH_NEUTRAL:
            desired = SideSelection.NONE
        else:
            desired = SideSelection(int(curr.side_selector_panel))
        _log.info(
            "SIDE_SELECTOR hardware=%d desired=%d",
            int(curr.side_selector_hardware),
            int(desired),
        )

        differs = desired ^ curr.side_selector_hardware
        if differs & SideSelection.LEFT:
            inputs.append(key_input(layout.internal_channel, layout.commands.left_down))
        if differs & SideSelection.RIGHT:
            inputs.append(key_input(layout.internal_channel, layout.commands.right_down))

    return curr
