from __future__ import annotations

from dataclasses import replace

import pytest

from doorpanel.panel.layout import load_layout
from doorpanel.panel.state import PanelSide, PanelState, SideSelection
from doorpanel.panel.transition import ROTATE_LEFT, ROTATE_RIGHT, rotate, transition
from doorpanel.protocol.commands import key_input, switch_input
from doorpanel.protocol.core import Attribute, Node
from doorpanel.protocol.core import defs

LAYOUT = load_layout()

INTERNAL = 36
EXTERNAL = 10
LEFT_DOWN, RIGHT_DOWN, CLOSE_DOWN, TOGGLE_DOWN = 61, 63, 65, 59

# Defaults, as after the first message with nothing reported.
STABLE = PanelState()


# -----------------------------
# Message helpers
# -----------------------------

def cab_data(*, speed=None, doors=None) -> Node:
    ftd = Node(defs.DATA_FTD)
    if speed is not None:
        ftd.attributes.append(Attribute.from_f32(defs.FTD_SPEED, speed))
    if doors is not None:
        left, right, selector = doors
        ftd.children.append(Node(defs.FTD_DOOR_STATUS, attributes=[
            Attribute.from_u8(defs.DOOR_LEFT, left),
            Attribute.from_u8(defs.DOOR_RIGHT, right),
            Attribute.from_u8(defs.DOOR_SIDE_SELECTOR, selector),
        ]))
    return Node(defs.CLIENT_APPLICATION, children=[ftd])


def operations(*events: Node) -> Node:
    return Node(defs.CLIENT_APPLICATION, children=[Node(defs.DATA_OPERATION, children=list(events))])


def keypress(assignment: int, command: int) -> Node:
    return operations(Node(defs.OP_KEYPRESS, attributes=[
        Attribute.from_u16(defs.KEY_ASSIGNMENT, assignment),
        Attribute.from_u16(defs.KEY_COMMAND, command),
    ]))


def switch_event(name: str, notch: int) -> Node:
    return operations(Node(defs.OP_SWITCH, attributes=[
        Attribute.from_str(defs.SWITCH_NAME, name),
        Attribute.from_i16(defs.SWITCH_NOTCH, notch),
    ]))


def door_lamps(on: int) -> list:
    return [switch_input(a, on) for a in (22, 23, 24, 25)] + [switch_input(27, on), switch_input(26, 1 - on)]


def side_lamps(side: PanelSide) -> list:
    return [
        switch_input(31, int(side == PanelSide.LEFT)),
        switch_input(32, int(side == PanelSide.RIGHT)),
        switch_input(33, int(side == PanelSide.BOTH)),
    ]


# -----------------------------
# First cycle / idempotence
# -----------------------------

def test_first_message_initializes_defaults_and_sets_all_lamps():
    state, inputs = transition(None, Node(0x0099), LAYOUT)

    assert state == PanelState(
        side_selector_hardware=SideSelection.NONE,
        door_status=0,
        release_switch_notch=1,
        side_selector_panel=PanelSide.RIGHT,
        manual_override_active=False,
    )
    # Release neutral and simulator selector off: nothing to toggle.
    assert inputs == door_lamps(0) + side_lamps(PanelSide.RIGHT)


def test_reapplying_same_message_yields_no_inputs():
    msg = cab_data(speed=12.0, doors=(1, 1, 3))
    state1, first = transition(None, msg, LAYOUT)
    state2, second = transition(state1, msg, LAYOUT)

    assert first
    assert second == []
    assert state2 == state1


# -----------------------------
# Telemetry
# -----------------------------

def test_door_status_is_max_of_left_and_right():
    state, _ = transition(STABLE, cab_data(doors=(3, 5, 0)), LAYOUT)
    assert state.door_status == 5

    state, _ = transition(state, cab_data(doors=(4, 0, 0)), LAYOUT)
    assert state.door_status == 4


def test_door_status_needs_both_sides_reported():
    msg = cab_data()
    msg.children[0].children.append(Node(defs.FTD_DOOR_STATUS, attributes=[Attribute.from_u8(defs.DOOR_LEFT, 2)]))
    prev = replace(STABLE, door_status=1)

    state, inputs = transition(prev, msg, LAYOUT)

    assert state.door_status == 1
    assert inputs == []


def test_hardware_side_selector_is_mirrored():
    state, inputs = transition(STABLE, cab_data(doors=(0, 0, 2)), LAYOUT)
    assert state.side_selector_hardware is SideSelection.RIGHT
    # Mirroring alone does not reconcile.
    assert inputs == []

    state, _ = transition(state, cab_data(doors=(0, 0, 7)), LAYOUT)
    assert state.side_selector_hardware == SideSelection.BOTH


def test_wrongly_sized_speed_is_treated_as_not_reported():
    msg = cab_data()
    msg.children[0].attributes.append(Attribute.from_u16(defs.FTD_SPEED, 500))
    prev = replace(STABLE, side_selector_panel=PanelSide.LEFT)

    state, inputs = transition(prev, msg, LAYOUT)

    assert state == prev
    assert inputs == []


def test_scenario_a_doors_open_lamps():
    state, inputs = transition(STABLE, cab_data(doors=(2, 0, 0)), LAYOUT)

    assert state.door_status == 2
    assert inputs == door_lamps(1)
    assert state.manual_override_active is False


def test_doors_closing_clears_manual_override():
    prev = replace(STABLE, door_status=2, manual_override_active=True)

    state, inputs = transition(prev, cab_data(doors=(0, 0, 0)), LAYOUT)

    assert inputs == door_lamps(0)
    assert state.manual_override_active is False


def test_scenario_c_departure_resets_side_once_per_door_cycle():
    prev = replace(STABLE, side_selector_panel=PanelSide.LEFT)

    state, inputs = transition(prev, cab_data(speed=10.0), LAYOUT)
    assert state.side_selector_panel is PanelSide.RIGHT
    assert state.manual_override_active is True
    assert inputs == side_lamps(PanelSide.RIGHT)

    # Operator picks left again while still moving: no second reset.
    state, _ = transition(state, keypress(EXTERNAL, LEFT_DOWN), LAYOUT)
    assert state.side_selector_panel is PanelSide.LEFT
    state, inputs = transition(state, cab_data(speed=12.0), LAYOUT)
    assert state.side_selector_panel is PanelSide.LEFT
    assert inputs == []

    # Doors open and close again: the next departure resets once more.
    state, _ = transition(state, cab_data(doors=(1, 0, 0)), LAYOUT)
    state, _ = transition(state, cab_data(doors=(0, 0, 0)), LAYOUT)
    assert state.manual_override_active is False
    state, _ = transition(state, cab_data(speed=12.0), LAYOUT)
    assert state.side_selector_panel is PanelSide.RIGHT


def test_speed_below_threshold_does_not_trigger_reset():
    prev = replace(STABLE, side_selector_panel=PanelSide.BOTH)
    state, inputs = transition(prev, cab_data(speed=5.0 / 3.6 - 0.01), LAYOUT)

    assert state == prev
    assert inputs == []


# -----------------------------
# Internal channel echo
# -----------------------------

@pytest.mark.parametrize("down", [LEFT_DOWN, RIGHT_DOWN, CLOSE_DOWN])
def test_internal_down_is_released_exactly_once(down):
    state, inputs = transition(STABLE, keypress(INTERNAL, down), LAYOUT)

    assert inputs == [key_input(INTERNAL, down + 1)]
    assert state == STABLE


@pytest.mark.parametrize("command", [LEFT_DOWN + 1, TOGGLE_DOWN, 1])
def test_internal_other_commands_are_ignored(command):
    _, inputs = transition(STABLE, keypress(INTERNAL, command), LAYOUT)
    assert inputs == []


# -----------------------------
# Legacy keyboard channel
# -----------------------------

@pytest.mark.parametrize("notch, target", [(0, 1), (1, 0), (2, 0)])
def test_toggle_flips_release_switch(notch, target):
    prev = replace(STABLE, release_switch_notch=notch)

    state, inputs = transition(prev, keypress(EXTERNAL, TOGGLE_DOWN), LAYOUT)

    assert inputs == [switch_input(34, target)]
    # The simulator reports the new notch back; no direct assignment.
    assert state.release_switch_notch == notch


def test_rotation_tables():
    assert rotate(ROTATE_LEFT, PanelSide.RIGHT) is PanelSide.LEFT
    assert rotate(ROTATE_LEFT, PanelSide.LEFT) is PanelSide.BOTH
    assert rotate(ROTATE_LEFT, PanelSide.BOTH) is PanelSide.RIGHT

    assert rotate(ROTATE_RIGHT, PanelSide.LEFT) is PanelSide.RIGHT
    assert rotate(ROTATE_RIGHT, PanelSide.RIGHT) is PanelSide.BOTH
    assert rotate(ROTATE_RIGHT, PanelSide.BOTH) is PanelSide.LEFT


def test_rotation_leaves_unknown_values_alone():
    assert rotate(ROTATE_LEFT, 0) == 0
    assert rotate(ROTATE_RIGHT, 7) == 7


def test_left_key_rotates_panel_and_updates_lamps():
    state, inputs = transition(STABLE, keypress(EXTERNAL, LEFT_DOWN), LAYOUT)

    assert state.side_selector_panel is PanelSide.LEFT
    # Release in neutral: simulator selector stays off.
    assert inputs == side_lamps(PanelSide.LEFT)


def test_right_key_rotates_panel_and_reconciles_when_released():
    prev = replace(STABLE, release_switch_notch=0, side_selector_hardware=SideSelection.RIGHT)

    state, inputs = transition(prev, keypress(EXTERNAL, RIGHT_DOWN), LAYOUT)

    assert state.side_selector_panel is PanelSide.BOTH
    assert inputs == side_lamps(PanelSide.BOTH) + [key_input(INTERNAL, LEFT_DOWN)]


def test_close_key_moves_auto_switch_and_back():
    _, inputs = transition(STABLE, keypress(EXTERNAL, CLOSE_DOWN), LAYOUT)
    assert inputs == [switch_input(35, 0)]

    _, inputs = transition(STABLE, keypress(EXTERNAL, CLOSE_DOWN + 1), LAYOUT)
    assert inputs == [switch_input(35, 1)]


@pytest.mark.parametrize("command", [TOGGLE_DOWN + 1, LEFT_DOWN + 1, 1, 999])
def test_other_legacy_commands_have_no_effect(command):
    state, inputs = transition(STABLE, keypress(EXTERNAL, command), LAYOUT)
    assert state == STABLE
    assert inputs == []


def test_keypress_on_unrelated_assignment_is_ignored():
    state, inputs = transition(STABLE, keypress(3, LEFT_DOWN), LAYOUT)
    assert state == STABLE
    assert inputs == []


# -----------------------------
# Named switches
# -----------------------------

def test_scenario_b_release_reconciles_right_side():
    state, inputs = transition(STABLE, switch_event("Tuerfreigabe", 0), LAYOUT)

    assert state.release_switch_notch == 0
    assert inputs == [key_input(INTERNAL, RIGHT_DOWN)]


def test_release_back_to_neutral_withdraws_simulator_selector():
    prev = replace(
        STABLE,
        release_switch_notch=0,
        side_selector_panel=PanelSide.BOTH,
        side_selector_hardware=SideSelection.BOTH,
    )

    state, inputs = transition(prev, switch_event("Tuerfreigabe", 1), LAYOUT)

    assert state.release_switch_notch == 1
    assert inputs == [key_input(INTERNAL, LEFT_DOWN), key_input(INTERNAL, RIGHT_DOWN)]


def test_release_lock_notch_also_requests_panel_side():
    prev = replace(STABLE, side_selector_panel=PanelSide.LEFT)

    _, inputs = transition(prev, switch_event("Tuerfreigabe", 2), LAYOUT)

    assert inputs == [key_input(INTERNAL, LEFT_DOWN)]


def test_all_close_notch_presses_forced_close():
    _, inputs = transition(STABLE, switch_event("Tueren Automatik/Alle zu", 0), LAYOUT)
    assert inputs == [key_input(INTERNAL, CLOSE_DOWN)]

    _, inputs = transition(STABLE, switch_event("Tueren Automatik/Alle zu", 2), LAYOUT)
    assert inputs == []


@pytest.mark.parametrize("start, name, side", [
    (PanelSide.RIGHT, "Tuerseitenvorwahl links", PanelSide.LEFT),
    (PanelSide.LEFT, "Tuerseitenvorwahl rechts", PanelSide.RIGHT),
    (PanelSide.RIGHT, "Tuerseitenvorwahl links+rechts", PanelSide.BOTH),
])
def test_preselect_engaged_sets_side_and_override(start, name, side):
    prev = replace(STABLE, side_selector_panel=start)

    state, inputs = transition(prev, switch_event(name, 1), LAYOUT)

    assert state.manual_override_active is True
    assert state.side_selector_panel is side
    assert inputs == side_lamps(side)


def test_preselect_released_only_marks_override():
    state, inputs = transition(STABLE, switch_event("Tuerseitenvorwahl links", 0), LAYOUT)

    assert state == replace(STABLE, manual_override_active=True)
    assert inputs == []


def test_scenario_d_unknown_switch_name_is_ignored():
    state, inputs = transition(STABLE, switch_event("Sander", 1), LAYOUT)
    assert state == STABLE
    assert inputs == []


def test_unknown_top_level_and_child_ids_are_ignored():
    msg = Node(defs.CLIENT_APPLICATION, children=[Node(0x0042, children=[Node(defs.FTD_DOOR_STATUS)])])

    state, inputs = transition(STABLE, msg, LAYOUT)
    assert state == STABLE
    assert inputs == []

    state, inputs = transition(STABLE, Node(0x0003, children=cab_data(doors=(5, 5, 0)).children), LAYOUT)
    assert state == STABLE
    assert inputs == []


def test_events_in_one_message_apply_in_order():
    msg = operations(
        Node(defs.OP_KEYPRESS, attributes=[
            Attribute.from_u16(defs.KEY_ASSIGNMENT, EXTERNAL),
            Attribute.from_u16(defs.KEY_COMMAND, LEFT_DOWN),
        ]),
        Node(defs.OP_KEYPRESS, attributes=[
            Attribute.from_u16(defs.KEY_ASSIGNMENT, EXTERNAL),
            Attribute.from_u16(defs.KEY_COMMAND, LEFT_DOWN),
        ]),
        Node(defs.OP_KEYPRESS, attributes=[
            Attribute.from_u16(defs.KEY_ASSIGNMENT, INTERNAL),
            Attribute.from_u16(defs.KEY_COMMAND, RIGHT_DOWN),
        ]),
    )

    state, inputs = transition(STABLE, msg, LAYOUT)

    # Right -> Left -> Both; echo first, lamps after all inputs are applied.
    assert state.side_selector_panel is PanelSide.BOTH
    assert inputs == [key_input(INTERNAL, RIGHT_DOWN + 1)] + side_lamps(PanelSide.BOTH)
