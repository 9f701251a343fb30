"""Tests for the dialog state machine."""

from chatbot.states import STATE_LABELS, VALID_TRANSITIONS, DialogState, is_in_dialog, is_valid_transition


def test_every_state_has_transitions_and_label():
    for state in DialogState:
        assert state.value in VALID_TRANSITIONS
        assert state.value in STATE_LABELS


def test_waterfall_order():
    assert is_valid_transition("idle", "awaiting_location")
    assert is_valid_transition("awaiting_location", "awaiting_selection")
    assert is_valid_transition("awaiting_selection", "completed")


def test_cannot_skip_the_location_step():
    assert not is_valid_transition("idle", "awaiting_selection")
    assert not is_valid_transition("awaiting_location", "completed")


def test_idle_is_always_reachable():
    for state in DialogState:
        assert is_valid_transition(state.value, "idle")


def test_is_in_dialog():
    assert is_in_dialog("awaiting_location")
    assert is_in_dialog("awaiting_selection")
    assert not is_in_dialog("idle")
    assert not is_in_dialog("completed")
