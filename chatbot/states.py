"""
Dialog State Machine.

The "find clinic" dialog is a three-step waterfall:

  IDLE ──(clinic_find / clinic_set)──▶ AWAITING_LOCATION
                                             │ valid "<lon>|<lat>"
                                             ▼
                                      AWAITING_SELECTION
                                             │ valid option number
                                             ▼
                                         COMPLETED ──▶ (next intent)
"""

from enum import Enum


class DialogState(Enum):
    """All possible states of the clinic finder dialog."""

    IDLE = "idle"
    AWAITING_LOCATION = "awaiting_location"
    AWAITING_SELECTION = "awaiting_selection"
    COMPLETED = "completed"


# ── Valid State Transitions ────────────────────────────────────────────────

VALID_TRANSITIONS: dict[str, set[str]] = {
    "idle": {
        "idle",                   # unrecognized or informational turn
        "awaiting_location",
        "completed",              # pre-set clinic shown directly
    },
    "awaiting_location": {
        "awaiting_location",      # re-prompt on bad location
        "awaiting_selection",
        "idle",                   # user cancelled, or search unavailable
    },
    "awaiting_selection": {
        "awaiting_selection",     # re-prompt on bad option
        "completed",
        "idle",                   # user cancelled
    },
    "completed": {
        "idle",
        "completed",
        "awaiting_location",      # new search
    },
}


def is_valid_transition(current_state: str, next_state: str) -> bool:
    """Check if a state transition is valid. Returning to idle is always valid."""
    if next_state == "idle":
        return True
    allowed = VALID_TRANSITIONS.get(current_state, set())
    return next_state in allowed


def is_in_dialog(state: str) -> bool:
    """True while the waterfall is waiting on the user."""
    return state in (
        DialogState.AWAITING_LOCATION.value,
        DialogState.AWAITING_SELECTION.value,
    )


# ── State Display Labels ──────────────────────────────────────────────────

STATE_LABELS: dict[str, str] = {
    "idle": "👋 Ready",
    "awaiting_location": "📍 Waiting for Location",
    "awaiting_selection": "📋 Choosing a Clinic",
    "completed": "✅ Clinic Selected",
}
