"""
Conversation Manager — Core Orchestrator.

Runs each conversation turn of the clinic finder:
  1. Continues the active dialog, if the user is mid-waterfall
  2. Otherwise asks the intent recognizer what the user wants
  3. Dispatches "find clinic" / "set clinic" into the three-step dialog
  4. Ranks clinics by distance from the user's location
  5. Remembers the user's location and chosen clinic in the profile store

Architecture:
  User Input
      │
      ▼
  ┌──────────────┐
  │  Active      │──── YES ───▶ location step / selection step
  │  Dialog?     │
  └──────┬───────┘
         │ NO
         ▼
  ┌──────────────┐
  │  LLM Engine  │──── {"intent", "score"}
  │  (Gemini)    │
  └──────┬───────┘
         │ score ≥ threshold
         ▼
  ┌──────────────┐
  │  Facility    │──── top-K nearest clinics
  │  Ranker      │
  └──────┬───────┘
         │
         ▼
  ┌──────────────┐
  │  MongoDB     │──── user profile (location, option, preferred clinic)
  │  (optional)  │
  └──────────────┘
"""

import uuid

from chatbot.catalog import ClinicCatalog
from chatbot.errors import InvalidInput
from chatbot.llm_engine import INTENT_FIND, INTENT_GREETING, INTENT_SET, LLMEngine
from chatbot.ranker import DistanceUnit, coerce_unit, parse_query_point, rank
from chatbot.states import STATE_LABELS, is_in_dialog, is_valid_transition
from database.mongo_client import MongoDBClient
import config


WELCOME_TEXT = (
    "👋 **Welcome to ClinicFinder!**\n\n"
    "You can try asking me **\"Find me a clinic\"** or **\"Set my clinic\"**."
)

NOT_UNDERSTOOD_TEXT = (
    "I do not understand your question, you can try to ask **\"Find me a clinic\"**."
)

LOCATION_FORMAT_HINT = (
    "Please send your location as `longitude|latitude`, "
    "for example `-118.25|34.01`, or type `cancel` to stop."
)

CANCELLED_TEXT = "OK, I stopped the clinic search. Ask me to **\"Find me a clinic\"** any time."

SEARCH_UNAVAILABLE_TEXT = (
    "⚠️ Clinic search is unavailable right now. Please try again later."
)

CANCEL_WORDS = frozenset({"cancel", "stop", "quit", "exit"})


def create_initial_context(user_id: str | None = None) -> dict:
    """Create a fresh conversation context."""
    return {
        "user_id": user_id or str(uuid.uuid4()),
        "state": "idle",
        "dialog": None,           # intent that started the active dialog
        "location": None,
        "results": [],
        "selected": None,
        "history": [],
        "turns": 0,               # accepted user messages, never trimmed
    }


def format_distance(value: float, unit: str) -> str:
    return f"{value:.2f} {DistanceUnit(unit).abbreviation}"


def format_clinic(clinic: dict) -> str:
    """Render one clinic record as markdown."""
    return (
        f"**{clinic['name']}**\n"
        f"🩺 {clinic['specialty']}\n"
        f"📍 {clinic['street']}, {clinic['city']}, {clinic['region']} {clinic['postal_code']}\n"
        f"📞 {clinic['phone']}"
    )


class ConversationManager:
    """
    Orchestrates the clinic finder conversation.

    This class keeps no per-user state of its own: context is passed in and
    returned (Gradio's gr.State carries it), and longer-lived data goes to the
    profile store.
    """

    def __init__(
        self,
        llm_engine: LLMEngine,
        db_client: MongoDBClient,
        catalog: ClinicCatalog,
        top_k: int | None = None,
        unit: str | None = None,
        threshold: float | None = None,
    ):
        self.llm = llm_engine
        self.db = db_client
        self.catalog = catalog
        self.top_k = config.TOP_K_CLINICS if top_k is None else top_k
        self.unit = coerce_unit(unit or config.DISTANCE_UNIT)
        self.threshold = config.INTENT_CONFIDENCE_THRESHOLD if threshold is None else threshold

    def process_message(self, user_message: str, context: dict) -> tuple[str, dict]:
        """
        Process a user message and return (bot_response, updated_context).

        This is the main entry point for each conversation turn.
        """
        user_message = (user_message or "").strip()
        if not user_message:
            return "Please type a message to get started.", context

        # ── Step 0: Enforce conversation turn limit ─────────────────────
        turn_count = context.get("turns", 0)
        if turn_count >= config.MAX_CONVERSATION_TURNS:
            return (
                "⚠️ This conversation has reached the maximum number of turns. "
                "Please click **🔄 New Conversation** to start fresh.",
                context,
            )

        context["turns"] = turn_count + 1
        context["history"].append({"role": "user", "content": user_message})

        MAX_HISTORY = 24
        if len(context["history"]) > MAX_HISTORY:
            context["history"] = context["history"][-MAX_HISTORY:]

        # ── Step 1: Continue the active dialog, if any ─────────────────
        state = context["state"]
        if is_in_dialog(state) and user_message.lower() in CANCEL_WORDS:
            response = self._cancel_dialog(context)
        elif state == "awaiting_location":
            response = self._location_step(user_message, context)
        elif state == "awaiting_selection":
            response = self._selection_step(user_message, context)

        # ── Step 2: No active dialog, route on intent ──────────────────
        elif user_message.lower() == "welcome":
            response = WELCOME_TEXT
        else:
            response = self._route_intent(user_message, context)

        context["history"].append({"role": "assistant", "content": response})
        return response, context

    def get_greeting(self) -> str:
        """Return the initial greeting message."""
        return WELCOME_TEXT

    # ── Intent Routing ──────────────────────────────────────────────────

    def _route_intent(self, user_message: str, context: dict) -> str:
        result = self.llm.recognize(user_message)
        intent = result.get("intent")
        score = result.get("score", 0.0)

        if not intent or intent == "None" or score < self.threshold:
            return NOT_UNDERSTOOD_TEXT

        if intent == INTENT_GREETING:
            return WELCOME_TEXT

        if intent == INTENT_FIND:
            profile = self.db.get_user_profile(context["user_id"])
            preferred = profile.get("preferred_clinic")
            if preferred:
                context["selected"] = preferred
                self._transition(context, "completed")
                return "Here is your pre-set clinic:\n\n" + format_clinic(preferred)
            return self._begin_dialog(
                context,
                INTENT_FIND,
                "You do not have a pre-set clinic, we will suggest clinics "
                "near you based on your GPS location.",
            )

        if intent == INTENT_SET:
            return self._begin_dialog(
                context,
                INTENT_SET,
                "Let's set your clinic. We will suggest clinics near you "
                "based on your GPS location.",
            )

        return NOT_UNDERSTOOD_TEXT

    def _cancel_dialog(self, context: dict) -> str:
        context["dialog"] = None
        context["results"] = []
        self._transition(context, "idle")
        return CANCELLED_TEXT

    def _begin_dialog(self, context: dict, intent: str, intro: str) -> str:
        context["dialog"] = intent
        context["results"] = []
        context["selected"] = None
        self._transition(context, "awaiting_location")
        return f"{intro}\n\n{LOCATION_FORMAT_HINT}"

    # ── Dialog Steps ────────────────────────────────────────────────────

    def _location_step(self, user_message: str, context: dict) -> str:
        """Rank clinics around the user's location and offer the top K."""
        try:
            point = parse_query_point(user_message)
        except InvalidInput as e:
            print(f"[Dialog] Invalid location from {context['user_id']}: {e}")
            return f"⚠️ I couldn't read that location. {LOCATION_FORMAT_HINT}"

        try:
            results = rank(self.catalog.snapshot(), point, self.unit, self.top_k)
        except InvalidInput as e:
            # The location was fine; the catalog or settings are not
            print(f"[Dialog] ❌ Clinic search failed: {e}")
            context["dialog"] = None
            self._transition(context, "idle")
            return SEARCH_UNAVAILABLE_TEXT

        context["location"] = user_message
        context["results"] = [r.to_dict() for r in results]

        profile = self.db.get_user_profile(context["user_id"])
        profile["location"] = user_message
        self.db.save_user_profile(context["user_id"], profile)

        self._transition(context, "awaiting_selection")

        lines = [f"Here are the {len(results)} clinics nearest to you:\n"]
        for i, result in enumerate(results, start=1):
            clinic = result.facility
            lines.append(
                f"{i}. **{clinic.name}** — {clinic.specialty}  \n"
                f"   {clinic.address} · {clinic.phone} · "
                f"{format_distance(result.distance, result.unit.value)}"
            )
        lines.append(f"\nReply with a number from 1 to {len(results)} to pick a clinic.")
        return "\n".join(lines)

    def _selection_step(self, user_message: str, context: dict) -> str:
        """Record the user's pick among the offered clinics."""
        results = context["results"]
        try:
            option = int(user_message.strip().rstrip("."))
        except ValueError:
            option = None

        if option is None or not 1 <= option <= len(results):
            return f"Please reply with a number from 1 to {len(results)}, or type `cancel` to stop."

        chosen = results[option - 1]
        clinic = chosen["facility"]
        context["selected"] = clinic

        profile = self.db.get_user_profile(context["user_id"])
        profile["option"] = option
        if context["dialog"] == INTENT_SET:
            profile["preferred_clinic"] = clinic
        saved = self.db.save_user_profile(context["user_id"], profile)

        response = (
            "Here is the information about selected clinic.\n\n"
            + format_clinic(clinic)
            + f"\n📏 {format_distance(chosen['distance'], chosen['unit'])} away"
        )
        if context["dialog"] == INTENT_SET:
            if saved:
                response += "\n\n✅ This is now your pre-set clinic."
            else:
                response += "\n\n⚠️ I couldn't save this as your pre-set clinic right now."

        context["dialog"] = None
        self._transition(context, "completed")
        return response

    @staticmethod
    def _transition(context: dict, next_state: str):
        if not is_valid_transition(context["state"], next_state):
            raise RuntimeError(
                f"Invalid dialog transition {context['state']} -> {next_state}"
            )
        context["state"] = next_state

    # ── Sidebar ─────────────────────────────────────────────────────────

    def get_status_displays(self, context: dict) -> dict:
        """Generate formatted status information for the Gradio sidebar."""
        state = context.get("state", "idle")
        state_md = STATE_LABELS.get(state, state)
        if is_in_dialog(state) and context.get("dialog") == INTENT_SET:
            state_md += " (setting clinic)"

        location = context.get("location")
        location_md = f"📍 `{location}`" if location else "*No location yet*"

        results = context.get("results") or []
        if results:
            clinics_md = "\n".join(
                f"{i}. {r['facility']['name']} ({format_distance(r['distance'], r['unit'])})"
                for i, r in enumerate(results, start=1)
            )
        else:
            clinics_md = "*No clinics ranked yet*"

        selected = context.get("selected")
        selected_md = format_clinic(selected) if selected else "*No clinic selected*"

        return {
            "status": state_md,
            "location": location_md,
            "clinics": clinics_md,
            "selected": selected_md,
        }
