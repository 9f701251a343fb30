"""
LLM Engine — Google Gemini Intent Recognition (google.genai SDK).

Classifies each user utterance into one of the bot's intents:
  - Builds the classification prompt
  - Requests a structured JSON answer {"intent": ..., "score": ...}
  - Parses the answer with fallback handling
"""

import json
import re
from google import genai
from google.genai import types
import config


INTENT_FIND = "clinic_find"
INTENT_SET = "clinic_set"
INTENT_GREETING = "greeting"
INTENT_NONE = "None"

KNOWN_INTENTS: tuple[str, ...] = (INTENT_FIND, INTENT_SET, INTENT_GREETING, INTENT_NONE)


# ── System Prompt ──────────────────────────────────────────────────────────

SYSTEM_PROMPT = """You are the intent recognizer for a clinic finder chatbot.
Classify the user's message into exactly ONE of these intents:

- clinic_find: the user wants to find, locate, or see a clinic, doctor, or
  medical provider (e.g. "Find me a clinic", "where is the nearest doctor?",
  "show my clinic")
- clinic_set: the user wants to choose, set, change, or save their preferred
  clinic (e.g. "Set my clinic", "I want to change my clinic")
- greeting: hello, hi, good morning, and similar small talk openers
- None: anything else

Also give a confidence score between 0 and 1 for your choice.

## RESPONSE FORMAT
You MUST respond with ONLY a valid JSON object (no markdown, no extra text):
{"intent": "clinic_find" | "clinic_set" | "greeting" | "None", "score": 0.0-1.0}
"""


def build_intent_prompt(user_message: str) -> str:
    """Build the per-turn classification prompt."""
    return f"""## USER MESSAGE
{user_message}

Respond with ONLY a valid JSON object."""


def fallback_intent() -> dict:
    """Intent returned whenever recognition fails."""
    return {"intent": INTENT_NONE, "score": 0.0}


def parse_intent_response(raw_text: str) -> dict:
    """Parse the LLM's JSON answer into {"intent": str, "score": float}."""
    parsed = None

    # Attempt 1: Direct JSON parse
    try:
        parsed = json.loads(raw_text)
    except (json.JSONDecodeError, TypeError):
        pass

    # Attempt 2: Extract from markdown code blocks
    if parsed is None and raw_text:
        json_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", raw_text, re.DOTALL)
        if json_match:
            try:
                parsed = json.loads(json_match.group(1))
            except json.JSONDecodeError:
                pass

    # Attempt 3: Find any JSON object in the text
    if parsed is None and raw_text:
        json_match = re.search(r"\{.*\}", raw_text, re.DOTALL)
        if json_match:
            try:
                parsed = json.loads(json_match.group(0))
            except json.JSONDecodeError:
                pass

    if not isinstance(parsed, dict):
        print(f"[LLM PARSE WARNING] Could not parse JSON: {str(raw_text)[:200]}")
        return fallback_intent()

    intent = str(parsed.get("intent") or INTENT_NONE).strip()
    # Labels are matched case-insensitively
    by_lower = {name.lower(): name for name in KNOWN_INTENTS}
    intent = by_lower.get(intent.lower(), INTENT_NONE)

    try:
        score = float(parsed.get("score", 0.0))
    except (TypeError, ValueError):
        score = 0.0
    if score != score:  # NaN
        score = 0.0
    score = max(0.0, min(1.0, score))

    return {"intent": intent, "score": score}


class LLMEngine:
    """Handles all interactions with the Google Gemini LLM."""

    def __init__(self, api_key: str | None = None, model_name: str | None = None):
        self.api_key = api_key or config.GOOGLE_API_KEY
        self.model_name = model_name or config.GEMINI_MODEL

        if not self.api_key:
            raise ValueError(
                "Google API key is required. Set GOOGLE_API_KEY in your .env file.\n"
                "Get a key at: https://aistudio.google.com/apikey"
            )

        self.client = genai.Client(api_key=self.api_key)

    def recognize(self, user_message: str) -> dict:
        """
        Return the top-scoring intent for a user message.

        Returns:
            {"intent": one of KNOWN_INTENTS, "score": float in [0, 1]}
        """
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=build_intent_prompt(user_message),
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    temperature=config.TEMPERATURE,
                    top_p=config.TOP_P,
                    max_output_tokens=config.MAX_OUTPUT_TOKENS,
                    response_mime_type="application/json",
                ),
            )
            return parse_intent_response(response.text)
        except Exception as e:
            print(f"[LLM ERROR] {e}")
            return fallback_intent()
