"""
Configuration module for the Clinic Finder Chatbot.
Loads environment variables and provides application-wide settings.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# ── API Keys ───────────────────────────────────────────────────────────────
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

# ── MongoDB ────────────────────────────────────────────────────────────────
MONGODB_URI = os.getenv("MONGODB_URI", "")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "clinic_finder_chatbot")
MONGODB_COLLECTION = os.getenv("MONGODB_COLLECTION", "user_profiles")

# ── Clinic Catalog ─────────────────────────────────────────────────────────
CLINIC_CATALOG_PATH = os.getenv(
    "CLINIC_CATALOG_PATH", str(BASE_DIR / "data" / "clinics.txt")
)
TOP_K_CLINICS = int(os.getenv("TOP_K_CLINICS", "3"))
DISTANCE_UNIT = os.getenv("DISTANCE_UNIT", "miles")  # miles | kilometers | nautical_miles

# ── Intent Routing ─────────────────────────────────────────────────────────
INTENT_CONFIDENCE_THRESHOLD = float(os.getenv("INTENT_CONFIDENCE_THRESHOLD", "0.5"))

# ── Application Settings ──────────────────────────────────────────────────
APP_TITLE = "🏥 Clinic Finder"
APP_DESCRIPTION = (
    "A conversational assistant that finds the clinics nearest to you "
    "and remembers the one you pick."
)

# ── LLM Settings ──────────────────────────────────────────────────────────
MAX_CONVERSATION_TURNS = 50
TEMPERATURE = 0.0  # Intent classification should be deterministic
TOP_P = 0.9
MAX_OUTPUT_TOKENS = 256
