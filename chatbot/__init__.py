"""
Chatbot package — Clinic Finder Conversational Engine.
"""

from chatbot.states import DialogState
from chatbot.ranker import Facility, QueryPoint, RankedResult, DistanceUnit, distance, rank
from chatbot.catalog import ClinicCatalog
from chatbot.conversation_manager import ConversationManager
from chatbot.llm_engine import LLMEngine

__all__ = [
    "DialogState",
    "Facility",
    "QueryPoint",
    "RankedResult",
    "DistanceUnit",
    "distance",
    "rank",
    "ClinicCatalog",
    "ConversationManager",
    "LLMEngine",
]
