# backend/app/agents/intent_classifier.py

from typing import FrozenSet

from app.models.agent_models import Intent


# -------------------------------------------------------------
# KEYWORD VOCABULARIES (substring match, case-insensitive)
# -------------------------------------------------------------
FLIGHT_KEYWORDS = ("flight", "fly", "airline")
HOTEL_KEYWORDS = ("hotel", "accommodation", "stay")


def classify(text: str) -> FrozenSet[Intent]:
    """
    Map a user message to the topics it touches.

    Always returns a non-empty set: {general} when no vocabulary matches.
    Plain substring membership, so "stay" also matches "stayed".
    """
    lowered = (text or "").lower()
    intents = set()

    if any(keyword in lowered for keyword in FLIGHT_KEYWORDS):
        intents.add(Intent.FLIGHT)
    if any(keyword in lowered for keyword in HOTEL_KEYWORDS):
        intents.add(Intent.HOTEL)
    if not intents:
        intents.add(Intent.GENERAL)

    return frozenset(intents)
