"""
Intent Matcher — deterministic keyword scoring.

Responsibility:
- Score an utterance against every enabled intent
- Pick the best intent above the confidence threshold

Prohibitions:
- No I/O, no state; pure function of its inputs
"""

from shared.models import Intent

CONFIDENCE_THRESHOLD = 0.3


def score_intent(message: str, intent: Intent) -> float:
    """
    Score in [0, 1]: each keyword found in `message` is worth 1 point,
    2 when the message starts with it; normalized by keyword count.
    `message` is expected lower-cased and trimmed.
    """
    total_keywords = len(intent.keywords)
    if total_keywords == 0:
        return 0.0

    points = 0
    for keyword in intent.keywords:
        keyword_lower = keyword.lower()
        if keyword_lower in message:
            points += 2 if message.startswith(keyword_lower) else 1

    return min(points / total_keywords, 1.0)


def detect_intent(message: str, intents: list[Intent]) -> Intent | None:
    """Best enabled intent scoring above CONFIDENCE_THRESHOLD; first one wins ties."""
    normalized = (message or "").lower().strip()

    best_match: Intent | None = None
    max_score = 0.0
    for intent in intents:
        if not intent.enabled:
            continue
        score = score_intent(normalized, intent)
        if score > max_score and score > CONFIDENCE_THRESHOLD:
            max_score = score
            best_match = intent

    return best_match
