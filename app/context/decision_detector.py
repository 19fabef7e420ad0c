from __future__ import annotations

DECISION_KEYWORDS = (
    "chose",
    "decided",
    "picked",
    "selected",
    "went with",
    "instead of",
    "rather than",
    "could have",
    "should have",
    "what if",
    "turned down",
    "accepted",
    "rejected",
    "moved to",
    "stayed",
    "left",
    "quit",
    "started",
)


def looks_like_decision(text: str) -> bool:
    """Keyword heuristic: does this utterance describe a life decision?

    Plain substring matching, so "leftover" counts as "left". Misses and false
    hits are accepted; the result only decides what lands in the decision log.
    """
    lowered = text.lower()
    return any(keyword in lowered for keyword in DECISION_KEYWORDS)
