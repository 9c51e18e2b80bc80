"""Keyword heuristics behind topic, sentiment, intent and mood tracking."""

from typing import List, Sequence
import math
import re

from smartagent.domain.models.conversation import ConversationMood, Sentiment

TOPIC_KEYWORDS = [
    "component",
    "bug",
    "feature",
    "style",
    "layout",
    "error",
    "test",
    "performance",
    "accessibility",
    "documentation",
]

POSITIVE_WORDS = ["thanks", "great", "perfect", "excellent", "good", "helpful"]
NEGATIVE_WORDS = ["error", "wrong", "bad", "issue", "problem", "confused"]

CONTEXT_NEEDS = [
    (("component",), "component-patterns"),
    (("style", "design"), "design-tokens"),
    (("layout",), "layout-system"),
    (("accessibility",), "accessibility-standards"),
]

MULTIPLE_REQUIREMENTS = re.compile(r"\b(and|also)\b", re.IGNORECASE)


def estimate_tokens(content: str) -> int:
    """Roughly four characters per token"""
    return math.ceil(len(content) / 4)


def extract_topics(content: str) -> List[str]:
    lowered = content.lower()
    return [keyword for keyword in TOPIC_KEYWORDS if keyword in lowered]


def analyze_sentiment(content: str) -> Sentiment:
    """Net count of positive against negative words; ties are neutral"""

    lowered = content.lower()
    score = sum(1 for word in POSITIVE_WORDS if word in lowered)
    score -= sum(1 for word in NEGATIVE_WORDS if word in lowered)

    if score > 0:
        return Sentiment.POSITIVE
    if score < 0:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def determine_mood(sentiment: Sentiment, engagement: int, momentum: int, topic_count: int) -> ConversationMood:
    """First matching rule wins"""

    if sentiment == Sentiment.NEGATIVE or momentum < 30:
        return ConversationMood.DEBUGGING
    if engagement > 80 and momentum > 70:
        return ConversationMood.FOCUSED
    if topic_count > 5:
        return ConversationMood.EXPLORATORY
    if sentiment == Sentiment.POSITIVE and momentum > 60:
        return ConversationMood.LEARNING
    return ConversationMood.COLLABORATIVE


def dominant_topic(messages: Sequence[str]) -> str:
    counts = {}
    for content in messages:
        for topic in extract_topics(content):
            counts[topic] = counts.get(topic, 0) + 1

    best, best_count = "general", 0
    for topic, count in counts.items():
        if count > best_count:
            best, best_count = topic, count
    return best


def user_intent(last_message: str) -> str:
    lowered = last_message.lower()
    if "create" in lowered or "build" in lowered:
        return "create"
    if "fix" in lowered or "error" in lowered:
        return "fix"
    if "explain" in lowered or "how" in lowered:
        return "learn"
    if "refactor" in lowered or "improve" in lowered:
        return "refactor"
    return "general"


def assess_complexity(last_message: str) -> str:
    word_count = len(last_message.split())
    if word_count > 50 or MULTIPLE_REQUIREMENTS.search(last_message):
        return "complex"
    if word_count > 20:
        return "moderate"
    return "simple"


def context_needs(last_message: str) -> List[str]:
    lowered = last_message.lower()
    return [need for keywords, need in CONTEXT_NEEDS if any(k in lowered for k in keywords)]
