"""
Deterministic scoring helpers shared by the answer endpoint and the client session.
"""

import math
from enum import Enum
from typing import Iterable

XP_PER_CORRECT_ANSWER = 5
PASSING_SCORE_PERCENTAGE = 60


class FeedbackBand(str, Enum):
    PERFECT = "perfect"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_PRACTICE = "needs_practice"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    FeedbackBand.PERFECT: "Perfect! You mastered this topic!",
    FeedbackBand.EXCELLENT: "Excellent work! Keep it up!",
    FeedbackBand.GOOD: "Good job! You passed!",
    FeedbackBand.FAIR: "Not bad! Keep practicing!",
    FeedbackBand.NEEDS_PRACTICE: "Keep learning! You can do better!",
}


def percentage(correct: int, total: int) -> int:
    if total == 0:
        return 0
    # round half up, not Python's banker's rounding
    return math.floor(correct / total * 100 + 0.5)


def passed(percent: int, threshold: int = PASSING_SCORE_PERCENTAGE) -> bool:
    return percent >= threshold


def xp(correct: int, per_question: int = XP_PER_CORRECT_ANSWER) -> int:
    return correct * per_question


def feedback(percent: int) -> FeedbackBand:
    if percent == 100:
        return FeedbackBand.PERFECT
    if percent >= 80:
        return FeedbackBand.EXCELLENT
    if percent >= 60:
        return FeedbackBand.GOOD
    if percent >= 40:
        return FeedbackBand.FAIR
    return FeedbackBand.NEEDS_PRACTICE


def score(answers: Iterable) -> int:
    """Count correct entries in an answer ledger (anything with an ``is_correct`` attribute)."""
    return sum(1 for answer in answers if answer.is_correct)


def progress_percentage(current: int, total: int) -> int:
    return percentage(current, total)
