from dataclasses import dataclass

import pytest

from quizgen.services import scoring
from quizgen.services.scoring import FeedbackBand


@dataclass
class Answer:
    is_correct: bool


def test_reference_values():
    assert scoring.xp(2, 5) == 10
    assert scoring.percentage(2, 3) == 67
    assert scoring.passed(67, 60) is True
    assert scoring.passed(40, 60) is False


def test_defaults():
    assert scoring.xp(3) == 15
    assert scoring.passed(60) is True
    assert scoring.passed(59) is False


def test_percentage_rounds_half_up():
    assert scoring.percentage(1, 8) == 13
    assert scoring.percentage(1, 3) == 33


def test_percentage_of_empty_quiz_is_zero():
    assert scoring.percentage(0, 0) == 0


@pytest.mark.parametrize(
    "percent, band",
    [
        (100, FeedbackBand.PERFECT),
        (99, FeedbackBand.EXCELLENT),
        (80, FeedbackBand.EXCELLENT),
        (67, FeedbackBand.GOOD),
        (60, FeedbackBand.GOOD),
        (40, FeedbackBand.FAIR),
        (39, FeedbackBand.NEEDS_PRACTICE),
        (0, FeedbackBand.NEEDS_PRACTICE),
    ],
)
def test_feedback_bands(percent, band):
    assert scoring.feedback(percent) is band
    assert scoring.feedback(percent).message


def test_feedback_is_monotonic():
    order = list(reversed(list(FeedbackBand)))
    ranks = [order.index(scoring.feedback(p)) for p in range(0, 101)]
    assert ranks == sorted(ranks)


def test_score_counts_correct_answers():
    answers = [Answer(True), Answer(False), Answer(True)]
    assert scoring.score(answers) == 2
    assert scoring.score([]) == 0
