"""
Structural contract for a generated question set.

The candidate is whatever came out of ``json.loads`` on the AI response, so
nothing about its shape or field types is assumed. The validator never
raises; it reports the first violation it finds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

QUESTIONS_PER_MATERIAL = 3
OPTIONS_PER_QUESTION = 4
CORRECT_OPTIONS_PER_QUESTION = 1
OPTION_LETTERS = ("A", "B", "C", "D")


class ViolationReason(str, Enum):
    NOT_A_LIST = "not_a_list"
    WRONG_QUESTION_COUNT = "wrong_question_count"
    WRONG_OPTION_COUNT = "wrong_option_count"
    NO_CORRECT_OPTION = "no_correct_option"
    MULTIPLE_CORRECT_OPTIONS = "multiple_correct_options"
    MISSING_TEXT = "missing_text"
    INVALID_FIELD_TYPE = "invalid_field_type"
    INVALID_LETTERS = "invalid_letters"
    INVALID_QUESTION_NUMBERS = "invalid_question_numbers"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: ViolationReason | None = None
    detail: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: ViolationReason, detail: str) -> "ValidationResult":
        return cls(valid=False, reason=reason, detail=detail)


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_questions(candidate: Any) -> ValidationResult:
    if not isinstance(candidate, list):
        return ValidationResult.fail(ViolationReason.NOT_A_LIST, "questions must be a list")

    if len(candidate) != QUESTIONS_PER_MATERIAL:
        return ValidationResult.fail(
            ViolationReason.WRONG_QUESTION_COUNT,
            f"expected {QUESTIONS_PER_MATERIAL} questions, got {len(candidate)}",
        )

    for index, question in enumerate(candidate, start=1):
        result = _validate_question(index, question)
        if not result.valid:
            return result

    numbers = sorted(q.get("questionNumber") for q in candidate)
    if numbers != list(range(1, QUESTIONS_PER_MATERIAL + 1)):
        return ValidationResult.fail(
            ViolationReason.INVALID_QUESTION_NUMBERS,
            f"question numbers must be 1..{QUESTIONS_PER_MATERIAL}, got {numbers}",
        )

    return ValidationResult.ok()


def _validate_question(index: int, question: Any) -> ValidationResult:
    if not isinstance(question, dict):
        return ValidationResult.fail(ViolationReason.INVALID_FIELD_TYPE, f"question {index} is not an object")

    number = question.get("questionNumber")
    # bool is an int subclass; reject it explicitly.
    if not isinstance(number, int) or isinstance(number, bool):
        return ValidationResult.fail(
            ViolationReason.INVALID_FIELD_TYPE, f"question {index} has a non-integer questionNumber"
        )

    if not _has_text(question.get("questionText")):
        return ValidationResult.fail(ViolationReason.MISSING_TEXT, f"question {index} has no questionText")

    options = question.get("options")
    if not isinstance(options, list):
        return ValidationResult.fail(ViolationReason.INVALID_FIELD_TYPE, f"question {index} options is not a list")

    if len(options) != OPTIONS_PER_QUESTION:
        return ValidationResult.fail(
            ViolationReason.WRONG_OPTION_COUNT,
            f"question {index} has {len(options)} options, expected {OPTIONS_PER_QUESTION}",
        )

    for option in options:
        if not isinstance(option, dict):
            return ValidationResult.fail(
                ViolationReason.INVALID_FIELD_TYPE, f"question {index} has a non-object option"
            )
        if not _has_text(option.get("text")):
            return ValidationResult.fail(ViolationReason.MISSING_TEXT, f"question {index} has an option without text")
        if not isinstance(option.get("isCorrect"), bool):
            return ValidationResult.fail(
                ViolationReason.INVALID_FIELD_TYPE, f"question {index} has a non-boolean isCorrect"
            )

    correct = sum(1 for option in options if option["isCorrect"])
    if correct != CORRECT_OPTIONS_PER_QUESTION:
        reason = ViolationReason.NO_CORRECT_OPTION if correct == 0 else ViolationReason.MULTIPLE_CORRECT_OPTIONS
        return ValidationResult.fail(
            reason,
            f"question {index} has {correct} correct options, expected {CORRECT_OPTIONS_PER_QUESTION}",
        )

    letters = sorted(str(option.get("letter")) for option in options)
    if tuple(letters) != OPTION_LETTERS:
        return ValidationResult.fail(
            ViolationReason.INVALID_LETTERS,
            f"question {index} letters must be {''.join(OPTION_LETTERS)}, got {''.join(letters)}",
        )

    return ValidationResult.ok()
