"""
Terminal quiz player driven by QuizSession against a running quiz API.

Loads (and if necessary generates) the questions for one material, then asks
each question on stdin. Use --auto to always pick option A.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Iterable

from quizgen.core.config import get_settings
from quizgen.play.quiz_api_client import QuizApiClient
from quizgen.play.quiz_session import Phase, QuizSession, RetrievalPolicy


def _ask(question, auto: bool) -> int:
    print(f"\nQ{question.question_number}. {question.question_text}")
    for opt in question.options:
        print(f"  {opt.letter}. {opt.text}")
    by_letter = {opt.letter: opt.id for opt in question.options}
    if auto:
        return by_letter["A"]
    while True:
        choice = input("Your answer (A-D): ").strip().upper()
        if choice in by_letter:
            return by_letter[choice]
        print("Please enter A, B, C or D.")


async def play(material_id: int, user_id: str, base_url: str, *, auto: bool, policy: RetrievalPolicy) -> int:
    async with QuizApiClient(base_url) as api:
        session = QuizSession(material_id=material_id, user_id=user_id, api=api, content=api, policy=policy)
        state = await session.load()
        if state.phase is not Phase.READY:
            print(f"Quiz not ready ({state.phase.value}): {state.error}")
            return 1

        while True:
            question = session.current_question
            option_id = _ask(question, auto)
            result = await session.submit_answer(question.id, option_id)
            print("Correct!" if result.is_correct else "Wrong answer.", f"({result.xp_earned:+d} XP)")
            if session.state.is_completed:
                break
            session.next_question()

    summary = session.summary()
    print(
        f"\nScore: {summary.correct}/{summary.total} ({summary.percentage}%), "
        f"XP: {summary.xp}, passed={summary.passed}\n{summary.feedback.message}"
    )
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Play the quiz for one material.")
    parser.add_argument("material_id", type=int, help="Material identifier")
    parser.add_argument("--user-id", type=str, default="cli-user", help="Learner identifier")
    parser.add_argument("--base-url", type=str, default=settings.quiz_api_base_url, help="Quiz API base URL")
    parser.add_argument("--auto", action="store_true", help="Answer A to every question")
    parser.add_argument("--verbose", action="store_true", help="Log session transitions")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    policy = RetrievalPolicy.from_settings(settings)
    return asyncio.run(play(args.material_id, args.user_id, args.base_url, auto=args.auto, policy=policy))


if __name__ == "__main__":
    raise SystemExit(main())
