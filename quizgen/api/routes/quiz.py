import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quizgen.clients.chat_completion_client import ChatCompletionClient
from quizgen.clients.gemini_client import GeminiClient
from quizgen.core.config import Settings, get_settings
from quizgen.core.errors import (
    AIContractViolation,
    AIGatewayError,
    InputValidationError,
    PersistenceError,
    QuizNotFoundError,
)
from quizgen.db.repositories.quiz_repo import QuizRepository
from quizgen.db.session import get_db
from quizgen.schemas.quiz_schema import (
    FetchQuizResponse,
    GenerateQuizRequest,
    GenerateQuizResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from quizgen.services.answer_service import AnswerService
from quizgen.services.quiz_generator_service import QuizGeneratorService
from quizgen.services.quiz_reader_service import QuizReaderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


def build_completion_client(settings: Settings):
    """Pick the completion gateway from settings; None when no key is configured."""
    if not settings.ai_configured:
        logger.warning("AI gateway not configured (provider=%s); generation will fail", settings.ai_provider)
        return None
    if settings.ai_provider == "gemini":
        return GeminiClient(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            model_preferences=settings.gemini_model_preferences,
            max_output_tokens=settings.ai_max_tokens,
            temperature=settings.ai_temperature,
        )
    return ChatCompletionClient(
        base_url=settings.groq_base_url,
        model=settings.groq_model,
        api_key=settings.groq_api_key,
        timeout_seconds=settings.ai_timeout_seconds,
        temperature=settings.ai_temperature,
        max_tokens=settings.ai_max_tokens,
    )


quiz_repo = QuizRepository()
quiz_service = QuizGeneratorService(quiz_repo=quiz_repo, llm_client=build_completion_client(get_settings()))
reader_service = QuizReaderService(quiz_repo=quiz_repo)
answer_service = AnswerService(quiz_repo=quiz_repo)


def get_quiz_service() -> QuizGeneratorService:
    return quiz_service


def get_reader_service() -> QuizReaderService:
    return reader_service


def get_answer_service() -> AnswerService:
    return answer_service


def _error(code: int, error: str, exc: Exception) -> HTTPException:
    return HTTPException(status_code=code, detail={"error": error, "details": str(exc)})


@router.post(
    "/generate",
    response_model=GenerateQuizResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate quiz questions for a material",
)
def generate_quiz(
    body: GenerateQuizRequest,
    db: Session = Depends(get_db),
    service: QuizGeneratorService = Depends(get_quiz_service),
) -> GenerateQuizResponse:
    logger.info(
        "generate quiz request",
        extra={"material_id": body.material_id, "content_length": len(body.material_content or "")},
    )
    try:
        result = service.generate(
            material_id=body.material_id,
            topic_id=body.topic_id,
            title=body.material_title,
            content=body.material_content,
            db=db,
        )
    except InputValidationError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "Missing required fields", exc) from exc
    except AIContractViolation as exc:
        raise _error(status.HTTP_502_BAD_GATEWAY, "AI returned an invalid quiz", exc) from exc
    except AIGatewayError as exc:
        raise _error(status.HTTP_503_SERVICE_UNAVAILABLE, "AI service unavailable", exc) from exc
    except PersistenceError as exc:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save quiz questions", exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected quiz generation error: %s", exc)
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate quiz questions", exc) from exc

    if result.already_exists:
        return GenerateQuizResponse(
            already_exists=True,
            message="Questions already exist",
            material_id=body.material_id,
            topic_id=body.topic_id,
        )
    return GenerateQuizResponse(
        message="Quiz questions generated and saved to database",
        material_id=body.material_id,
        topic_id=body.topic_id,
        questions=result.questions,
    )


@router.get(
    "/game/{material_id}",
    response_model=FetchQuizResponse,
    summary="Fetch playable questions for a material",
)
def fetch_quiz(
    material_id: int,
    db: Session = Depends(get_db),
    service: QuizReaderService = Depends(get_reader_service),
) -> FetchQuizResponse:
    try:
        questions = service.fetch(material_id, db)
    except QuizNotFoundError as exc:
        raise _error(status.HTTP_404_NOT_FOUND, "Quiz not generated yet", exc) from exc
    return FetchQuizResponse(material_id=material_id, questions=questions)


@router.post(
    "/game/{material_id}",
    response_model=SubmitAnswerResponse,
    summary="Submit an answer for one question",
)
def submit_answer(
    material_id: int,
    body: SubmitAnswerRequest,
    db: Session = Depends(get_db),
    service: AnswerService = Depends(get_answer_service),
) -> SubmitAnswerResponse:
    try:
        result = service.submit(
            user_id=body.user_id,
            question_id=body.question_id,
            selected_option_id=body.selected_option_id,
            db=db,
            material_id=material_id,
        )
    except QuizNotFoundError as exc:
        raise _error(status.HTTP_404_NOT_FOUND, "Question not found", exc) from exc
    except InputValidationError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "Invalid answer", exc) from exc
    except PersistenceError as exc:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to submit answer", exc) from exc

    return SubmitAnswerResponse(
        is_correct=result.is_correct,
        correct_option_id=result.correct_option_id,
        xp_earned=result.xp_earned,
    )
