from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

OptionLetter = Literal["A", "B", "C", "D"]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateQuizRequest(CamelModel):
    # Presence is checked by the generator service so a missing field maps to one error kind.
    material_id: Optional[int] = Field(None, description="Material identifier")
    topic_id: Optional[int] = Field(None, description="Topic the material belongs to")
    material_title: Optional[str] = Field(None, description="Material title")
    material_content: Optional[str] = Field(None, description="Material body text")


class GeneratedOption(CamelModel):
    letter: OptionLetter
    text: str = Field(..., min_length=1)
    is_correct: bool


class GeneratedQuestion(CamelModel):
    question_number: int = Field(..., ge=1)
    question_text: str = Field(..., min_length=1)
    options: list[GeneratedOption]


class GenerateQuizResponse(CamelModel):
    success: bool = True
    already_exists: bool = False
    message: str
    material_id: int
    topic_id: Optional[int] = None
    questions: list[GeneratedQuestion] = Field(default_factory=list)


class QuizOptionView(CamelModel):
    """Player-facing option: correctness is never exposed."""

    id: int
    letter: OptionLetter
    text: str


class QuizQuestionView(CamelModel):
    id: int
    material_id: int
    topic_id: int
    question_number: int
    question_text: str
    options: list[QuizOptionView]


class FetchQuizResponse(CamelModel):
    success: bool = True
    material_id: int
    questions: list[QuizQuestionView]


class SubmitAnswerRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    question_id: int
    selected_option_id: int


class SubmitAnswerResponse(CamelModel):
    success: bool = True
    is_correct: bool
    correct_option_id: int
    xp_earned: int


class MaterialView(CamelModel):
    id: int
    title: str
    content: Optional[str] = None
    topic_id: Optional[int] = None


class MaterialListResponse(CamelModel):
    success: bool = True
    materials: list[MaterialView]
