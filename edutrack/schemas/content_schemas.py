# edutrack/schemas/content_schemas.py
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class ContentRequest(BaseModel):
    topic: str
    context: Optional[str] = None

    @field_validator("topic")
    def topic_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("topic is required")
        return v

    @field_validator("context")
    def empty_context_is_none(cls, v):
        if v is None:
            return None
        return v.strip() or None


class MCQQuestion(BaseModel):
    question: str
    options: List[str]
    correct_answer: str
    explanation: str = ""


class CaseStudy(BaseModel):
    scenario: str
    question: str
    answer: str


class EducationalContent(BaseModel):
    main_content: str
    mcq_questions: List[MCQQuestion] = Field(default_factory=list)
    case_studies: List[CaseStudy] = Field(default_factory=list)


class QuestionBankRequest(BaseModel):
    count: int = Field(default=10, ge=1, le=30)


class GeneratedQuestion(BaseModel):
    question_text: str
    options: List[str]
    correct_option: Optional[str] = None


class QuestionBankResult(BaseModel):
    topic: str
    level: str
    stored: int
    question_ids: List[str]
