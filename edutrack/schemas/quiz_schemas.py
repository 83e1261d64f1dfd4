# edutrack/schemas/quiz_schemas.py
from typing import Dict, List, Optional
from pydantic import BaseModel, field_validator


class QuizQuestion(BaseModel):
    """A quiz item as shown to the student; the correct option is withheld."""
    question_id: str
    question_text: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str


class Quiz(BaseModel):
    topic: str
    level: str
    questions: List[QuizQuestion]


class QuizSubmission(BaseModel):
    student_id: str
    answers: Dict[str, str]

    @field_validator("answers")
    def normalize_answers(cls, v):
        # Options are stored as upper-case letters A-D
        return {
            str(k): str(opt).strip().upper()
            for k, opt in v.items()
            if opt is not None
        }


class QuestionResult(BaseModel):
    question_id: str
    selected_option: Optional[str] = None
    correct_option: str
    is_correct: bool


class QuizResult(BaseModel):
    student_id: str
    topic: str
    level: str
    score: float
    correct_answers: int
    total_questions: int
    completed: bool
    results: List[QuestionResult]


class TopicProgress(BaseModel):
    topic: str
    score: float
    total_attempts: int
    correct_answers: int
    level: str
    completed: bool


class LearningOverview(BaseModel):
    student_id: str
    overall_score: float
    topics: List[TopicProgress]


class LeaderboardEntry(BaseModel):
    student_id: str
    full_name: str
    average_score: float
    rank: int


class LevelState(BaseModel):
    level: str
    locked: bool
    completed: bool
    score: Optional[float] = None


class TopicPractice(BaseModel):
    topic: str
    current_level: str
    available: bool
    completion: int
    completed_levels: int
    average_score: float
    levels: List[LevelState]


class PracticeOverview(BaseModel):
    student_id: str
    topics: List[TopicPractice]


class QuizCatalog(BaseModel):
    topics: List[str]
    levels: List[str]
