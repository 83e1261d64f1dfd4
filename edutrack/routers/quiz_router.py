# edutrack/routers/quiz_router.py
from fastapi import APIRouter, Depends
import logging
from typing import List
from sqlalchemy.orm import Session
from ..schemas.quiz_schemas import (
    LearningOverview,
    LeaderboardEntry,
    PracticeOverview,
    Quiz,
    QuizCatalog,
    QuizResult,
    QuizSubmission,
)
from ..services.aggregation import LEVELS, TOPICS
from ..services.quiz_service import QuizService
from ..database.database import get_db
from .errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["quiz"])


@router.get("/quiz/topics", response_model=QuizCatalog)
async def quiz_catalog() -> QuizCatalog:
    return QuizCatalog(topics=list(TOPICS), levels=list(LEVELS))


@router.get("/quiz/{topic}/{level}", response_model=Quiz)
async def get_quiz(topic: str, level: str, db: Session = Depends(get_db)) -> Quiz:
    """Shuffled questions for a topic and level."""
    try:
        return QuizService(db).get_quiz(topic, level)
    except Exception as e:
        raise http_error(e, "loading questions")


@router.post("/quiz/{topic}/{level}/submit", response_model=QuizResult)
async def submit_quiz(
    topic: str,
    level: str,
    submission: QuizSubmission,
    db: Session = Depends(get_db),
) -> QuizResult:
    """Grade a quiz attempt and record answers and progress."""
    try:
        logger.info(f"Received quiz submission from {submission.student_id} for {topic}/{level}")
        return QuizService(db).submit_quiz(submission.student_id, topic, level, submission.answers)
    except Exception as e:
        raise http_error(e, "submitting quiz")


@router.get("/students/{student_id}/learning", response_model=LearningOverview)
async def learning_overview(student_id: str, db: Session = Depends(get_db)) -> LearningOverview:
    try:
        return QuizService(db).learning_overview(student_id)
    except Exception as e:
        raise http_error(e, "fetching learning progress")


@router.get("/students/{student_id}/practice", response_model=PracticeOverview)
async def practice_overview(student_id: str, db: Session = Depends(get_db)) -> PracticeOverview:
    try:
        return QuizService(db).practice_overview(student_id)
    except Exception as e:
        raise http_error(e, "fetching practice progress")


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def leaderboard(db: Session = Depends(get_db)) -> List[LeaderboardEntry]:
    try:
        return QuizService(db).leaderboard()
    except Exception as e:
        raise http_error(e, "building leaderboard")
