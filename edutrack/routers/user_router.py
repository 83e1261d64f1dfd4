# edutrack/routers/user_router.py
from fastapi import APIRouter, Depends
import logging
from sqlalchemy.orm import Session
from ..schemas.user_schemas import FeedbackCreate, FeedbackItem, FeedbackList, UserCreate, UserProfile
from ..services.user_service import UserService
from ..database.database import get_db
from .errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/users", response_model=UserProfile, status_code=201)
async def create_user(payload: UserCreate, db: Session = Depends(get_db)) -> UserProfile:
    """Register a student, teacher or parent profile."""
    try:
        logger.info(f"Creating {payload.role.value} profile for {payload.email}")
        return UserService(db).create_user(payload)
    except Exception as e:
        raise http_error(e, "creating profile")


@router.get("/users/{user_id}", response_model=UserProfile)
async def get_user(user_id: str, db: Session = Depends(get_db)) -> UserProfile:
    try:
        return UserService(db).get_user(user_id)
    except Exception as e:
        raise http_error(e, "retrieving profile")


@router.post("/feedback", response_model=FeedbackItem, status_code=201)
async def give_feedback(payload: FeedbackCreate, db: Session = Depends(get_db)) -> FeedbackItem:
    try:
        logger.info(f"Teacher {payload.teacher_id} leaving feedback for student {payload.student_id}")
        return UserService(db).give_feedback(payload)
    except Exception as e:
        raise http_error(e, "submitting feedback")


@router.get("/students/{student_id}/feedback", response_model=FeedbackList)
async def list_feedback(student_id: str, db: Session = Depends(get_db)) -> FeedbackList:
    try:
        return UserService(db).list_feedback(student_id)
    except Exception as e:
        raise http_error(e, "fetching feedback")


@router.post("/feedback/{feedback_id}/acknowledge", response_model=FeedbackItem)
async def acknowledge_feedback(feedback_id: int, db: Session = Depends(get_db)) -> FeedbackItem:
    try:
        return UserService(db).acknowledge_feedback(feedback_id)
    except Exception as e:
        raise http_error(e, "acknowledging feedback")
