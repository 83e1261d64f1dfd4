# edutrack/services/user_service.py
import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from ..models.tests_models import DBFeedback
from ..models.users_models import DBUserProfile
from ..schemas.user_schemas import (
    FeedbackCreate,
    FeedbackItem,
    FeedbackList,
    Role,
    TeacherSummary,
    UserCreate,
    UserProfile,
)
from .errors import InvalidInputError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)


def _to_feedback_item(row: DBFeedback) -> FeedbackItem:
    teacher = None
    if row.teacher is not None:
        teacher = TeacherSummary(id=row.teacher.id, full_name=row.teacher.full_name, email=row.teacher.email)
    return FeedbackItem(
        feedback_id=row.feedback_id,
        student_id=row.student_id,
        teacher_id=row.teacher_id,
        feedback_text=row.feedback_text,
        acknowledged=row.acknowledged,
        created_at=row.created_at,
        teacher=teacher,
    )


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def create_user(self, payload: UserCreate) -> UserProfile:
        row = DBUserProfile(email=payload.email, full_name=payload.full_name, role=payload.role.value)
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidInputError("Email already registered")
        except SQLAlchemyError as e:
            logger.error(f"Error creating profile for {payload.email}: {str(e)}")
            self.db.rollback()
            raise
        self.db.refresh(row)
        return UserProfile.model_validate(row)

    def get_user(self, user_id: str) -> UserProfile:
        row = self.db.get(DBUserProfile, user_id)
        if not row:
            raise NotFoundError("User not found")
        return UserProfile.model_validate(row)

    def give_feedback(self, payload: FeedbackCreate) -> FeedbackItem:
        teacher = self.db.get(DBUserProfile, payload.teacher_id)
        if not teacher or teacher.role != Role.TEACHER.value:
            raise PermissionDeniedError("Only teachers can give feedback")
        student = self.db.get(DBUserProfile, payload.student_id)
        if not student or student.role != Role.STUDENT.value:
            raise NotFoundError("Student not found")

        row = DBFeedback(
            student_id=payload.student_id,
            teacher_id=payload.teacher_id,
            feedback_text=payload.feedback_text,
            acknowledged=False,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error storing feedback for student {payload.student_id}: {str(e)}")
            self.db.rollback()
            raise
        self.db.refresh(row)
        return _to_feedback_item(row)

    def list_feedback(self, student_id: str) -> FeedbackList:
        """Feedback for a student, newest first, with the teacher's details."""
        if not self.db.get(DBUserProfile, student_id):
            raise NotFoundError("User not found")
        rows = (
            self.db.query(DBFeedback)
            .filter(DBFeedback.student_id == student_id)
            .order_by(DBFeedback.created_at.desc(), DBFeedback.feedback_id.desc())
            .all()
        )
        return FeedbackList(student_id=student_id, feedback=[_to_feedback_item(r) for r in rows])

    def acknowledge_feedback(self, feedback_id: int) -> FeedbackItem:
        row = self.db.get(DBFeedback, feedback_id)
        if not row:
            raise NotFoundError("Feedback not found")
        if not row.acknowledged:
            row.acknowledged = True
            try:
                self.db.commit()
            except SQLAlchemyError as e:
                logger.error(f"Error acknowledging feedback {feedback_id}: {str(e)}")
                self.db.rollback()
                raise
            self.db.refresh(row)
        return _to_feedback_item(row)
