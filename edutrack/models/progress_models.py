# edutrack/models/progress_models.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Boolean, UniqueConstraint
from .base import Base, new_id, utcnow


class DBAIQuestion(Base):
    __tablename__ = "ai_questions"

    question_id = Column(String, primary_key=True, default=new_id)
    topic = Column(String, nullable=False, index=True)
    level = Column(String, nullable=False, index=True)
    question_text = Column(String, nullable=False)
    option_a = Column(String, nullable=False)
    option_b = Column(String, nullable=False)
    option_c = Column(String, nullable=False)
    option_d = Column(String, nullable=False)
    correct_option = Column(String(1), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class DBStudentAnswer(Base):
    __tablename__ = "student_answer"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String, ForeignKey("user_profiles.id"), nullable=False, index=True)
    question_id = Column(String, ForeignKey("ai_questions.question_id"), nullable=False)
    selected_option = Column(String(1), nullable=True)
    is_correct = Column(Boolean, nullable=False)
    attempted_at = Column(DateTime, default=utcnow, nullable=False)


class DBStudentProgress(Base):
    __tablename__ = "student_progress"
    __table_args__ = (UniqueConstraint("student_id", "topic", "level", name="uq_progress_student_topic_level"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String, ForeignKey("user_profiles.id"), nullable=False, index=True)
    topic = Column(String, nullable=False)
    level = Column(String, nullable=False)
    score = Column(Float, nullable=False, default=0.0)  # unrounded 0-100
    completed = Column(Boolean, nullable=False, default=False)
    last_attempted = Column(DateTime, default=utcnow, nullable=False)
