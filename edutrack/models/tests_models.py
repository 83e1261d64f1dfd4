# edutrack/models/tests_models.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class DBTest(Base):
    __tablename__ = "tests"

    id = Column(String, primary_key=True, default=new_id)
    teacher_id = Column(String, ForeignKey("user_profiles.id"), nullable=False)
    name = Column(String, nullable=False)
    total_marks = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    questions = relationship(
        "DBQuestion",
        back_populates="test",
        cascade="all, delete-orphan",
        order_by="DBQuestion.position",
    )


class DBQuestion(Base):
    __tablename__ = "questions"

    id = Column(String, primary_key=True, default=new_id)
    test_id = Column(String, ForeignKey("tests.id"), nullable=False)
    teacher_id = Column(String, ForeignKey("user_profiles.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # creation order within the test
    question_text = Column(String, nullable=False)
    option_a = Column(String, nullable=False)
    option_b = Column(String, nullable=False)
    option_c = Column(String, nullable=False)
    option_d = Column(String, nullable=False)
    correct_option = Column(String(1), nullable=False)
    marks = Column(Integer, nullable=False, default=1)
    topic = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    test = relationship("DBTest", back_populates="questions")


class DBTestAttempt(Base):
    __tablename__ = "student_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String, ForeignKey("user_profiles.id"), nullable=False, index=True)
    test_id = Column(String, ForeignKey("tests.id"), nullable=False)
    question_id = Column(String, ForeignKey("questions.id"), nullable=False)
    selected_option = Column(String(1), nullable=True)
    is_correct = Column(Boolean, nullable=False, default=False)
    marks_obtained = Column(Integer, nullable=False, default=0)
    attempt_time = Column(DateTime, default=utcnow, nullable=False)

    test = relationship("DBTest")
    question = relationship("DBQuestion")


class DBFeedback(Base):
    __tablename__ = "feedback"

    feedback_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String, ForeignKey("user_profiles.id"), nullable=False, index=True)
    teacher_id = Column(String, ForeignKey("user_profiles.id"), nullable=False)
    feedback_text = Column(String, nullable=False)
    acknowledged = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    teacher = relationship("DBUserProfile", foreign_keys=[teacher_id])
