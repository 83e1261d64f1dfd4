# edutrack/services/quiz_service.py
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import logging
import random
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..models.base import utcnow
from ..models.progress_models import DBAIQuestion, DBStudentAnswer, DBStudentProgress
from ..models.users_models import DBUserProfile
from ..schemas.quiz_schemas import (
    LearningOverview,
    LeaderboardEntry,
    PracticeOverview,
    QuestionResult,
    Quiz,
    QuizQuestion,
    QuizResult,
)
from ..schemas.user_schemas import Role
from .aggregation import (
    LEVELS,
    TOPICS,
    aggregate_topics,
    build_question_topics,
    is_completed,
    is_level_available,
    overall_score,
    practice_summary,
    rank_leaderboard,
    round_score,
)
from .errors import InvalidInputError, LevelLockedError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)

NO_QUESTIONS_MESSAGE = "No questions available for this topic and level"


def grade_quiz(questions: Sequence, selections: Mapping[str, str]) -> Tuple[float, List[QuestionResult]]:
    """Grade a quiz attempt.

    Returns the unrounded score (0-100) and one correctness record per
    question, in question order. Unanswered questions count as wrong.
    """
    if not questions:
        raise InvalidInputError("Cannot grade a quiz without questions")

    results = []
    for question in questions:
        selected = selections.get(str(question.question_id))
        results.append(QuestionResult(
            question_id=question.question_id,
            selected_option=selected,
            correct_option=question.correct_option,
            is_correct=selected is not None and selected == question.correct_option,
        ))

    correct = sum(1 for r in results if r.is_correct)
    return correct * 100 / len(questions), results


def validate_topic_level(topic: str, level: str) -> None:
    if topic not in TOPICS:
        raise InvalidInputError(f"Unknown topic: {topic}")
    if level not in LEVELS:
        raise InvalidInputError(f"Unknown level: {level}")


class QuizService:
    def __init__(self, db: Session):
        self.db = db

    def _get_student(self, student_id: str) -> DBUserProfile:
        student = self.db.get(DBUserProfile, student_id)
        if not student:
            raise NotFoundError("Student not found")
        if student.role != Role.STUDENT.value:
            raise PermissionDeniedError("Only students can take quizzes")
        return student

    def _question_bank(self, topic: str, level: str) -> List[DBAIQuestion]:
        return (
            self.db.query(DBAIQuestion)
            .filter(DBAIQuestion.topic == topic, DBAIQuestion.level == level)
            .order_by(DBAIQuestion.created_at, DBAIQuestion.question_id)
            .all()
        )

    def _progress_for(self, student_id: str) -> List[DBStudentProgress]:
        return (
            self.db.query(DBStudentProgress)
            .filter(DBStudentProgress.student_id == student_id)
            .order_by(DBStudentProgress.id)
            .all()
        )

    def get_quiz(self, topic: str, level: str, rng: Optional[random.Random] = None) -> Quiz:
        """Shuffled question set for a topic and level, without answers."""
        validate_topic_level(topic, level)
        questions = self._question_bank(topic, level)
        if not questions:
            raise NotFoundError(NO_QUESTIONS_MESSAGE)

        (rng or random).shuffle(questions)
        return Quiz(
            topic=topic,
            level=level,
            questions=[
                QuizQuestion(
                    question_id=q.question_id,
                    question_text=q.question_text,
                    option_a=q.option_a,
                    option_b=q.option_b,
                    option_c=q.option_c,
                    option_d=q.option_d,
                )
                for q in questions
            ],
        )

    def submit_quiz(self, student_id: str, topic: str, level: str, selections: Mapping[str, str]) -> QuizResult:
        """Grade a quiz, store the answers, then upsert the topic/level progress.

        Answers are committed first. If that fails nothing else is written; if
        the progress upsert fails afterwards the answers stay and the error is
        raised to the caller.
        """
        validate_topic_level(topic, level)
        self._get_student(student_id)

        questions = self._question_bank(topic, level)
        if not questions:
            raise NotFoundError(NO_QUESTIONS_MESSAGE)

        if not is_level_available(self._progress_for(student_id), topic, level):
            previous = LEVELS[LEVELS.index(level) - 1]
            raise LevelLockedError(f"Complete {topic} {previous} before attempting {level}")

        score, results = grade_quiz(questions, selections)
        completed = is_completed(score)
        now = utcnow()

        try:
            self.db.add_all([
                DBStudentAnswer(
                    student_id=student_id,
                    question_id=r.question_id,
                    selected_option=r.selected_option,
                    is_correct=r.is_correct,
                    attempted_at=now,
                )
                for r in results
            ])
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to store answers for student {student_id}: {str(e)}")
            self.db.rollback()
            raise

        try:
            progress = (
                self.db.query(DBStudentProgress)
                .filter(
                    DBStudentProgress.student_id == student_id,
                    DBStudentProgress.topic == topic,
                    DBStudentProgress.level == level,
                )
                .first()
            )
            if progress is None:
                progress = DBStudentProgress(student_id=student_id, topic=topic, level=level)
                self.db.add(progress)
            progress.score = score
            progress.completed = completed
            progress.last_attempted = now
            self.db.commit()
        except SQLAlchemyError as e:
            # Answers are already committed; the progress row stays stale
            logger.error(f"Answers stored but progress upsert failed for student {student_id}: {str(e)}")
            self.db.rollback()
            raise

        logger.info(f"Student {student_id} scored {score:.1f}% on {topic}/{level} (completed={completed})")
        return QuizResult(
            student_id=student_id,
            topic=topic,
            level=level,
            score=round_score(score),
            correct_answers=sum(1 for r in results if r.is_correct),
            total_questions=len(results),
            completed=completed,
            results=results,
        )

    def _question_topics(self) -> Dict[str, str]:
        rows = self.db.query(DBAIQuestion.question_id, DBAIQuestion.topic).all()
        return build_question_topics(rows)

    def learning_overview(self, student_id: str) -> LearningOverview:
        """Per-topic scores for one student, falling back to stored progress."""
        self._get_student(student_id)
        question_topics = self._question_topics()
        answers = (
            self.db.query(DBStudentAnswer)
            .filter(DBStudentAnswer.student_id == student_id)
            .all()
        )
        records = aggregate_topics(answers, question_topics, self._progress_for(student_id))
        return LearningOverview(student_id=student_id, overall_score=overall_score(records), topics=records)

    def leaderboard(self) -> List[LeaderboardEntry]:
        students = (
            self.db.query(DBUserProfile)
            .filter(DBUserProfile.role == Role.STUDENT.value)
            .order_by(DBUserProfile.created_at, DBUserProfile.id)
            .all()
        )
        if not students:
            return []

        answers_by_student = defaultdict(list)
        rows = (
            self.db.query(DBStudentAnswer)
            .filter(DBStudentAnswer.student_id.in_([s.id for s in students]))
            .all()
        )
        for row in rows:
            answers_by_student[row.student_id].append(row)

        return rank_leaderboard(students, answers_by_student, self._question_topics())

    def practice_overview(self, student_id: str) -> PracticeOverview:
        self._get_student(student_id)
        return PracticeOverview(
            student_id=student_id,
            topics=practice_summary(self._progress_for(student_id)),
        )
