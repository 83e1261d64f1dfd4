# edutrack/services/aggregation.py
"""Performance aggregation over already-fetched rows.

Every function here is pure: rows come in (ORM instances or anything with the
same attributes), view models go out. Nothing touches the database.
"""
from collections import OrderedDict, defaultdict
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..schemas.quiz_schemas import (
    LeaderboardEntry,
    LevelState,
    TopicPractice,
    TopicProgress,
)
from ..schemas.test_schemas import (
    StudentAnalytics,
    StudentTestBreakdown,
    TestResultSummary,
    TopicStats,
)

TOPICS: Tuple[str, ...] = ("DSA", "Fullstack", "AI", "Operating System")
LEVELS: Tuple[str, ...] = ("Easy", "Medium", "Hard")
DEFAULT_LEVEL = LEVELS[0]

COMPLETION_THRESHOLD = 70.0
STRONG_TOPIC_THRESHOLD = 70.0
WEAK_TOPIC_THRESHOLD = 50.0
PASS_PERCENTAGE = 60


def round_score(value: float) -> float:
    """Round half up to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def round_percent(value: float) -> int:
    """Round half up to a whole percentage."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_completed(score: float) -> bool:
    return score >= COMPLETION_THRESHOLD


def build_question_topics(questions: Iterable) -> Dict[str, str]:
    """Map question id -> topic for the quiz bank."""
    return {q.question_id: q.topic for q in questions}


def _answers_for_topic(answers: Iterable, question_topics: Mapping[str, str], topic: str) -> List:
    return [a for a in answers if question_topics.get(a.question_id) == topic]


def _topic_tally(topic_answers: Sequence) -> Tuple[int, int, Optional[float]]:
    """Return (correct, total, score); score is None when nothing was attempted."""
    total = len(topic_answers)
    correct = sum(1 for a in topic_answers if a.is_correct)
    if total == 0:
        return correct, total, None
    return correct, total, correct * 100 / total


def latest_progress(progress: Iterable, topic: str):
    """Most recently attempted progress row for a topic, or None.

    Rows without a timestamp sort first; on equal timestamps the later row wins.
    """
    latest = None
    for p in progress:
        if p.topic != topic:
            continue
        if latest is None or (p.last_attempted or datetime.min) >= (latest.last_attempted or datetime.min):
            latest = p
    return latest


def aggregate_topics(
    answers: Sequence,
    question_topics: Mapping[str, str],
    progress: Sequence = (),
    topics: Sequence[str] = TOPICS,
) -> List[TopicProgress]:
    """One performance record per topic, in topic order."""
    records = []
    for topic in topics:
        topic_answers = _answers_for_topic(answers, question_topics, topic)
        correct, total, score = _topic_tally(topic_answers)
        existing = latest_progress(progress, topic)

        if score is None:
            score = existing.score if existing is not None and existing.score is not None else 0.0

        records.append(TopicProgress(
            topic=topic,
            score=round_score(score),
            total_attempts=total,
            correct_answers=correct,
            level=existing.level if existing is not None else DEFAULT_LEVEL,
            completed=bool(existing.completed) if existing is not None else False,
        ))
    return records


def overall_score(records: Sequence[TopicProgress]) -> float:
    if not records:
        return 0.0
    return round_score(sum(r.score for r in records) / len(records))


def student_average(
    answers: Sequence,
    question_topics: Mapping[str, str],
    topics: Sequence[str] = TOPICS,
) -> float:
    """Mean topic score over attempted topics only; 0 when nothing was attempted."""
    scores = []
    for topic in topics:
        _, _, score = _topic_tally(_answers_for_topic(answers, question_topics, topic))
        if score is not None:
            scores.append(score)
    return sum(scores) / len(scores) if scores else 0.0


def rank_leaderboard(
    students: Sequence,
    answers_by_student: Mapping[str, Sequence],
    question_topics: Mapping[str, str],
    topics: Sequence[str] = TOPICS,
) -> List[LeaderboardEntry]:
    averages = [
        (student, student_average(answers_by_student.get(student.id, ()), question_topics, topics))
        for student in students
    ]
    # sorted() is stable with reverse=True, so ties keep input order
    averages = sorted(averages, key=lambda pair: pair[1], reverse=True)
    return [
        LeaderboardEntry(
            student_id=student.id,
            full_name=student.full_name,
            average_score=round_score(average),
            rank=position,
        )
        for position, (student, average) in enumerate(averages, start=1)
    ]


def _level_index(level: str) -> int:
    try:
        return LEVELS.index(level)
    except ValueError:
        raise ValueError(f"Unknown level: {level}")


def _completed_levels(progress: Iterable, topic: str) -> set:
    return {p.level for p in progress if p.topic == topic and p.completed}


def current_level(progress: Sequence, topic: str) -> str:
    completed = _completed_levels(progress, topic)
    if "Medium" in completed:
        return "Hard"
    if "Easy" in completed:
        return "Medium"
    return "Easy"


def is_level_available(progress: Sequence, topic: str, level: str) -> bool:
    index = _level_index(level)
    if index == 0:
        return True
    previous = LEVELS[index - 1]
    return any(p.topic == topic and p.level == previous and p.completed for p in progress)


def topic_completion(progress: Sequence, topic: str) -> int:
    completed = _completed_levels(progress, topic) & set(LEVELS)
    return round_percent(len(completed) / len(LEVELS) * 100)


def practice_summary(progress: Sequence, topics: Sequence[str] = TOPICS) -> List[TopicPractice]:
    summaries = []
    for topic in topics:
        topic_rows = [p for p in progress if p.topic == topic]
        level = current_level(progress, topic)
        level_index = _level_index(level)

        states = []
        for candidate in LEVELS:
            row = next((p for p in topic_rows if p.level == candidate), None)
            states.append(LevelState(
                level=candidate,
                locked=LEVELS.index(candidate) > level_index,
                completed=bool(row.completed) if row is not None else False,
                score=round_score(row.score) if row is not None else None,
            ))

        average = sum(p.score for p in topic_rows) / len(topic_rows) if topic_rows else 0.0
        summaries.append(TopicPractice(
            topic=topic,
            current_level=level,
            available=is_level_available(progress, topic, level),
            completion=topic_completion(progress, topic),
            completed_levels=sum(1 for p in topic_rows if p.completed),
            average_score=round_score(average),
            levels=states,
        ))
    return summaries


def classify_topics(topic_averages: Mapping[str, float]) -> Tuple[List[str], List[str]]:
    """Split topics into (strong, weak), each ordered best first."""
    ranked = sorted(topic_averages.items(), key=lambda item: item[1], reverse=True)
    strong = [topic for topic, avg in ranked if avg >= STRONG_TOPIC_THRESHOLD]
    weak = [topic for topic, avg in ranked if avg < WEAK_TOPIC_THRESHOLD]
    return strong, weak


def summarize_test_results(attempts: Iterable, tests: Mapping[str, object]) -> List[TestResultSummary]:
    """Collapse a student's per-question attempt rows into one row per test."""
    grouped: "OrderedDict[str, dict]" = OrderedDict()
    for attempt in attempts:
        test = tests.get(attempt.test_id)
        if test is None:
            continue
        entry = grouped.setdefault(attempt.test_id, {
            "test_id": test.id,
            "test_name": test.name,
            "total_marks": test.total_marks,
            "marks_obtained": 0,
            "attempt_date": attempt.attempt_time,
        })
        entry["marks_obtained"] += attempt.marks_obtained or 0

    summaries = []
    for entry in grouped.values():
        total = entry["total_marks"]
        accuracy = round_percent(entry["marks_obtained"] / total * 100) if total else 0
        summaries.append(TestResultSummary(accuracy_percentage=accuracy, **entry))
    return summaries


def marks_by_test(attempts: Iterable) -> Dict[str, int]:
    """Total marks obtained per attempted test id."""
    totals: Dict[str, int] = {}
    for attempt in attempts:
        totals[attempt.test_id] = totals.get(attempt.test_id, 0) + (attempt.marks_obtained or 0)
    return totals


def is_passed(marks_obtained: int, total_marks: int) -> bool:
    return marks_obtained * 100 >= total_marks * PASS_PERCENTAGE


def split_by_average(results: Sequence[TestResultSummary]) -> Tuple[float, List[TestResultSummary], List[TestResultSummary]]:
    """Return (average accuracy, at-or-above average, below average), best first."""
    if not results:
        return 0.0, [], []
    average = sum(r.accuracy_percentage for r in results) / len(results)
    ranked = sorted(results, key=lambda r: r.accuracy_percentage, reverse=True)
    strong = [r for r in ranked if r.accuracy_percentage >= average]
    weak = [r for r in ranked if r.accuracy_percentage < average]
    return round_score(average), strong, weak


def student_performance(attempts: Iterable, student_names: Mapping[str, str]) -> List[StudentAnalytics]:
    """Teacher view: per-student, per-test topic breakdown with strong/weak topics.

    Each attempt must expose its ``test`` and ``question`` rows.
    """
    students: "OrderedDict[str, StudentAnalytics]" = OrderedDict()
    raw_topics: Dict[str, Dict[str, Dict[str, List[int]]]] = defaultdict(lambda: defaultdict(dict))

    for attempt in attempts:
        test, question = attempt.test, attempt.question
        if test is None or question is None:
            continue

        student = students.get(attempt.student_id)
        if student is None:
            student = StudentAnalytics(
                student_id=attempt.student_id,
                student_name=student_names.get(attempt.student_id, ""),
            )
            students[attempt.student_id] = student

        breakdown = next((t for t in student.test_results if t.test_id == test.id), None)
        if breakdown is None:
            breakdown = StudentTestBreakdown(test_id=test.id, test_name=test.name, total_marks=test.total_marks)
            student.test_results.append(breakdown)

        tally = raw_topics[attempt.student_id][test.id].setdefault(question.topic, [0, 0])
        tally[0] += question.marks
        if attempt.is_correct:
            tally[1] += question.marks
            breakdown.marks_obtained += attempt.marks_obtained or 0

    for student_id, student in students.items():
        per_topic: Dict[str, List[float]] = defaultdict(list)
        for breakdown in student.test_results:
            for topic, (total, correct) in raw_topics[student_id][breakdown.test_id].items():
                percentage = correct / total * 100 if total else 0.0
                breakdown.topics[topic] = TopicStats(total=total, correct=correct, percentage=round_score(percentage))
                per_topic[topic].append(percentage)

        averages = {topic: sum(values) / len(values) for topic, values in per_topic.items()}
        student.strong_topics, student.weak_topics = classify_topics(averages)

        test_scores = [
            b.marks_obtained / b.total_marks * 100 if b.total_marks else 0.0
            for b in student.test_results
        ]
        student.average_score = round_score(sum(test_scores) / len(test_scores)) if test_scores else 0.0

    return list(students.values())
