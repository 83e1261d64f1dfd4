import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from conftest import make_ai_questions, make_progress, make_user
from edutrack.models.progress_models import DBStudentAnswer, DBStudentProgress
from edutrack.services.errors import InvalidInputError, LevelLockedError, NotFoundError
from edutrack.services.quiz_service import NO_QUESTIONS_MESSAGE, QuizService, grade_quiz


def _answers(question_ids, right, correct="A", wrong="B"):
    return {qid: (correct if i < right else wrong) for i, qid in enumerate(question_ids)}


def test_grade_quiz_scores_in_question_order(db):
    ids = make_ai_questions(db, "DSA", "Easy", 4)
    questions = QuizService(db)._question_bank("DSA", "Easy")

    score, results = grade_quiz(questions, {ids[0]: "A", ids[1]: "C"})

    assert score == 25.0
    assert [r.question_id for r in results] == ids
    assert [r.is_correct for r in results] == [True, False, False, False]
    assert results[2].selected_option is None


def test_grade_quiz_rejects_empty_question_list():
    with pytest.raises(InvalidInputError):
        grade_quiz([], {})


def test_submit_three_of_five_dsa_easy(db, client):
    student = make_user(db, "Ada Lovelace")
    ids = make_ai_questions(db, "DSA", "Easy", 5)

    response = client.post(
        "/api/quiz/DSA/Easy/submit",
        json={"student_id": student.id, "answers": _answers(ids, 3)},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["score"] == 60.0
    assert body["completed"] is False
    assert body["correct_answers"] == 3
    assert body["total_questions"] == 5

    db.expire_all()
    assert db.query(DBStudentAnswer).filter_by(student_id=student.id).count() == 5
    rows = db.query(DBStudentProgress).filter_by(student_id=student.id).all()
    assert len(rows) == 1
    assert (rows[0].topic, rows[0].level, rows[0].score, rows[0].completed) == ("DSA", "Easy", 60.0, False)


def test_resubmission_updates_the_same_progress_row(db):
    student = make_user(db, "Grace Hopper")
    ids = make_ai_questions(db, "AI", "Easy", 10)
    service = QuizService(db)

    service.submit_quiz(student.id, "AI", "Easy", _answers(ids, 6))
    result = service.submit_quiz(student.id, "AI", "Easy", _answers(ids, 7))

    assert result.score == 70.0
    assert result.completed is True
    rows = db.query(DBStudentProgress).filter_by(student_id=student.id).all()
    assert len(rows) == 1
    assert rows[0].score == 70.0
    assert rows[0].completed is True
    assert db.query(DBStudentAnswer).filter_by(student_id=student.id).count() == 20


def test_medium_quiz_locked_until_easy_completed(db, client):
    student = make_user(db, "Alan Turing")
    make_ai_questions(db, "DSA", "Medium", 3)
    make_progress(db, student.id, "DSA", "Easy", 50.0, False)

    response = client.post(
        "/api/quiz/DSA/Medium/submit",
        json={"student_id": student.id, "answers": {}},
    )
    assert response.status_code == 403

    make_progress(db, student.id, "DSA", "Medium", 0.0, False)  # not a completion of Easy
    with pytest.raises(LevelLockedError):
        QuizService(db).submit_quiz(student.id, "DSA", "Medium", {})


def test_hard_quiz_opens_after_medium_completed(db):
    student = make_user(db, "Barbara Liskov")
    ids = make_ai_questions(db, "Fullstack", "Hard", 2)
    make_progress(db, student.id, "Fullstack", "Easy", 90.0, True)
    service = QuizService(db)

    with pytest.raises(LevelLockedError):
        service.submit_quiz(student.id, "Fullstack", "Hard", _answers(ids, 2))

    make_progress(db, student.id, "Fullstack", "Medium", 70.0, True)
    result = service.submit_quiz(student.id, "Fullstack", "Hard", _answers(ids, 2))
    assert result.score == 100.0


def test_no_questions_is_a_distinct_not_found(db, client):
    student = make_user(db, "Edsger Dijkstra")

    response = client.get("/api/quiz/AI/Easy")
    assert response.status_code == 404
    assert response.json()["detail"] == NO_QUESTIONS_MESSAGE

    with pytest.raises(NotFoundError):
        QuizService(db).submit_quiz(student.id, "AI", "Easy", {})


def test_unknown_level_is_a_bad_request(client):
    response = client.get("/api/quiz/DSA/Expert")
    assert response.status_code == 400


def test_quiz_questions_hide_the_answer(db, client):
    make_ai_questions(db, "Operating System", "Easy", 3)

    response = client.get("/api/quiz/Operating System/Easy")

    assert response.status_code == 200
    questions = response.json()["questions"]
    assert len(questions) == 3
    assert all("correct_option" not in q for q in questions)


def test_answer_insert_failure_skips_progress(db, monkeypatch):
    student = make_user(db, "Ken Thompson")
    ids = make_ai_questions(db, "DSA", "Easy", 5)

    def broken_add_all(rows):
        raise OperationalError("INSERT INTO student_answer", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "add_all", broken_add_all)
    with pytest.raises(SQLAlchemyError):
        QuizService(db).submit_quiz(student.id, "DSA", "Easy", _answers(ids, 5))

    monkeypatch.undo()
    assert db.query(DBStudentAnswer).count() == 0
    assert db.query(DBStudentProgress).count() == 0


def test_progress_failure_leaves_answers_in_place(db, monkeypatch):
    student = make_user(db, "Dennis Ritchie")
    ids = make_ai_questions(db, "DSA", "Easy", 5)
    real_commit = db.commit
    calls = []

    def flaky_commit():
        calls.append(1)
        if len(calls) == 2:
            raise OperationalError("UPDATE student_progress", {}, Exception("database is locked"))
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    with pytest.raises(SQLAlchemyError):
        QuizService(db).submit_quiz(student.id, "DSA", "Easy", _answers(ids, 4))

    monkeypatch.undo()
    assert db.query(DBStudentAnswer).filter_by(student_id=student.id).count() == 5
    assert db.query(DBStudentProgress).count() == 0


def test_learning_overview_uses_answers_and_fallback(db, client):
    student = make_user(db, "Ada Lovelace")
    ids = make_ai_questions(db, "DSA", "Easy", 3)
    QuizService(db).submit_quiz(student.id, "DSA", "Easy", _answers(ids, 2))
    make_progress(db, student.id, "AI", "Easy", 40.0, False)

    response = client.get(f"/api/students/{student.id}/learning")

    assert response.status_code == 200
    topics = {t["topic"]: t for t in response.json()["topics"]}
    assert topics["DSA"]["score"] == 66.7
    assert topics["DSA"]["correct_answers"] == 2
    assert topics["AI"]["score"] == 40.0
    assert topics["AI"]["total_attempts"] == 0
    assert topics["Fullstack"]["score"] == 0.0
    assert response.json()["overall_score"] == 26.7


def test_leaderboard_endpoint_ranks_students(db, client):
    a = make_user(db, "Student A", created_offset=2)
    b = make_user(db, "Student B", created_offset=1)
    c = make_user(db, "Student C", created_offset=0)
    make_user(db, "Teacher T", role="teacher")
    ids = make_ai_questions(db, "DSA", "Easy", 10)
    service = QuizService(db)
    service.submit_quiz(a.id, "DSA", "Easy", _answers(ids, 9))
    service.submit_quiz(b.id, "DSA", "Easy", _answers(ids, 7))

    response = client.get("/api/leaderboard")

    assert response.status_code == 200
    board = response.json()
    assert [(e["full_name"], e["rank"], e["average_score"]) for e in board] == [
        ("Student A", 1, 90.0),
        ("Student B", 2, 70.0),
        ("Student C", 3, 0.0),
    ]
    assert c.id == board[2]["student_id"]


def test_practice_overview_endpoint(db, client):
    student = make_user(db, "Linus Torvalds")
    make_progress(db, student.id, "Operating System", "Easy", 85.0, True)

    response = client.get(f"/api/students/{student.id}/practice")

    assert response.status_code == 200
    topics = {t["topic"]: t for t in response.json()["topics"]}
    assert topics["Operating System"]["current_level"] == "Medium"
    assert topics["Operating System"]["completion"] == 33
    assert topics["DSA"]["current_level"] == "Easy"


def test_teacher_cannot_take_quiz(db, client):
    teacher = make_user(db, "Teacher T", role="teacher")
    make_ai_questions(db, "DSA", "Easy", 1)

    response = client.post("/api/quiz/DSA/Easy/submit", json={"student_id": teacher.id, "answers": {}})
    assert response.status_code == 403


def test_catalog_lists_topics_and_levels(client):
    body = client.get("/api/quiz/topics").json()
    assert body["levels"] == ["Easy", "Medium", "Hard"]
    assert "Operating System" in body["topics"]
