import asyncio

import pytest
from httpx import ASGITransport

from quizapp.client import QuizAttempt, QuizClient
from take_quiz import take_quiz


@pytest.fixture
async def quiz_client(app, student):
    async with QuizClient(base_url="http://test", transport=ASGITransport(app=app)) as qc:
        await qc.login("student", "secret")
        yield qc


@pytest.fixture
async def two_question_quiz(create_quiz):
    return await create_quiz(
        {"type": "multiple_choice", "points": 2, "options": [("A", False), ("B", True)]},
        {"type": "essay", "points": 2},
        time_limit_minutes=5,
    )


@pytest.mark.asyncio
async def test_login_sets_bearer_header(quiz_client, student):
    assert quiz_client.user["user_id"] == student
    assert quiz_client._http.headers["Authorization"].startswith("Bearer ")


@pytest.mark.asyncio
async def test_full_attempt(quiz_client, two_question_quiz, student):
    mc, essay = two_question_quiz["questions"]
    attempt = await QuizAttempt.begin(quiz_client, two_question_quiz["quiz_id"], student)

    assert attempt.resumed is False
    assert [o["option_id"] for o in attempt.options[mc["question_id"]]] == mc["options"]
    assert attempt.remaining_seconds() <= 300

    assert await attempt.answer(selected_option_id=mc["options"][1])
    assert attempt.next()
    assert not attempt.next()
    assert await attempt.answer(answer_text="My essay")
    assert attempt.previous()
    assert attempt.current["question_id"] == mc["question_id"]

    result = await attempt.finish()

    assert (result["score"], result["total_points"]) == (3, 4)
    assert result["passed"] is True
    assert attempt.finished
    assert await attempt.finish() is result
    assert not await attempt.answer(answer_text="late")


@pytest.mark.asyncio
async def test_resume_loads_saved_answers(client, quiz_client, two_question_quiz, student):
    mc, _ = two_question_quiz["questions"]
    r = await client.post("/submissions", json={"quiz_id": two_question_quiz["quiz_id"], "user_id": student})
    submission_id = r.json()["submission_id"]
    await client.post(
        f"/submissions/{submission_id}/answers",
        json={"question_id": mc["question_id"], "selected_option_id": mc["options"][0]},
    )

    attempt = await QuizAttempt.begin(quiz_client, two_question_quiz["quiz_id"], student)

    assert attempt.resumed is True
    assert attempt.submission_id == submission_id
    assert attempt.answers[mc["question_id"]]["selected_option_id"] == mc["options"][0]


@pytest.mark.asyncio
async def test_expired_attempt_is_completed(quiz_client, two_question_quiz, student):
    now = [1000.0]
    attempt = await QuizAttempt.begin(
        quiz_client, two_question_quiz["quiz_id"], student, clock=lambda: now[0]
    )
    assert attempt.remaining_seconds() == 300

    now[0] += 301

    assert attempt.expired
    assert attempt.remaining_seconds() == 0
    assert not await attempt.answer(answer_text="too late")
    assert attempt.finished
    assert (attempt.result["score"], attempt.result["total_points"]) == (0, 0)
    detail = await quiz_client.get_submission(attempt.submission_id)
    assert detail["submission"]["status"] == "submitted"
    assert detail["answers"] == []


@pytest.mark.asyncio
async def test_deadline_passing_while_waiting_for_input_submits(quiz_client, two_question_quiz, student):
    now = [0.0]
    attempt = await QuizAttempt.begin(
        quiz_client, two_question_quiz["quiz_id"], student, clock=lambda: now[0]
    )
    now[0] = 300 - 0.05

    async def never_answers():
        await asyncio.Event().wait()

    reply = await attempt.wait_for_input(never_answers)

    assert reply is None
    assert attempt.finished
    detail = await quiz_client.get_submission(attempt.submission_id)
    assert detail["submission"]["status"] == "submitted"


@pytest.mark.asyncio
async def test_input_before_deadline_is_returned(quiz_client, two_question_quiz, student):
    attempt = await QuizAttempt.begin(quiz_client, two_question_quiz["quiz_id"], student)

    async def answers():
        return "2\n"

    assert await attempt.wait_for_input(answers) == "2\n"
    assert not attempt.finished


@pytest.mark.asyncio
async def test_console_run_of_a_quiz_without_questions(client, quiz_client, create_quiz, student, capsys):
    quiz_id = (await create_quiz(title="Empty"))["quiz_id"]

    result = await take_quiz(quiz_client, "student", "secret", quiz_id)

    assert (result["score"], result["total_points"]) == (0, 0)
    assert "This quiz has no questions." in capsys.readouterr().out
    submissions = (await client.get("/submissions", params={"quiz_id": quiz_id})).json()
    assert [s["status"] for s in submissions] == ["submitted"]
