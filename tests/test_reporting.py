import pytest

from quizapp.core.security import create_access_token


async def take(client, quiz, user_id, option_index=None):
    r = await client.post("/submissions", json={"quiz_id": quiz["quiz_id"], "user_id": user_id})
    submission_id = r.json()["submission_id"]
    if option_index is not None:
        question = quiz["questions"][0]
        await client.post(
            f"/submissions/{submission_id}/answers",
            json={"question_id": question["question_id"], "selected_option_id": question["options"][option_index]},
        )
        await client.put(f"/submissions/{submission_id}/complete")
    return submission_id


@pytest.fixture
async def graded_quiz(create_quiz):
    return await create_quiz(
        {"type": "multiple_choice", "points": 2, "options": [("right", True), ("wrong", False)]},
        title="Graded",
    )


@pytest.mark.asyncio
async def test_admin_routes_require_a_token(client):
    assert (await client.get("/submissions/admin/statistics")).status_code == 401
    assert (await client.get("/submissions/admin/submissions")).status_code == 401
    r = await client.get("/submissions/admin/statistics", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_admin_routes_reject_non_admins(client, student):
    headers = {"Authorization": f"Bearer {create_access_token({'sub': str(student), 'is_admin': False})}"}
    r = await client.get("/submissions/admin/statistics", params={"is_admin": "true"}, headers=headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_statistics_over_submitted_attempts(client, graded_quiz, create_quiz, register, student, admin_headers):
    other = await register("other")
    third = await register("third")
    await create_quiz(title="Unattempted")
    await take(client, graded_quiz, student, option_index=0)
    await take(client, graded_quiz, other, option_index=1)
    await take(client, graded_quiz, third)

    r = await client.get("/submissions/admin/statistics", headers=admin_headers)

    assert r.status_code == 200
    stats = r.json()
    assert stats["totalQuizzes"] == 2
    assert stats["totalSubmissions"] == 2
    assert stats["averageScore"] == 50
    assert stats["passRate"] == 50
    assert stats["quizzes"] == [
        {
            "quiz_id": graded_quiz["quiz_id"],
            "title": "Graded",
            "attempts": 2,
            "avgScore": 1,
            "highScore": 2,
            "lowScore": 0,
        }
    ]


@pytest.mark.asyncio
async def test_statistics_with_no_submissions(client, admin_headers):
    stats = (await client.get("/submissions/admin/statistics", headers=admin_headers)).json()
    assert stats == {"totalQuizzes": 0, "totalSubmissions": 0, "averageScore": 0, "passRate": 0, "quizzes": []}


@pytest.mark.asyncio
async def test_zero_point_attempt_never_passes(client, create_quiz, student, admin_headers):
    quiz = await create_quiz({"type": "essay"})
    submission_id = await take(client, quiz, student)
    await client.put(f"/submissions/{submission_id}/complete")

    stats = (await client.get("/submissions/admin/statistics", headers=admin_headers)).json()

    assert stats["totalSubmissions"] == 1
    assert stats["passRate"] == 0
    assert stats["averageScore"] == 0


@pytest.mark.asyncio
async def test_admin_submission_list(client, graded_quiz, register, student, admin_headers):
    other = await register("other")
    done = await take(client, graded_quiz, student, option_index=0)
    open_id = await take(client, graded_quiz, other)

    rows = (await client.get("/submissions/admin/submissions", headers=admin_headers)).json()
    assert {r["submission_id"] for r in rows} == {done, open_id}
    row = next(r for r in rows if r["submission_id"] == done)
    assert row["quiz_title"] == "Graded"
    assert row["username"] == "student"
    assert row["email"] == "student@example.com"
    assert row["score"] == 2

    submitted = (
        await client.get("/submissions/admin/submissions", params={"status": "submitted"}, headers=admin_headers)
    ).json()
    assert [r["submission_id"] for r in submitted] == [done]
    by_user = (
        await client.get("/submissions/admin/submissions", params={"user_id": other}, headers=admin_headers)
    ).json()
    assert [r["submission_id"] for r in by_user] == [open_id]
