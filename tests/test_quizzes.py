import pytest


@pytest.mark.asyncio
async def test_create_and_get_quiz(client, author):
    r = await client.post(
        "/quizzes",
        json={"title": "Algebra", "description": "Basics", "created_by": author, "time_limit_minutes": 15},
    )
    assert r.status_code == 201
    assert r.json()["message"] == "Quiz created successfully"
    quiz_id = r.json()["quiz_id"]

    quiz = (await client.get(f"/quizzes/{quiz_id}")).json()
    assert quiz["title"] == "Algebra"
    assert quiz["description"] == "Basics"
    assert quiz["created_by"] == author
    assert quiz["time_limit_minutes"] == 15
    assert quiz["is_published"] is False


@pytest.mark.asyncio
async def test_create_quiz_requires_title_and_author(client, author):
    r = await client.post("/quizzes", json={"created_by": author})
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "title"

    r = await client.post("/quizzes", json={"title": "No author"})
    assert r.status_code == 400

    r = await client.post("/quizzes", json={"title": "Ghost author", "created_by": 999})
    assert r.status_code == 400
    assert r.json()["detail"]["details"][0]["field"] == "created_by"


@pytest.mark.asyncio
async def test_list_quizzes_by_published_flag(client, author):
    await client.post("/quizzes", json={"title": "Draft", "created_by": author})
    await client.post("/quizzes", json={"title": "Live", "created_by": author, "is_published": True})

    assert [q["title"] for q in (await client.get("/quizzes")).json()] == ["Draft", "Live"]
    published = (await client.get("/quizzes", params={"is_published": "true"})).json()
    assert [q["title"] for q in published] == ["Live"]
    unpublished = (await client.get("/quizzes", params={"is_published": "false"})).json()
    assert [q["title"] for q in unpublished] == ["Draft"]
    assert (await client.get("/quizzes/unpublished")).json() == unpublished


@pytest.mark.asyncio
async def test_update_quiz_is_partial(client, create_quiz):
    quiz_id = (await create_quiz(title="Original", description="Keep me"))["quiz_id"]

    r = await client.put(f"/quizzes/{quiz_id}", json={"is_published": True})
    assert r.status_code == 200

    quiz = (await client.get(f"/quizzes/{quiz_id}")).json()
    assert quiz["is_published"] is True
    assert quiz["title"] == "Original"
    assert quiz["description"] == "Keep me"


@pytest.mark.asyncio
async def test_missing_quiz_returns_404(client):
    r = await client.get("/quizzes/123")
    assert r.status_code == 404
    assert r.json()["detail"]["message"] == "Quiz not found"
    assert (await client.put("/quizzes/123", json={"title": "x"})).status_code == 404
    assert (await client.delete("/quizzes/123")).status_code == 404


@pytest.mark.asyncio
async def test_delete_quiz_cascades_to_questions_and_options(client, create_quiz):
    quiz = await create_quiz({"type": "multiple_choice", "options": [("A", True), ("B", False)]}, {"type": "essay"})
    mc = quiz["questions"][0]

    r = await client.delete(f"/quizzes/{quiz['quiz_id']}")
    assert r.status_code == 204

    assert (await client.get(f"/quizzes/{quiz['quiz_id']}")).status_code == 404
    assert (await client.get(f"/questions/quiz/{quiz['quiz_id']}")).json() == []
    assert (await client.get(f"/questions/{mc['question_id']}")).status_code == 404
    assert (await client.get(f"/questions/options/{mc['options'][0]}")).status_code == 404


@pytest.mark.asyncio
async def test_deleting_quiz_leaves_submission_reads_working(client, create_quiz, student):
    quiz = await create_quiz({"type": "essay", "points": 2})
    kept = await create_quiz({"type": "essay"})
    r = await client.post("/submissions", json={"quiz_id": quiz["quiz_id"], "user_id": student})
    submission_id = r.json()["submission_id"]
    await client.post(
        f"/submissions/{submission_id}/answers",
        json={"question_id": quiz["questions"][0]["question_id"], "answer_text": "text"},
    )
    await client.post("/submissions", json={"quiz_id": kept["quiz_id"], "user_id": student})

    assert (await client.delete(f"/quizzes/{quiz['quiz_id']}")).status_code == 204

    listed = (await client.get("/submissions")).json()
    assert [s["quiz_id"] for s in listed] == [kept["quiz_id"]]
    assert (await client.get(f"/submissions/{submission_id}")).status_code == 404
