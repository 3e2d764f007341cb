import pytest


@pytest.mark.asyncio
async def test_questions_listed_in_display_order(client, create_quiz):
    quiz = await create_quiz(
        {"type": "essay", "text": "third", "order": 2},
        {"type": "essay", "text": "first", "order": 1},
        {"type": "essay", "text": "second", "order": 1},
    )

    questions = (await client.get(f"/questions/quiz/{quiz['quiz_id']}")).json()

    assert [q["question_text"] for q in questions] == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_question_defaults_and_fetch(client, create_quiz):
    quiz_id = (await create_quiz())["quiz_id"]
    r = await client.post(
        "/questions",
        json={"quiz_id": quiz_id, "question_text": "Is water wet?", "question_type": "true_false"},
    )
    assert r.status_code == 201
    question = (await client.get(f"/questions/{r.json()['question_id']}")).json()
    assert question["points"] == 1
    assert question["display_order"] == 0
    assert question["quiz_id"] == quiz_id


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fields",
    [
        {"question_type": "matching"},
        {"points": 0},
        {"question_text": ""},
    ],
)
async def test_invalid_question_rejected(client, create_quiz, fields):
    quiz_id = (await create_quiz())["quiz_id"]
    payload = {"quiz_id": quiz_id, "question_text": "Q", "question_type": "essay", **fields}
    r = await client.post("/questions", json=payload)
    assert r.status_code == 400
    assert r.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_question_for_unknown_quiz(client):
    r = await client.post("/questions", json={"quiz_id": 404, "question_text": "Q", "question_type": "essay"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_and_delete_question(client, create_quiz):
    quiz = await create_quiz({"type": "multiple_choice", "options": [("A", True)]})
    question = quiz["questions"][0]

    r = await client.put(f"/questions/{question['question_id']}", json={"points": 5, "question_text": "Updated"})
    assert r.status_code == 200
    updated = (await client.get(f"/questions/{question['question_id']}")).json()
    assert updated["points"] == 5
    assert updated["question_text"] == "Updated"
    assert updated["question_type"] == "multiple_choice"

    assert (await client.delete(f"/questions/{question['question_id']}")).status_code == 204
    assert (await client.get(f"/questions/{question['question_id']}")).status_code == 404
    assert (await client.get(f"/questions/options/{question['options'][0]}")).status_code == 404
    assert (await client.delete(f"/questions/{question['question_id']}")).status_code == 404


@pytest.mark.asyncio
async def test_option_crud(client, create_quiz):
    quiz = await create_quiz({"type": "multiple_choice", "options": [("A", False), ("B", True)]})
    question = quiz["questions"][0]
    a, b = question["options"]

    options = (await client.get(f"/questions/{question['question_id']}/options")).json()
    assert [(o["option_text"], o["is_correct"]) for o in options] == [("A", False), ("B", True)]

    r = await client.put(f"/questions/options/{a}", json={"option_text": "A!"})
    assert r.status_code == 200
    assert (await client.get(f"/questions/options/{a}")).json()["option_text"] == "A!"

    assert (await client.delete(f"/questions/options/{a}")).status_code == 204
    assert (await client.get(f"/questions/options/{a}")).status_code == 404
    remaining = (await client.get(f"/questions/{question['question_id']}/options")).json()
    assert [o["option_id"] for o in remaining] == [b]


@pytest.mark.asyncio
async def test_marking_an_option_correct_demotes_the_previous_one(client, create_quiz):
    quiz = await create_quiz({"type": "multiple_choice", "options": [("A", True), ("B", False)]})
    question = quiz["questions"][0]
    a, b = question["options"]

    await client.put(f"/questions/options/{b}", json={"is_correct": True})
    options = {o["option_id"]: o["is_correct"] for o in (await client.get(f"/questions/{question['question_id']}/options")).json()}
    assert options == {a: False, b: True}

    r = await client.post(f"/questions/{question['question_id']}/options", json={"option_text": "C", "is_correct": True})
    c = r.json()["option_id"]
    options = {o["option_id"]: o["is_correct"] for o in (await client.get(f"/questions/{question['question_id']}/options")).json()}
    assert options == {a: False, b: False, c: True}


@pytest.mark.asyncio
async def test_options_for_unknown_question(client):
    assert (await client.get("/questions/55/options")).status_code == 404
    r = await client.post("/questions/55/options", json={"option_text": "x"})
    assert r.status_code == 404
